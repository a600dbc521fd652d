"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authgate import __version__
from authgate.api.middleware import REQUEST_ID_HEADER, RequestIDMiddleware
from authgate.api.router import api_router
from authgate.config import settings
from authgate.database import close_db
from authgate.errors import AuthError
from authgate.schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup: schema is managed by Alembic migrations
    yield
    await close_db()


app = FastAPI(
    title="Authgate API",
    description="Credential and session issuance service",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug_enabled else None,
    redoc_url="/api/redoc" if settings.debug_enabled else None,
    openapi_url="/api/openapi.json" if settings.debug_enabled else None,
)

app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.exception_handler(AuthError)
async def auth_error_handler(_request: Request, exc: AuthError) -> JSONResponse:
    """Render classified auth failures with their kind as the error code."""
    if exc.kind.http_status >= 500:
        logger.error(f"{exc.kind.value}: {exc.message}")
    body = ErrorResponse(detail=exc.message, code=exc.kind.value)
    return JSONResponse(status_code=exc.kind.http_status, content=body.model_dump())


app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    from authgate.logging import get_log_config

    uvicorn.run(
        "authgate.main:app",
        host="0.0.0.0",
        port=8084,
        reload=settings.is_development,
        log_config=get_log_config(),
    )
