"""Health check endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authgate.api.deps import SessionDep
from authgate.config import settings
from authgate.tasks.queue import queue

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check - just confirms the service is running."""
    return {"status": "ok"}


@router.get("/db")
async def health_check_db(session: SessionDep):
    """Health check with database connectivity."""
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database health check failed: {e!r}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "disconnected"},
        )
    return {"status": "ok", "database": "connected"}


@router.get("/ready")
async def readiness_check(session: SessionDep):
    """Readiness check - confirms the database and job queue are reachable.

    GitHub login is reported but does not affect readiness; password
    signup and login work without it.
    """
    errors = {}

    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database readiness check failed: {e!r}")
        db_status = "disconnected"
        errors["database"] = str(e)

    try:
        await queue.redis.ping()  # type: ignore[attr-defined]
        redis_status = "connected"
    except (RedisError, OSError) as e:
        logger.error(f"Redis readiness check failed: {e!r}")
        redis_status = "disconnected"
        errors["redis"] = str(e)

    response = {
        "status": "ok" if not errors else "error",
        "database": db_status,
        "redis": redis_status,
        "github_configured": settings.github_configured,
    }

    if errors:
        return JSONResponse(status_code=503, content=response)
    return response
