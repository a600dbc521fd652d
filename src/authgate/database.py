"""Async database engine and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from authgate.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite's async driver does not accept pool sizing arguments
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=False,
    **_engine_kwargs(settings.database_url),
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with async_session_factory() as session:
        yield session


@asynccontextmanager
async def get_session_context() -> AsyncGenerator[AsyncSession, None]:
    """Session context manager for CLI commands and background jobs."""
    async with async_session_factory() as session:
        yield session


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
