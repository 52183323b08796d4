"""
Async database engine and sessions.

Every connection runs with the session timezone pinned to UTC so that
booking overlap checks and sweep cutoffs compare like with like.
"""

import logging
from typing import Any, AsyncGenerator

from sqlalchemy import URL
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from bookwise.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

APPLICATION_NAME = "bookwise"


def get_async_database_url(settings: Settings | None = None) -> URL:
    """asyncpg URL for the configured database. Credentials are escaped by SQLAlchemy."""
    settings = settings or get_settings()
    if not settings.DB_NAME:
        raise ValueError("Database name is required (DB_NAME)")

    return URL.create(
        drivername="postgresql+asyncpg",
        username=settings.DB_USER or "postgres",
        password=settings.DB_PASSWORD or None,
        host=settings.DB_HOST or "localhost",
        port=settings.DB_PORT or 5432,
        database=settings.DB_NAME,
    )


def _engine_options(settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
        "connect_args": {
            "server_settings": {"timezone": "UTC", "application_name": APPLICATION_NAME},
        },
    }
    # Sweeps and request handlers share the pool; debug runs without one
    if settings.DEBUG:
        options["poolclass"] = NullPool
    else:
        options.update(
            poolclass=AsyncAdaptedQueuePool,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
    return options


def create_async_database_engine(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()
    try:
        options = _engine_options(settings)
        logger.info(f"Creating async database engine ({options['poolclass'].__name__})")
        return create_async_engine(get_async_database_url(settings), **options)
    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


async_engine = create_async_database_engine()

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Services commit their own units of work; anything left open is
    committed here, and any error rolls the session back.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Request session rolled back: {e}")
            await session.rollback()
            raise


async def close_database() -> None:
    """Dispose the engine's connection pool."""
    await async_engine.dispose()
    logger.info("Database connections closed")
