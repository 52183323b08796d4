"""
Application lifecycle management using the FastAPI lifespan pattern.

Startup configures logging and starts the periodic sweeps; shutdown stops
them, lets in-flight notifications and calendar pushes finish, and closes
the database pool.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bookwise.config.settings import get_settings
from bookwise.core.container import get_container
from bookwise.core.shared import configure_logging
from bookwise.domains.scheduling.infrastructure.scheduler import SweepScheduler

logger = logging.getLogger(__name__)

SIDE_EFFECT_DRAIN_TIMEOUT = 10.0


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self) -> None:
        self._scheduler: SweepScheduler | None = None
        self._initialized = False

    @property
    def scheduler(self) -> SweepScheduler | None:
        return self._scheduler

    async def startup(self) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        settings = get_settings()
        configure_logging(
            level=settings.LOG_LEVEL,
            format_type=settings.LOG_FORMAT,
            log_file=settings.LOG_FILE,
        )
        logger.info("Starting application lifecycle...")

        self._verify_configurations()
        await self._start_scheduler()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")

        if self._scheduler is not None:
            await self._scheduler.stop()

        await get_container().base.get_side_effect_runner().drain(timeout=SIDE_EFFECT_DRAIN_TIMEOUT)

        from bookwise.database.async_db import close_database

        await close_database()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    async def _start_scheduler(self) -> None:
        from bookwise.database.async_db import AsyncSessionLocal

        settings = get_settings()
        container = get_container()
        self._scheduler = SweepScheduler(
            session_factory=AsyncSessionLocal,
            container_factory=container.scheduling.for_session,
            reminder_interval_seconds=settings.REMINDER_DISPATCH_INTERVAL_SECONDS,
            offer_expiry_interval_seconds=settings.OFFER_EXPIRY_INTERVAL_SECONDS,
            reminder_batch_size=settings.REMINDER_DISPATCH_BATCH_SIZE,
            enabled=settings.SCHEDULER_ENABLED,
        )
        try:
            await self._scheduler.start()
        except Exception as e:
            logger.error(f"Failed to start sweep scheduler: {e}", exc_info=True)

    def _verify_configurations(self) -> None:
        settings = get_settings()
        if not settings.CALENDAR_SYNC_BASE_URL:
            logger.warning("CALENDAR_SYNC_BASE_URL not configured - calendar sync will be disabled")
        if not settings.SCHEDULER_ENABLED:
            logger.info("Periodic sweeps are disabled via SCHEDULER_ENABLED=False")


# Global lifecycle manager instance
_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()

    await lifecycle.startup()

    yield

    await lifecycle.shutdown()
