"""Sweep Scheduler for the scheduling domain.

APScheduler-based async scheduler running the two periodic sweeps:
- reminder dispatch: sends reminders that have come due
- offer expiry: flips lapsed waitlist offers to EXPIRED

Each run opens its own database session, so a sweep never shares a
transaction with request handling or with the other sweep.
"""

from collections.abc import Callable
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-not-found]
from apscheduler.triggers.interval import IntervalTrigger  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookwise.core.shared import get_scheduler_logger

logger = get_scheduler_logger("sweeps")

REMINDER_JOB_ID = "reminder_dispatch"
OFFER_EXPIRY_JOB_ID = "offer_expiry"


class SweepScheduler:
    """Owns the periodic sweep jobs.

    ``container_factory`` builds the per-session service container; the
    scheduler only needs its ``reminder_dispatch_service()`` and
    ``waitlist_service()``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        container_factory: Callable[[AsyncSession], Any],
        reminder_interval_seconds: int = 60,
        offer_expiry_interval_seconds: int = 60,
        reminder_batch_size: int = 100,
        enabled: bool = True,
    ):
        """Initialize scheduler.

        Args:
            session_factory: Factory for fresh async sessions.
            container_factory: Builds the scheduling services for a session.
            reminder_interval_seconds: Seconds between reminder sweeps.
            offer_expiry_interval_seconds: Seconds between offer expiry sweeps.
            reminder_batch_size: Reminders handled per sweep.
            enabled: Whether scheduler is enabled.
        """
        self.session_factory = session_factory
        self.container_factory = container_factory
        self.reminder_interval_seconds = reminder_interval_seconds
        self.offer_expiry_interval_seconds = offer_expiry_interval_seconds
        self.reminder_batch_size = reminder_batch_size
        self.enabled = enabled

        self._scheduler: AsyncIOScheduler | None = None
        self._is_running = False

    async def start(self) -> None:
        """Start the scheduler."""
        if not self.enabled:
            logger.info("SweepScheduler is disabled, skipping start")
            return

        if self._is_running:
            logger.warning("SweepScheduler already running")
            return

        scheduler = AsyncIOScheduler()
        self._scheduler = scheduler

        # max_instances=1 keeps a slow sweep from overlapping the next one
        scheduler.add_job(
            self.run_reminder_dispatch,
            IntervalTrigger(seconds=self.reminder_interval_seconds),
            id=REMINDER_JOB_ID,
            replace_existing=True,
            name="Reminder Dispatch",
            max_instances=1,
            coalesce=True,
        )
        scheduler.add_job(
            self.run_offer_expiry,
            IntervalTrigger(seconds=self.offer_expiry_interval_seconds),
            id=OFFER_EXPIRY_JOB_ID,
            replace_existing=True,
            name="Waitlist Offer Expiry",
            max_instances=1,
            coalesce=True,
        )

        scheduler.start()
        self._is_running = True
        logger.info(
            f"SweepScheduler started (reminders every {self.reminder_interval_seconds}s, "
            f"offer expiry every {self.offer_expiry_interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("SweepScheduler stopped")

    async def run_reminder_dispatch(self) -> dict[str, int] | None:
        """One reminder sweep. Errors are logged so the next run still happens."""
        try:
            async with self.session_factory() as session:
                container = self.container_factory(session)
                return await container.reminder_dispatch_service().dispatch_due(
                    batch_size=self.reminder_batch_size
                )
        except Exception as e:
            logger.error(f"Error in reminder dispatch sweep: {e}", exc_info=True)
            return None

    async def run_offer_expiry(self) -> int | None:
        """One offer expiry sweep. Errors are logged so the next run still happens."""
        try:
            async with self.session_factory() as session:
                container = self.container_factory(session)
                return await container.waitlist_service().expire_stale_offers()
        except Exception as e:
            logger.error(f"Error in waitlist offer expiry sweep: {e}", exc_info=True)
            return None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._is_running

    def get_jobs_info(self) -> list[dict[str, Any]]:
        """Get information about scheduled jobs."""
        if not self._scheduler:
            return []

        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            }
            for job in self._scheduler.get_jobs()
        ]
