"""
Base Container - Shared Singletons.

Single Responsibility: Hold the process-wide collaborators every session
reuses (settings, side-effect runner, notification and calendar adapters).
"""

import logging

from bookwise.config.settings import Settings, get_settings
from bookwise.core.shared import SideEffectRunner, get_side_effect_runner
from bookwise.domains.scheduling.application.ports import ICalendarSync, INotificationDispatcher
from bookwise.domains.scheduling.infrastructure.services import (
    HttpCalendarSyncClient,
    LoggingNotificationDispatcher,
)

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    Collaborators can be swapped in (tests, alternative providers) by passing
    them to the constructor.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        notifications: INotificationDispatcher | None = None,
        calendar_sync: ICalendarSync | None = None,
        side_effects: SideEffectRunner | None = None,
    ):
        self.settings = settings or get_settings()
        self._notifications = notifications
        self._calendar_sync = calendar_sync
        self._side_effects = side_effects

        logger.info("BaseContainer initialized")

    def get_notification_dispatcher(self) -> INotificationDispatcher:
        if self._notifications is None:
            self._notifications = LoggingNotificationDispatcher()
        return self._notifications

    def get_calendar_sync(self) -> ICalendarSync:
        if self._calendar_sync is None:
            if not self.settings.CALENDAR_SYNC_BASE_URL:
                logger.info("CALENDAR_SYNC_BASE_URL not configured, calendar sync disabled")
            self._calendar_sync = HttpCalendarSyncClient(
                base_url=self.settings.CALENDAR_SYNC_BASE_URL,
                timeout=self.settings.CALENDAR_SYNC_TIMEOUT,
            )
        return self._calendar_sync

    def get_side_effect_runner(self) -> SideEffectRunner:
        if self._side_effects is None:
            self._side_effects = get_side_effect_runner()
        return self._side_effects
