"""
Scheduling Infrastructure Services

Adapters for tokens, outbound notifications and calendar sync.
"""

from bookwise.domains.scheduling.infrastructure.services.calendar_sync_client import HttpCalendarSyncClient
from bookwise.domains.scheduling.infrastructure.services.notification_dispatcher import (
    LoggingNotificationDispatcher,
)
from bookwise.domains.scheduling.infrastructure.services.token_service import SelfServeTokenService

__all__ = [
    "HttpCalendarSyncClient",
    "LoggingNotificationDispatcher",
    "SelfServeTokenService",
]
