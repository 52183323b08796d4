"""
External Collaborator Ports

Notification delivery, calendar sync and tenant configuration are owned
outside the scheduling core. Notifications and calendar sync are always
invoked fire-and-forget.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import Booking, WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import (
    CalendarAction,
    NotificationSettings,
    PolicySettings,
    TimeRange,
    WaitlistSettings,
)


@runtime_checkable
class INotificationDispatcher(Protocol):
    """Each send receives a booking with customer, service and staff resolved."""

    async def send_booking_confirmation(self, booking: Booking) -> None: ...

    async def send_deposit_request(self, booking: Booking) -> None: ...

    async def send_cancellation_notification(self, booking: Booking) -> None: ...

    async def send_reschedule_link(self, booking: Booking, link: str) -> None: ...

    async def send_cancel_link(self, booking: Booking, link: str) -> None: ...

    async def send_reminder(self, booking: Booking) -> None: ...

    async def send_follow_up(self, booking: Booking) -> None: ...

    async def send_consult_follow_up(self, booking: Booking) -> None: ...

    async def send_aftercare(self, booking: Booking) -> None: ...

    async def send_treatment_check_in(self, booking: Booking) -> None: ...

    async def send_waitlist_offer(self, entry: WaitlistEntry, link: str) -> None: ...


@runtime_checkable
class ICalendarSync(Protocol):
    async def sync_booking_to_calendar(self, booking: Booking, action: CalendarAction) -> None:
        """Push a booking change to the staff member's external calendar."""
        ...

    async def pull_external_events(self, staff_id: str, day: date) -> list[TimeRange]:
        """
        Busy intervals from the staff member's external calendars on ``day``.

        Raises:
            IntegrationException: When the calendar provider cannot be reached
        """
        ...


@runtime_checkable
class ITenantSettingsProvider(Protocol):
    """Defaults merged with tenant overrides; None when the tenant does not exist."""

    async def get_policy_settings(self, tenant_id: str) -> PolicySettings | None: ...

    async def get_notification_settings(self, tenant_id: str) -> NotificationSettings | None: ...

    async def get_waitlist_settings(self, tenant_id: str) -> WaitlistSettings | None: ...

    async def get_timezone(self, tenant_id: str) -> str: ...


@runtime_checkable
class IWaitlistOfferSink(Protocol):
    """What the booking lifecycle needs from the waitlist: offering a freed slot."""

    async def offer_open_slot(self, cancelled_booking: Booking) -> int: ...
