"""
Logging Notification Dispatcher

INotificationDispatcher adapter that records every outbound customer message
as a structured log line. Message delivery (email/SMS providers) plugs in by
implementing the same port.
"""

from bookwise.core.shared import get_service_logger
from bookwise.domains.scheduling.application.ports import INotificationDispatcher
from bookwise.domains.scheduling.domain.entities import Booking, WaitlistEntry


class LoggingNotificationDispatcher(INotificationDispatcher):
    def __init__(self, channels: str = "both"):
        self.channels = channels
        self.logger = get_service_logger("notifications")

    def _emit(self, kind: str, booking: Booking, link: str | None = None) -> None:
        customer = booking.customer
        self.logger.info(
            f"Notification {kind} for booking {booking.id}",
            kind=kind,
            channels=self.channels,
            tenant_id=booking.tenant_id,
            booking_id=booking.id,
            customer_id=booking.customer_id,
            recipient=customer.contact if customer else None,
            start_time=booking.start_time.isoformat() if booking.start_time else None,
            service=booking.service.name if booking.service else None,
            staff=booking.staff.name if booking.staff else None,
            link=link,
        )

    async def send_booking_confirmation(self, booking: Booking) -> None:
        self._emit("booking_confirmation", booking)

    async def send_deposit_request(self, booking: Booking) -> None:
        self._emit("deposit_request", booking)

    async def send_cancellation_notification(self, booking: Booking) -> None:
        self._emit("cancellation", booking)

    async def send_reschedule_link(self, booking: Booking, link: str) -> None:
        self._emit("reschedule_link", booking, link)

    async def send_cancel_link(self, booking: Booking, link: str) -> None:
        self._emit("cancel_link", booking, link)

    async def send_reminder(self, booking: Booking) -> None:
        self._emit("reminder", booking)

    async def send_follow_up(self, booking: Booking) -> None:
        self._emit("follow_up", booking)

    async def send_consult_follow_up(self, booking: Booking) -> None:
        self._emit("consult_follow_up", booking)

    async def send_aftercare(self, booking: Booking) -> None:
        self._emit("aftercare", booking)

    async def send_treatment_check_in(self, booking: Booking) -> None:
        self._emit("treatment_check_in", booking)

    async def send_waitlist_offer(self, entry: WaitlistEntry, link: str) -> None:
        slot = entry.offered_slot
        self.logger.info(
            f"Notification waitlist_offer for entry {entry.id}",
            kind="waitlist_offer",
            channels=self.channels,
            tenant_id=entry.tenant_id,
            entry_id=entry.id,
            customer_id=entry.customer_id,
            start_time=slot.start_time.isoformat() if slot else None,
            service=slot.service_name if slot else None,
            expires_at=entry.offer_expires_at.isoformat() if entry.offer_expires_at else None,
            link=link,
        )
