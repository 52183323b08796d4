"""
Self-Serve Service

Mediates customer actions authorized by single-use tokens: rescheduling or
cancelling a booking from a link, and claiming a waitlist offer.

Every mutation consumes its token before touching the booking, so a link can
never be replayed, even when the mutation itself is rejected afterwards.
"""

import logging
from datetime import date, datetime
from typing import Any

from bookwise.core.domain import (
    EntityNotFoundException,
    InvalidOperationException,
    PolicyViolationException,
    TokenInvalidException,
)
from bookwise.core.shared import Clock, ensure_utc, utc_now
from bookwise.domains.scheduling.application.dto import CreateBookingRequest, UpdateBookingRequest
from bookwise.domains.scheduling.application.ports import ITenantSettingsProvider, ITokenIssuer
from bookwise.domains.scheduling.domain.entities import Booking, SelfServeToken
from bookwise.domains.scheduling.domain.services import CandidateSlot
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    PolicyAction,
    PolicySettings,
    SelfServeEntry,
    SelfServeKind,
    TokenType,
    WaitlistStatus,
)

from .availability_service import AvailabilityService
from .booking_service import BookingService
from .waitlist_service import WaitlistService

logger = logging.getLogger(__name__)

_POLICY_ACTIONS = {
    TokenType.RESCHEDULE_LINK: PolicyAction.RESCHEDULE,
    TokenType.CANCEL_LINK: PolicyAction.CANCEL,
}


class SelfServeService:
    """
    Self-serve token mediator.

    Example:
        ```python
        summary = await service.get_booking_summary(token, TokenType.CANCEL_LINK)
        booking = await service.execute_cancel(token, reason="Sick")
        ```
    """

    def __init__(
        self,
        token_issuer: ITokenIssuer,
        booking_service: BookingService,
        availability_service: AvailabilityService,
        waitlist_service: WaitlistService,
        tenant_settings: ITenantSettingsProvider,
        clock: Clock = utc_now,
    ):
        self.tokens = token_issuer
        self.bookings = booking_service
        self.availability = availability_service
        self.waitlist = waitlist_service
        self.tenant_settings = tenant_settings
        self.clock = clock

    async def validate_token(self, token: str, type: TokenType) -> tuple[SelfServeToken, Booking]:
        """
        Resolve a booking link to its token record and booking.

        Raises:
            TokenInvalidException: Unknown, used, expired or wrong-type token, or
                a token that does not point at a booking
            EntityNotFoundException: The booking no longer exists
        """
        record = await self.tokens.validate_token(token, type)
        if not record.related_id:
            raise TokenInvalidException(token_type=type.value)

        booking = await self.bookings.find_by_id(record.tenant_id, record.related_id)
        if booking is None:
            raise EntityNotFoundException("Booking", record.related_id)
        return record, booking

    async def get_booking_summary(self, token: str, type: TokenType) -> dict[str, Any]:
        _, booking = await self.validate_token(token, type)
        settings = await self.tenant_settings.get_policy_settings(booking.tenant_id) or PolicySettings()
        policy_text = settings.text_for(_POLICY_ACTIONS.get(type, PolicyAction.CANCEL))
        return {
            "booking": booking.to_summary_dict(),
            "policy_text": policy_text or None,
        }

    async def get_availability(self, token: str, day: date) -> list[CandidateSlot]:
        """Open slots for rescheduling: same service, same staff when one is assigned."""
        _, booking = await self.validate_token(token, TokenType.RESCHEDULE_LINK)
        slots = await self.availability.get_available_slots(
            booking.tenant_id,
            day,
            booking.service_id,
            booking.staff_id,
        )
        return [slot for slot in slots if slot.available]

    async def execute_reschedule(
        self,
        token: str,
        start_time: datetime,
        staff_id: str | None = None,
    ) -> Booking:
        """
        Move the booking to ``start_time`` on the customer's behalf.

        Raises:
            InvalidOperationException: Booking not reschedulable
            PolicyViolationException: Inside the reschedule window
            BookingConflictException: The new time is taken
        """
        record, booking = await self.validate_token(token, TokenType.RESCHEDULE_LINK)
        await self._check_manageable(booking, PolicyAction.RESCHEDULE)

        await self.tokens.mark_used(record.id or "")

        start_time = ensure_utc(start_time)
        updated = await self.bookings.update(
            booking.tenant_id,
            booking.id or "",
            UpdateBookingRequest(start_time=start_time, staff_id=staff_id),
        )
        logger.info(f"Booking {booking.id} rescheduled by customer to {start_time.isoformat()}")
        return await self.bookings.append_audit_entry(
            booking.tenant_id,
            updated.id or "",
            SelfServeEntry(
                kind=SelfServeKind.RESCHEDULED_BY_CUSTOMER,
                at=self.clock(),
                new_start_time=start_time,
            ),
        )

    async def execute_cancel(self, token: str, reason: str | None = None) -> Booking:
        """
        Cancel the booking on the customer's behalf. Freed slots go to the
        waitlist through the regular cancellation path.
        """
        record, booking = await self.validate_token(token, TokenType.CANCEL_LINK)
        await self._check_manageable(booking, PolicyAction.CANCEL)

        await self.tokens.mark_used(record.id or "")

        cancelled = await self.bookings.update_status(booking.tenant_id, booking.id or "", BookingStatus.CANCELLED)
        logger.info(f"Booking {booking.id} cancelled by customer")
        return await self.bookings.append_audit_entry(
            booking.tenant_id,
            cancelled.id or "",
            SelfServeEntry(
                kind=SelfServeKind.CANCELLED_BY_CUSTOMER,
                at=self.clock(),
                reason=reason,
            ),
        )

    async def _check_manageable(self, booking: Booking, action: PolicyAction) -> None:
        verb = "rescheduled" if action == PolicyAction.RESCHEDULE else "cancelled"
        if not booking.status.is_self_serve_manageable():
            raise InvalidOperationException(
                operation=action.value,
                current_state=booking.status.value,
                message=f"This booking cannot be {verb}",
            )

        decision = await self.bookings.check_policy_allowed(booking.tenant_id, booking.id or "", action)
        if not decision.allowed:
            noun = "Reschedule" if action == PolicyAction.RESCHEDULE else "Cancellation"
            raise PolicyViolationException(
                message=decision.policy_text
                or decision.reason
                or f"{noun} not allowed within the policy window",
                policy_text=decision.policy_text,
                hours_remaining=decision.hours_remaining,
                admin_can_override=False,
            )

    # Waitlist claims

    async def get_waitlist_claim_summary(self, token: str) -> dict[str, Any]:
        record = await self.tokens.validate_token(token, TokenType.WAITLIST_CLAIM)
        if not record.related_id:
            raise TokenInvalidException(token_type=TokenType.WAITLIST_CLAIM.value)

        entry = await self.waitlist.get_entry(record.tenant_id, record.related_id)
        if entry.status != WaitlistStatus.OFFERED:
            raise InvalidOperationException(
                operation="claim",
                current_state=entry.status.value,
                message="This offer is no longer available",
            )
        if entry.is_offer_expired(self.clock()):
            raise InvalidOperationException(
                operation="claim",
                current_state=entry.status.value,
                message="This offer has expired",
            )

        return {
            "entry": {
                "id": entry.id,
                "status": entry.status.value,
                "offered_slot": entry.offered_slot.to_dict() if entry.offered_slot else None,
                "offer_expires_at": entry.offer_expires_at.isoformat() if entry.offer_expires_at else None,
            },
        }

    async def claim_waitlist_slot(self, token: str) -> Booking:
        """
        Book the offered slot for the waiting customer.

        Of any number of concurrent claims for one entry at most one reaches
        booking creation; the losers fail on the consumed token or on the
        entry no longer being OFFERED.

        Raises:
            TokenInvalidException: Token unusable or already consumed
            InvalidOperationException: Offer gone, expired or malformed
            BookingConflictException: The slot was taken in the meantime
        """
        record = await self.tokens.validate_token(token, TokenType.WAITLIST_CLAIM)
        if not record.related_id:
            raise TokenInvalidException(token_type=TokenType.WAITLIST_CLAIM.value)

        await self.tokens.mark_used(record.id or "")

        entry, slot = await self.waitlist.reserve_offer(record.related_id)

        try:
            booking = await self.bookings.create(
                entry.tenant_id,
                CreateBookingRequest(
                    customer_id=entry.customer_id,
                    service_id=entry.service_id,
                    staff_id=slot.staff_id or entry.staff_id,
                    start_time=slot.start_time,
                ),
            )
        except Exception as e:
            logger.warning(f"Booking for waitlist entry {entry.id} failed, releasing offer: {e}")
            await self.waitlist.release_offer(entry.id or "")
            raise

        await self.waitlist.resolve_entry(entry.tenant_id, entry.id or "", booking.id or "")
        logger.info(f"Waitlist entry {entry.id} claimed as booking {booking.id}")
        return booking
