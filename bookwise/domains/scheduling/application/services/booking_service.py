"""
Booking Service

Owns the canonical booking record: creation with conflict detection, the
policy-aware status state machine with admin overrides, follow-up reminder
scheduling, bulk updates and self-serve link issuance.

Outbound notifications and calendar sync run after the state change is
committed, through the SideEffectRunner, and never fail the call.
"""

import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import Any

from bookwise.core.domain import (
    AuthorizationException,
    BookingConflictException,
    EntityNotFoundException,
    InvalidOperationException,
    PolicyViolationException,
    ValidationException,
)
from bookwise.core.shared import Clock, SideEffectRunner, ensure_utc, get_audit_logger, utc_now
from bookwise.domains.scheduling.application.dto import (
    Actor,
    BookingPage,
    BulkUpdatePayload,
    BulkUpdateResult,
    CreateBookingRequest,
    SelfServeLink,
    UpdateBookingRequest,
)
from bookwise.domains.scheduling.application.ports import (
    BookingFilters,
    IBookingRepository,
    ICalendarSync,
    ICatalogRepository,
    INotificationDispatcher,
    IReminderRepository,
    ITenantSettingsProvider,
    ITokenIssuer,
    IUnitOfWork,
    IWaitlistOfferSink,
)
from bookwise.domains.scheduling.domain.entities import Booking, Reminder
from bookwise.domains.scheduling.domain.services import (
    BookingPolicy,
    PlannedReminder,
    PolicyDecision,
    plan_booking_reminder,
    plan_completion_reminders,
)
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    BulkAction,
    CalendarAction,
    DepositRequestEntry,
    NotificationSettings,
    OverrideEntry,
    OverrideKind,
    PolicyAction,
    SelfServeEntry,
    SelfServeKind,
    StaffRole,
    TokenType,
)

logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


class BookingService:
    """
    Booking lifecycle manager.

    The waitlist is an optional collaborator: when it is not wired in, a
    cancellation simply frees the slot without offering it to anyone.

    Example:
        ```python
        service = BookingService(...)
        booking = await service.create("tenant-1", CreateBookingRequest(...))
        await service.update_status("tenant-1", booking.id, BookingStatus.COMPLETED)
        ```
    """

    def __init__(
        self,
        booking_repository: IBookingRepository,
        catalog_repository: ICatalogRepository,
        reminder_repository: IReminderRepository,
        unit_of_work: IUnitOfWork,
        token_issuer: ITokenIssuer,
        notifications: INotificationDispatcher,
        calendar_sync: ICalendarSync,
        tenant_settings: ITenantSettingsProvider,
        side_effects: SideEffectRunner,
        waitlist: IWaitlistOfferSink | None = None,
        web_url: str = "http://localhost:3000",
        reminder_lead_hours: int = 24,
        link_expiry_hours: int = 48,
        bulk_max_ids: int = 50,
        clock: Clock = utc_now,
    ):
        self.booking_repo = booking_repository
        self.catalog_repo = catalog_repository
        self.reminder_repo = reminder_repository
        self.uow = unit_of_work
        self.tokens = token_issuer
        self.notifications = notifications
        self.calendar_sync = calendar_sync
        self.tenant_settings = tenant_settings
        self.side_effects = side_effects
        self.waitlist = waitlist
        self.web_url = web_url.rstrip("/")
        self.reminder_lead_hours = reminder_lead_hours
        self.link_expiry_hours = link_expiry_hours
        self.bulk_max_ids = bulk_max_ids
        self.clock = clock
        self.policy = BookingPolicy()

    # Queries

    async def find_by_id(self, tenant_id: str, booking_id: str) -> Booking | None:
        return await self.booking_repo.find_by_id(tenant_id, booking_id)

    async def get(self, tenant_id: str, booking_id: str) -> Booking:
        booking = await self.booking_repo.find_by_id(tenant_id, booking_id)
        if booking is None:
            raise EntityNotFoundException("Booking", booking_id)
        return booking

    async def find_all(
        self,
        tenant_id: str,
        filters: BookingFilters | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> BookingPage:
        page = max(page, 1)
        page_size = max(page_size, 1)
        items, total = await self.booking_repo.find_all(tenant_id, filters or BookingFilters(), page, page_size)
        return BookingPage(items=items, total=total, page=page, page_size=page_size)

    async def get_calendar(
        self,
        tenant_id: str,
        date_from: datetime,
        date_to: datetime,
        staff_id: str | None = None,
    ) -> list[Booking]:
        """
        Bookings that occupy a calendar view: blocking statuses only, starting
        at or after ``date_from`` and ending at or before ``date_to``.

        Raises:
            ValidationException: ``date_to`` is not after ``date_from``
        """
        range_start, range_end = ensure_utc(date_from), ensure_utc(date_to)
        if range_end <= range_start:
            raise ValidationException("dateTo must be after dateFrom", field="date_to")
        return await self.booking_repo.find_calendar(tenant_id, range_start, range_end, staff_id)

    # Creation and edits

    async def create(self, tenant_id: str, request: CreateBookingRequest) -> Booking:
        """
        Create a booking.

        With a staff member, the staff row is locked for the rest of the
        transaction so two overlapping creates for that staff serialize and
        the second one sees the first in its conflict check.

        Raises:
            ValidationException: Unknown service or staff
            BookingConflictException: Staff already busy in [start, end)
        """
        service = await self.catalog_repo.get_service(tenant_id, request.service_id)
        if service is None:
            raise ValidationException("Service not found", field="service_id")

        now = self.clock()
        booking = Booking.schedule(
            tenant_id=tenant_id,
            customer_id=request.customer_id,
            service=service,
            start_time=ensure_utc(request.start_time),
            staff_id=request.staff_id,
            notes=request.notes,
            custom_fields=request.custom_fields,
        )
        if service.deposit_required:
            booking.record(DepositRequestEntry(sent_at=now))

        try:
            if booking.staff_id:
                await self._lock_and_check_conflict(tenant_id, booking)
            booking = await self.booking_repo.add(booking)

            reminder = plan_booking_reminder(booking.start_time, now, self.reminder_lead_hours)  # type: ignore[arg-type]
            if reminder is not None:
                await self.reminder_repo.add_many(self._reminders_for(booking, [reminder]))

            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(
            f"Booking {booking.id} created for tenant {tenant_id} "
            f"(status={booking.status.value}, staff={booking.staff_id})"
        )

        booking = await self._reload(tenant_id, booking)
        if service.deposit_required:
            self._notify("deposit_request", self.notifications.send_deposit_request(booking), booking)
        else:
            self._notify("booking_confirmation", self.notifications.send_booking_confirmation(booking), booking)
        self._sync_calendar(booking, CalendarAction.CREATE)
        return booking

    async def update(self, tenant_id: str, booking_id: str, request: UpdateBookingRequest) -> Booking:
        """
        Edit a booking. A new start time recomputes the end from the service
        duration and re-runs the conflict check, ignoring the booking itself.
        """
        try:
            booking = await self.booking_repo.find_by_id_for_update(tenant_id, booking_id)
            if booking is None:
                raise EntityNotFoundException("Booking", booking_id)

            moved = request.start_time is not None or (
                request.staff_id is not None and request.staff_id != booking.staff_id
            )
            if moved:
                service = booking.service or await self.catalog_repo.get_service(tenant_id, booking.service_id)
                if service is None:
                    raise ValidationException("Service not found", field="service_id")
                start_time = ensure_utc(request.start_time) if request.start_time else booking.start_time
                if start_time is None:
                    raise ValidationException("Booking has no start time", field="start_time")
                booking.reschedule(start_time, service.duration_minutes)
                if request.staff_id is not None:
                    booking.staff_id = request.staff_id
                if booking.staff_id:
                    await self._lock_and_check_conflict(tenant_id, booking)

            if request.notes is not None:
                booking.notes = request.notes
            if request.custom_fields is not None:
                booking.custom_fields = {**booking.custom_fields, **request.custom_fields}

            booking = await self.booking_repo.update(booking)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        booking = await self._reload(tenant_id, booking)
        self._sync_calendar(booking, CalendarAction.UPDATE)
        return booking

    # Policy

    async def check_policy_allowed(self, tenant_id: str, booking_id: str, action: PolicyAction) -> PolicyDecision:
        """
        Whether a cancel/reschedule is inside the tenant's policy window.

        Allowed when the policy is disabled, the booking does not exist, or the
        start is at least the window away.
        """
        booking = await self.booking_repo.find_by_id(tenant_id, booking_id)
        if booking is None:
            return PolicyDecision.allow()
        settings = await self.tenant_settings.get_policy_settings(tenant_id)
        return self.policy.evaluate(settings, action, booking.hours_until_start(self.clock()))

    # Status machine

    async def update_status(
        self,
        tenant_id: str,
        booking_id: str,
        new_status: BookingStatus,
        actor: Actor | None = None,
    ) -> Booking:
        """
        Move a booking to ``new_status``.

        The booking row is locked for the read-validate-write. ``actor`` is the
        staff member behind the change; None for customer or system changes.

        Raises:
            EntityNotFoundException: Unknown booking
            AuthorizationException: Deposit override by a non-admin
            ValidationException: Admin override without a reason
            PolicyViolationException: Cancellation inside the policy window
            InvalidOperationException: Booking is already COMPLETED, CANCELLED or NO_SHOW
        """
        now = self.clock()
        try:
            booking = await self.booking_repo.find_by_id_for_update(tenant_id, booking_id)
            if booking is None:
                raise EntityNotFoundException("Booking", booking_id)
            booking.ensure_can_change_to(new_status)

            previous = booking.status
            if previous == BookingStatus.PENDING_DEPOSIT and new_status == BookingStatus.CONFIRMED:
                self._apply_deposit_override(booking, actor, now)

            if new_status == BookingStatus.CANCELLED and booking.start_time is not None:
                await self._enforce_cancellation_policy(tenant_id, booking, actor, now)

            booking.change_status(new_status)
            booking = await self.booking_repo.update(booking)

            if new_status in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
                cancelled = await self.reminder_repo.cancel_pending_for_booking(booking.id or "")
                logger.debug(f"Cancelled {cancelled} pending reminders for booking {booking.id}")

            if new_status == BookingStatus.COMPLETED:
                settings = await self.tenant_settings.get_notification_settings(tenant_id) or NotificationSettings()
                service = booking.service or await self.catalog_repo.get_service(tenant_id, booking.service_id)
                kind = service.kind if service else None
                planned = plan_completion_reminders(kind, now, settings)
                await self.reminder_repo.add_many(self._reminders_for(booking, planned))

            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Booking {booking_id} status {previous.value} -> {new_status.value}")
        booking = await self._reload(tenant_id, booking)

        if previous == BookingStatus.PENDING_DEPOSIT and new_status == BookingStatus.CONFIRMED:
            self._notify("booking_confirmation", self.notifications.send_booking_confirmation(booking), booking)

        if new_status == BookingStatus.CANCELLED:
            self._sync_calendar(booking, CalendarAction.CANCEL)
            self._notify("cancellation", self.notifications.send_cancellation_notification(booking), booking)
            await self._offer_to_waitlist(booking)

        return booking

    def _apply_deposit_override(self, booking: Booking, actor: Actor | None, now: datetime) -> None:
        if actor is None or not actor.is_admin:
            raise AuthorizationException(
                operation="confirm without deposit",
                resource="booking",
                message="Only admins can confirm a booking without deposit",
            )
        if not actor.has_reason:
            raise ValidationException("A reason is required to override the deposit requirement", field="reason")
        booking.record(
            OverrideEntry(
                kind=OverrideKind.DEPOSIT_OVERRIDE,
                action=BookingStatus.CONFIRMED.value,
                reason=actor.reason or "",
                timestamp=now,
                staff_id=actor.staff_id,
                staff_name=actor.staff_name,
            )
        )

    async def _enforce_cancellation_policy(
        self,
        tenant_id: str,
        booking: Booking,
        actor: Actor | None,
        now: datetime,
    ) -> None:
        settings = await self.tenant_settings.get_policy_settings(tenant_id)
        decision = self.policy.evaluate(settings, PolicyAction.CANCEL, booking.hours_until_start(now))
        if decision.allowed:
            return

        if actor is not None and actor.is_admin:
            if not actor.has_reason:
                raise ValidationException(
                    "A reason is required to override the cancellation policy", field="reason"
                )
            booking.record(
                OverrideEntry(
                    kind=OverrideKind.POLICY_OVERRIDE,
                    action=BookingStatus.CANCELLED.value,
                    reason=actor.reason or "",
                    timestamp=now,
                    staff_id=actor.staff_id,
                    staff_name=actor.staff_name,
                )
            )
            return

        raise PolicyViolationException(
            message=decision.policy_text or decision.reason or "Cancellation is not allowed",
            policy_text=decision.policy_text,
            hours_remaining=decision.hours_remaining,
            admin_can_override=True,
        )

    # Bulk

    async def bulk_update(
        self,
        tenant_id: str,
        booking_ids: list[str],
        action: BulkAction | str,
        payload: BulkUpdatePayload,
        actor_role: str | None = None,
    ) -> BulkUpdateResult:
        """
        Apply one batched change to many bookings.

        No per-row conflict or policy checks run on this path; only
        bulk-cancelling is role-gated (admins only).
        """
        if not booking_ids:
            raise ValidationException("No booking IDs provided", field="ids")
        if len(booking_ids) > self.bulk_max_ids:
            raise ValidationException(
                f"Cannot update more than {self.bulk_max_ids} bookings at once", field="ids"
            )

        try:
            action = BulkAction.parse(action)
        except ValueError:
            raise ValidationException(f"Unknown bulk action: {action}", field="action") from None

        if action == BulkAction.STATUS:
            if payload.status is None:
                raise ValidationException("Status is required", field="status")
            if payload.status == BookingStatus.CANCELLED and actor_role != StaffRole.ADMIN:
                raise AuthorizationException(
                    operation="bulk cancel",
                    resource="booking",
                    message="Only admins can bulk-cancel bookings",
                )
            try:
                updated = await self.booking_repo.bulk_update_status(tenant_id, booking_ids, payload.status)
                await self.uow.commit()
            except Exception:
                await self.uow.rollback()
                raise
            audit_logger.for_tenant(tenant_id).info(
                f"BULK_STATUS_UPDATE tenant={tenant_id} ids=[{','.join(booking_ids)}] "
                f"newStatus={payload.status.value} updated={updated}",
                booking_ids=booking_ids,
                status=payload.status.value,
                updated=updated,
            )
            return BulkUpdateResult(updated=updated)

        if not payload.staff_id:
            raise ValidationException("Staff ID is required", field="staff_id")
        try:
            updated = await self.booking_repo.bulk_assign_staff(tenant_id, booking_ids, payload.staff_id)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise
        return BulkUpdateResult(updated=updated)

    # Deposit requests and self-serve links

    async def send_deposit_request(self, tenant_id: str, booking_id: str) -> Booking:
        """Send (or re-send) the deposit request and log it."""
        booking = await self.get(tenant_id, booking_id)
        if booking.status != BookingStatus.PENDING_DEPOSIT:
            raise InvalidOperationException(
                operation="send deposit request",
                current_state=booking.status.value,
                message="Booking is not in PENDING_DEPOSIT status",
            )

        await self.notifications.send_deposit_request(booking)

        booking.record(DepositRequestEntry(sent_at=self.clock()))
        return await self._save(tenant_id, booking)

    async def send_reschedule_link(self, tenant_id: str, booking_id: str, actor: Actor) -> SelfServeLink:
        return await self._send_self_serve_link(tenant_id, booking_id, actor, TokenType.RESCHEDULE_LINK)

    async def send_cancel_link(self, tenant_id: str, booking_id: str, actor: Actor) -> SelfServeLink:
        return await self._send_self_serve_link(tenant_id, booking_id, actor, TokenType.CANCEL_LINK)

    async def _send_self_serve_link(
        self,
        tenant_id: str,
        booking_id: str,
        actor: Actor,
        token_type: TokenType,
    ) -> SelfServeLink:
        is_reschedule = token_type == TokenType.RESCHEDULE_LINK
        booking = await self.get(tenant_id, booking_id)
        if not booking.status.is_self_serve_manageable():
            verb = "rescheduled" if is_reschedule else "cancelled"
            raise InvalidOperationException(
                operation=f"send {token_type.value.lower()}",
                current_state=booking.status.value,
                message=f"Booking is not in a status that can be {verb}",
            )

        contact = booking.customer.contact if booking.customer else None
        if not contact:
            raise ValidationException("Customer has no email or phone to send the link to", field="customer")

        # Only the newest link for a booking stays valid
        await self.tokens.revoke_by_related_id(booking.id or "", token_type)
        token = await self.tokens.create_token(
            type=token_type,
            contact=contact,
            tenant_id=tenant_id,
            staff_id=actor.staff_id,
            expiry_hours=self.link_expiry_hours,
            related_id=booking.id,
        )
        link = f"{self.web_url}/manage/{'reschedule' if is_reschedule else 'cancel'}/{token}"

        if is_reschedule:
            self._notify("reschedule_link", self.notifications.send_reschedule_link(booking, link), booking)
        else:
            self._notify("cancel_link", self.notifications.send_cancel_link(booking, link), booking)

        booking.record(
            SelfServeEntry(
                kind=SelfServeKind.RESCHEDULE_LINK_SENT if is_reschedule else SelfServeKind.CANCEL_LINK_SENT,
                at=self.clock(),
                staff_id=actor.staff_id,
                staff_name=actor.staff_name,
            )
        )
        await self._save(tenant_id, booking)
        return SelfServeLink(token=token, link=link)

    async def append_audit_entry(self, tenant_id: str, booking_id: str, entry: SelfServeEntry) -> Booking:
        """Record a customer-initiated action in the booking's self-serve log."""
        booking = await self.get(tenant_id, booking_id)
        booking.record(entry)
        return await self._save(tenant_id, booking)

    # Helpers

    async def _lock_and_check_conflict(self, tenant_id: str, booking: Booking) -> None:
        staff_id = booking.staff_id or ""
        if not await self.booking_repo.lock_staff(tenant_id, staff_id):
            raise ValidationException("Staff not found", field="staff_id")
        time_range = booking.time_range
        if time_range is None:
            return
        if await self.booking_repo.has_conflict(
            tenant_id,
            staff_id,
            time_range.start,
            time_range.end,
            exclude_booking_id=booking.id,
        ):
            raise BookingConflictException(
                staff_id=staff_id,
                time_slot=str(time_range),
                message="Staff has a conflicting booking at this time",
            )

    def _reminders_for(self, booking: Booking, planned: list[PlannedReminder]) -> list[Reminder]:
        return [
            Reminder(
                tenant_id=booking.tenant_id,
                booking_id=booking.id or "",
                type=item.type,
                scheduled_at=item.scheduled_at,
            )
            for item in planned
        ]

    async def _save(self, tenant_id: str, booking: Booking) -> Booking:
        try:
            booking = await self.booking_repo.update(booking)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise
        return await self._reload(tenant_id, booking)

    async def _reload(self, tenant_id: str, booking: Booking) -> Booking:
        """Fresh copy with customer/service/staff resolved for collaborators."""
        return await self.booking_repo.find_by_id(tenant_id, booking.id or "") or booking

    async def _offer_to_waitlist(self, booking: Booking) -> None:
        if self.waitlist is None:
            return
        try:
            offered = await self.waitlist.offer_open_slot(booking)
            if offered:
                logger.info(f"Offered slot of cancelled booking {booking.id} to {offered} waitlist entries")
        except Exception as e:
            logger.warning(f"Failed to offer waitlist slot after cancellation of booking {booking.id}: {e}")

    def _notify(self, name: str, awaitable: Awaitable[Any], booking: Booking) -> None:
        self.side_effects.dispatch(
            f"notify.{name}",
            awaitable,
            booking_id=booking.id,
            tenant_id=booking.tenant_id,
        )

    def _sync_calendar(self, booking: Booking, action: CalendarAction) -> None:
        self.side_effects.dispatch(
            f"calendar.{action.value}",
            self.calendar_sync.sync_booking_to_calendar(booking, action),
            booking_id=booking.id,
            tenant_id=booking.tenant_id,
        )
