"""
Waitlist Service

Backfill coordinator: queues customers for a service, offers freed slots to
the longest-waiting eligible entries and resolves claims under a row lock so
at most one claimant wins an offer.
"""

import logging
from datetime import datetime, timedelta

from bookwise.core.domain import (
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
)
from bookwise.core.shared import Clock, SideEffectRunner, get_timezone, utc_now
from bookwise.domains.scheduling.application.dto import JoinWaitlistRequest, WaitlistMetrics
from bookwise.domains.scheduling.application.ports import (
    ICatalogRepository,
    INotificationDispatcher,
    ITenantSettingsProvider,
    ITokenIssuer,
    IUnitOfWork,
    IWaitlistRepository,
)
from bookwise.domains.scheduling.domain.entities import Booking, OfferedSlot, WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import TokenType, WaitlistSettings, WaitlistStatus

logger = logging.getLogger(__name__)


class WaitlistService:
    """
    Waitlist backfill coordinator.

    Implements ``IWaitlistOfferSink`` so the booking lifecycle can hand it a
    cancelled booking without depending on anything else here.
    """

    def __init__(
        self,
        waitlist_repository: IWaitlistRepository,
        catalog_repository: ICatalogRepository,
        unit_of_work: IUnitOfWork,
        token_issuer: ITokenIssuer,
        notifications: INotificationDispatcher,
        tenant_settings: ITenantSettingsProvider,
        side_effects: SideEffectRunner,
        web_url: str = "http://localhost:3000",
        clock: Clock = utc_now,
    ):
        self.waitlist_repo = waitlist_repository
        self.catalog_repo = catalog_repository
        self.uow = unit_of_work
        self.tokens = token_issuer
        self.notifications = notifications
        self.tenant_settings = tenant_settings
        self.side_effects = side_effects
        self.web_url = web_url.rstrip("/")
        self.clock = clock

    # Entries

    async def join_waitlist(self, tenant_id: str, request: JoinWaitlistRequest) -> WaitlistEntry:
        """
        Queue a customer for a service.

        Raises:
            EntityNotFoundException: Service missing or inactive
            DuplicateEntityException: Customer already has an ACTIVE entry for it
        """
        service = await self.catalog_repo.get_service(tenant_id, request.service_id)
        if service is None or not service.is_active:
            raise EntityNotFoundException("Service", request.service_id)

        existing = await self.waitlist_repo.find_active(tenant_id, request.customer_id, request.service_id)
        if existing is not None:
            raise DuplicateEntityException(
                entity_type="WaitlistEntry",
                field="service_id",
                value=request.service_id,
                message="Customer is already on the waitlist for this service",
            )

        entry = WaitlistEntry(
            tenant_id=tenant_id,
            customer_id=request.customer_id,
            service_id=request.service_id,
            staff_id=request.staff_id,
            notes=request.notes,
        )
        try:
            entry = await self.waitlist_repo.add(entry)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Customer {request.customer_id} joined waitlist for service {request.service_id}")
        return entry

    async def get_entries(
        self,
        tenant_id: str,
        status: WaitlistStatus | None = None,
        service_id: str | None = None,
        staff_id: str | None = None,
    ) -> list[WaitlistEntry]:
        return await self.waitlist_repo.find_all(tenant_id, status=status, service_id=service_id, staff_id=staff_id)

    async def get_entry(self, tenant_id: str, entry_id: str) -> WaitlistEntry:
        entry = await self.waitlist_repo.find_by_id(tenant_id, entry_id)
        if entry is None:
            raise EntityNotFoundException("WaitlistEntry", entry_id, message="Waitlist entry not found")
        return entry

    async def update_entry(
        self,
        tenant_id: str,
        entry_id: str,
        status: WaitlistStatus | None = None,
        notes: str | None = None,
        staff_id: str | None = None,
    ) -> WaitlistEntry:
        entry = await self.get_entry(tenant_id, entry_id)
        if status is not None:
            entry.status = status
        if notes is not None:
            entry.notes = notes
        if staff_id is not None:
            entry.staff_id = staff_id
        entry.touch()
        return await self._save(entry)

    async def cancel_entry(self, tenant_id: str, entry_id: str) -> WaitlistEntry:
        entry = await self.get_entry(tenant_id, entry_id)
        entry.cancel()
        return await self._save(entry)

    async def resolve_entry(self, tenant_id: str, entry_id: str, booking_id: str) -> WaitlistEntry:
        """Link the entry to the booking that fulfilled it."""
        entry = await self.get_entry(tenant_id, entry_id)
        entry.resolve(booking_id, self.clock())
        return await self._save(entry)

    # Offers

    async def offer_open_slot(self, cancelled_booking: Booking) -> int:
        """
        Offer the slot freed by ``cancelled_booking`` to waiting customers.

        Nothing is offered during the tenant's quiet hours. Each offered entry
        gets its own claim link; a failure for one entry is logged and the
        rest still receive theirs.

        Returns:
            Number of offers sent
        """
        tenant_id = cancelled_booking.tenant_id
        if cancelled_booking.start_time is None:
            return 0

        settings = await self.tenant_settings.get_waitlist_settings(tenant_id) or WaitlistSettings()
        now = self.clock()
        timezone = get_timezone(await self.tenant_settings.get_timezone(tenant_id))
        local_now = now.astimezone(timezone)
        if settings.quiet_hours.contains(local_now.time()):
            logger.info(
                f"Quiet hours ({settings.quiet_hours}) for tenant {tenant_id}; "
                f"not offering slot of booking {cancelled_booking.id}"
            )
            return 0

        if settings.offer_count <= 0:
            return 0

        candidates = await self.waitlist_repo.find_offer_candidates(
            tenant_id,
            cancelled_booking.service_id,
            cancelled_booking.staff_id,
            settings.offer_count,
        )
        if not candidates:
            return 0

        slot = OfferedSlot(
            start_time=cancelled_booking.start_time,
            service_name=cancelled_booking.service.name if cancelled_booking.service else "",
            staff_name=cancelled_booking.staff.name if cancelled_booking.staff else None,
            staff_id=cancelled_booking.staff_id,
        )

        offered = 0
        for entry in candidates:
            try:
                await self._offer_entry(entry, slot, now, settings)
                offered += 1
            except Exception as e:
                await self.uow.rollback()
                logger.warning(f"Failed to offer slot to waitlist entry {entry.id}: {e}")
        return offered

    async def _offer_entry(
        self,
        entry: WaitlistEntry,
        slot: OfferedSlot,
        now: datetime,
        settings: WaitlistSettings,
    ) -> None:
        customer = await self.catalog_repo.get_customer(entry.tenant_id, entry.customer_id)
        contact = customer.contact if customer else None
        if not contact:
            raise InvalidOperationException(
                operation="offer",
                current_state=entry.status.value,
                message=f"Customer {entry.customer_id} has no contact details",
            )

        entry.offer(slot, now, settings.expiry_minutes)
        entry = await self.waitlist_repo.update(entry)
        await self.uow.commit()

        token = await self.tokens.create_token(
            type=TokenType.WAITLIST_CLAIM,
            contact=contact,
            tenant_id=entry.tenant_id,
            expiry_hours=settings.expiry_minutes / 60,
            related_id=entry.id,
        )
        link = f"{self.web_url}/manage/waitlist/{token}"
        self.side_effects.dispatch(
            "notify.waitlist_offer",
            self.notifications.send_waitlist_offer(entry, link),
            entry_id=entry.id,
            tenant_id=entry.tenant_id,
        )
        logger.debug(f"Offered slot {slot.start_time.isoformat()} to waitlist entry {entry.id}")

    async def expire_stale_offers(self, now: datetime | None = None) -> int:
        """
        Flip lapsed offers to EXPIRED in one batched update.

        Never raises; a failed sweep is logged and retried on the next run.
        """
        try:
            expired = await self.waitlist_repo.expire_offers(now or self.clock())
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to expire stale waitlist offers: {e}", exc_info=True)
            return 0

        if expired:
            logger.info(f"Expired {expired} stale waitlist offers")
        return expired

    # Claim resolution

    async def reserve_offer(self, entry_id: str) -> tuple[WaitlistEntry, OfferedSlot]:
        """
        Take an open offer for the caller.

        Locks the entry row, re-checks it, flips it to BOOKED and commits in
        the same transaction; a concurrent claimant waits on the lock and then
        sees BOOKED.

        Raises:
            EntityNotFoundException: Entry does not exist
            InvalidOperationException: Offer not open, expired or without a slot
        """
        try:
            entry = await self.waitlist_repo.find_by_id_for_update(entry_id)
            if entry is None:
                raise EntityNotFoundException("WaitlistEntry", entry_id, message="Waitlist entry not found")
            slot = entry.reserve(self.clock())
            entry = await self.waitlist_repo.update(entry)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise
        return entry, slot

    async def release_offer(self, entry_id: str) -> None:
        """Put a reserved entry back in the queue after its booking failed."""
        try:
            entry = await self.waitlist_repo.find_by_id_for_update(entry_id)
            if entry is None or entry.status != WaitlistStatus.BOOKED or entry.booking_id:
                await self.uow.rollback()
                return
            entry.release()
            await self.waitlist_repo.update(entry)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise
        logger.info(f"Released waitlist entry {entry_id} back to ACTIVE")

    # Metrics

    async def get_metrics(self, tenant_id: str, window_days: int = 30) -> WaitlistMetrics:
        """
        Backfill performance over entries joined in the last ``window_days``.

        Time to fill is measured from offer to claim.
        """
        since = self.clock() - timedelta(days=window_days)
        entries = await self.waitlist_repo.find_created_since(tenant_id, since)

        offered = [entry for entry in entries if entry.offered_at is not None]
        claimed = [entry for entry in entries if entry.status == WaitlistStatus.BOOKED and entry.claimed_at]
        fill_minutes = [
            (entry.claimed_at - entry.offered_at).total_seconds() / 60  # type: ignore[operator]
            for entry in claimed
            if entry.offered_at is not None
        ]

        return WaitlistMetrics(
            window_days=window_days,
            total_joined=len(entries),
            offered=len(offered),
            claimed=len(claimed),
            avg_time_to_fill_minutes=round(sum(fill_minutes) / len(fill_minutes), 1) if fill_minutes else None,
            fill_rate=round(len(claimed) / len(offered), 2) if offered else 0.0,
        )

    async def _save(self, entry: WaitlistEntry) -> WaitlistEntry:
        try:
            entry = await self.waitlist_repo.update(entry)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise
        return entry
