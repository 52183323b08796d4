"""
Waitlist Repository Implementation

SQLAlchemy implementation of IWaitlistRepository.
"""

import logging
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.core.domain import EntityNotFoundException, generate_uuid_str
from bookwise.domains.scheduling.application.ports import IWaitlistRepository
from bookwise.domains.scheduling.domain.entities import OfferedSlot, WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import WaitlistStatus
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import WaitlistEntryModel

logger = logging.getLogger(__name__)


class SQLAlchemyWaitlistRepository(IWaitlistRepository):
    """
    SQLAlchemy implementation of waitlist repository.

    ``find_by_id_for_update`` issues ``SELECT ... FOR UPDATE`` so concurrent
    claims of one entry queue on its row.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, tenant_id: str, entry_id: str) -> WaitlistEntry | None:
        result = await self.session.execute(
            select(WaitlistEntryModel)
            .where(WaitlistEntryModel.id == entry_id, WaitlistEntryModel.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_id_for_update(self, entry_id: str) -> WaitlistEntry | None:
        result = await self.session.execute(
            select(WaitlistEntryModel)
            .where(WaitlistEntryModel.id == entry_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_active(self, tenant_id: str, customer_id: str, service_id: str) -> WaitlistEntry | None:
        result = await self.session.execute(
            select(WaitlistEntryModel)
            .where(
                WaitlistEntryModel.tenant_id == tenant_id,
                WaitlistEntryModel.customer_id == customer_id,
                WaitlistEntryModel.service_id == service_id,
                WaitlistEntryModel.status == WaitlistStatus.ACTIVE,
            )
            .limit(1)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_all(
        self,
        tenant_id: str,
        status: WaitlistStatus | None = None,
        service_id: str | None = None,
        staff_id: str | None = None,
    ) -> list[WaitlistEntry]:
        query = select(WaitlistEntryModel).where(WaitlistEntryModel.tenant_id == tenant_id)
        if status:
            query = query.where(WaitlistEntryModel.status == status)
        if service_id:
            query = query.where(WaitlistEntryModel.service_id == service_id)
        if staff_id:
            query = query.where(WaitlistEntryModel.staff_id == staff_id)

        result = await self.session.execute(query.order_by(WaitlistEntryModel.created_at.desc()))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_offer_candidates(
        self,
        tenant_id: str,
        service_id: str,
        staff_id: str | None,
        limit: int,
    ) -> list[WaitlistEntry]:
        query = select(WaitlistEntryModel).where(
            WaitlistEntryModel.tenant_id == tenant_id,
            WaitlistEntryModel.service_id == service_id,
            WaitlistEntryModel.status == WaitlistStatus.ACTIVE,
        )
        if staff_id:
            query = query.where(
                or_(WaitlistEntryModel.staff_id == staff_id, WaitlistEntryModel.staff_id.is_(None))
            )
        else:
            query = query.where(WaitlistEntryModel.staff_id.is_(None))

        result = await self.session.execute(query.order_by(WaitlistEntryModel.created_at).limit(limit))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_created_since(self, tenant_id: str, since: datetime) -> list[WaitlistEntry]:
        result = await self.session.execute(
            select(WaitlistEntryModel).where(
                WaitlistEntryModel.tenant_id == tenant_id,
                WaitlistEntryModel.created_at >= since,
            )
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def add(self, entry: WaitlistEntry) -> WaitlistEntry:
        model = self._to_model(entry)
        self.session.add(model)
        await self.session.flush()
        entry.id = model.id  # type: ignore[assignment]
        return entry

    async def update(self, entry: WaitlistEntry) -> WaitlistEntry:
        model = await self.session.get(WaitlistEntryModel, entry.id)
        if model is None:
            raise EntityNotFoundException("WaitlistEntry", entry.id, message="Waitlist entry not found")
        model.staff_id = entry.staff_id  # type: ignore[assignment]
        model.status = entry.status  # type: ignore[assignment]
        model.notes = entry.notes  # type: ignore[assignment]
        model.offered_slot = entry.offered_slot.to_dict() if entry.offered_slot else None  # type: ignore[assignment]
        model.offered_at = entry.offered_at  # type: ignore[assignment]
        model.offer_expires_at = entry.offer_expires_at  # type: ignore[assignment]
        model.booking_id = entry.booking_id  # type: ignore[assignment]
        model.claimed_at = entry.claimed_at  # type: ignore[assignment]
        await self.session.flush()
        return entry

    async def expire_offers(self, now: datetime) -> int:
        result = await self.session.execute(
            update(WaitlistEntryModel)
            .where(
                WaitlistEntryModel.status == WaitlistStatus.OFFERED,
                WaitlistEntryModel.offer_expires_at < now,
            )
            .values(status=WaitlistStatus.EXPIRED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # Mapping methods

    def _to_entity(self, model: WaitlistEntryModel) -> WaitlistEntry:
        slot = OfferedSlot.from_dict(model.offered_slot) if isinstance(model.offered_slot, dict) else None
        entry = WaitlistEntry(
            id=model.id,  # type: ignore[arg-type]
            tenant_id=model.tenant_id,  # type: ignore[arg-type]
            customer_id=model.customer_id,  # type: ignore[arg-type]
            service_id=model.service_id,  # type: ignore[arg-type]
            staff_id=model.staff_id,  # type: ignore[arg-type]
            status=model.status or WaitlistStatus.ACTIVE,  # type: ignore[arg-type]
            notes=model.notes,  # type: ignore[arg-type]
            offered_slot=slot,
            offered_at=model.offered_at,  # type: ignore[arg-type]
            offer_expires_at=model.offer_expires_at,  # type: ignore[arg-type]
            booking_id=model.booking_id,  # type: ignore[arg-type]
            claimed_at=model.claimed_at,  # type: ignore[arg-type]
        )
        if model.created_at:
            entry.created_at = model.created_at  # type: ignore[assignment]
        if model.updated_at:
            entry.updated_at = model.updated_at  # type: ignore[assignment]
        return entry

    def _to_model(self, entry: WaitlistEntry) -> WaitlistEntryModel:
        return WaitlistEntryModel(
            id=entry.id or generate_uuid_str(),
            tenant_id=entry.tenant_id,
            customer_id=entry.customer_id,
            service_id=entry.service_id,
            staff_id=entry.staff_id,
            status=entry.status,
            notes=entry.notes,
            offered_slot=entry.offered_slot.to_dict() if entry.offered_slot else None,
            offered_at=entry.offered_at,
            offer_expires_at=entry.offer_expires_at,
            booking_id=entry.booking_id,
            claimed_at=entry.claimed_at,
        )
