"""
Booking Repository Implementation

SQLAlchemy implementation of IBookingRepository. Writes are flushed, never
committed; the unit of work decides.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.core.domain import EntityNotFoundException, generate_uuid_str
from bookwise.domains.scheduling.application.ports import BookingFilters, IBookingRepository
from bookwise.domains.scheduling.domain.entities import Booking
from bookwise.domains.scheduling.domain.value_objects import BookingStatus
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import BookingModel, StaffModel

from .catalog_repository import customer_to_entity, service_to_entity, staff_to_entity

logger = logging.getLogger(__name__)

BLOCKING_STATUSES = list(BookingStatus.blocking())


class SQLAlchemyBookingRepository(IBookingRepository):
    """
    SQLAlchemy implementation of booking repository.

    Row locks (``SELECT ... FOR UPDATE``) are held until the session's
    transaction ends.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, tenant_id: str, booking_id: str) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id, BookingModel.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_id_for_update(self, tenant_id: str, booking_id: str) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id, BookingModel.tenant_id == tenant_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_all(
        self,
        tenant_id: str,
        filters: BookingFilters,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        query = select(BookingModel).where(BookingModel.tenant_id == tenant_id)

        if filters.status:
            query = query.where(BookingModel.status == filters.status)
        if filters.staff_id:
            query = query.where(BookingModel.staff_id == filters.staff_id)
        if filters.customer_id:
            query = query.where(BookingModel.customer_id == filters.customer_id)
        if filters.service_id:
            query = query.where(BookingModel.service_id == filters.service_id)
        if filters.date_from:
            query = query.where(BookingModel.start_time >= filters.date_from)
        if filters.date_to:
            query = query.where(BookingModel.start_time < filters.date_to)

        total_result = await self.session.execute(select(func.count()).select_from(query.subquery()))
        total = total_result.scalar_one()

        query = query.order_by(BookingModel.start_time).offset((page - 1) * page_size).limit(page_size)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()], total

    async def find_blocking_for_staff(
        self,
        tenant_id: str,
        staff_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(
                BookingModel.tenant_id == tenant_id,
                BookingModel.staff_id == staff_id,
                BookingModel.status.in_(BLOCKING_STATUSES),
                BookingModel.start_time < range_end,
                BookingModel.end_time > range_start,
            )
            .order_by(BookingModel.start_time)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def has_conflict(
        self,
        tenant_id: str,
        staff_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: str | None = None,
    ) -> bool:
        query = select(BookingModel.id).where(
            BookingModel.tenant_id == tenant_id,
            BookingModel.staff_id == staff_id,
            BookingModel.status.in_(BLOCKING_STATUSES),
            # Half-open overlap: back-to-back bookings do not conflict
            BookingModel.start_time < end_time,
            BookingModel.end_time > start_time,
        )
        if exclude_booking_id:
            query = query.where(BookingModel.id != exclude_booking_id)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def lock_staff(self, tenant_id: str, staff_id: str) -> bool:
        result = await self.session.execute(
            select(StaffModel.id)
            .where(StaffModel.id == staff_id, StaffModel.tenant_id == tenant_id)
            .with_for_update()
        )
        return result.scalar_one_or_none() is not None

    async def count_blocking_by_staff(
        self,
        tenant_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_booking_id: str | None = None,
    ) -> dict[str, int]:
        query = select(BookingModel.staff_id, func.count(BookingModel.id)).where(
            BookingModel.tenant_id == tenant_id,
            BookingModel.staff_id.is_not(None),
            BookingModel.status.in_(BLOCKING_STATUSES),
            BookingModel.start_time >= range_start,
            BookingModel.start_time < range_end,
        )
        if exclude_booking_id:
            query = query.where(BookingModel.id != exclude_booking_id)

        result = await self.session.execute(query.group_by(BookingModel.staff_id))
        return {staff_id: count for staff_id, count in result.all()}

    async def find_calendar(
        self,
        tenant_id: str,
        range_start: datetime,
        range_end: datetime,
        staff_id: str | None = None,
    ) -> list[Booking]:
        query = select(BookingModel).where(
            BookingModel.tenant_id == tenant_id,
            BookingModel.status.in_(BLOCKING_STATUSES),
            BookingModel.start_time >= range_start,
            BookingModel.end_time <= range_end,
        )
        if staff_id:
            query = query.where(BookingModel.staff_id == staff_id)

        result = await self.session.execute(query.order_by(BookingModel.start_time))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_series(self, tenant_id: str, series_id: str) -> list[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.tenant_id == tenant_id, BookingModel.recurring_series_id == series_id)
            .order_by(BookingModel.start_time)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def add(self, booking: Booking) -> Booking:
        model = self._to_model(booking)
        self.session.add(model)
        await self.session.flush()
        booking.id = model.id  # type: ignore[assignment]
        return booking

    async def update(self, booking: Booking) -> Booking:
        model = await self.session.get(BookingModel, booking.id)
        if model is None or model.tenant_id != booking.tenant_id:
            raise EntityNotFoundException("Booking", booking.id)
        self._update_model(model, booking)
        await self.session.flush()
        return booking

    async def bulk_update_status(self, tenant_id: str, booking_ids: list[str], status: BookingStatus) -> int:
        result = await self.session.execute(
            update(BookingModel)
            .where(BookingModel.tenant_id == tenant_id, BookingModel.id.in_(booking_ids))
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def bulk_assign_staff(self, tenant_id: str, booking_ids: list[str], staff_id: str) -> int:
        result = await self.session.execute(
            update(BookingModel)
            .where(BookingModel.tenant_id == tenant_id, BookingModel.id.in_(booking_ids))
            .values(staff_id=staff_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # Mapping methods

    def _to_entity(self, model: BookingModel) -> Booking:
        booking = Booking(
            id=model.id,  # type: ignore[arg-type]
            tenant_id=model.tenant_id,  # type: ignore[arg-type]
            customer_id=model.customer_id,  # type: ignore[arg-type]
            service_id=model.service_id,  # type: ignore[arg-type]
            staff_id=model.staff_id,  # type: ignore[arg-type]
            recurring_series_id=model.recurring_series_id,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            status=model.status or BookingStatus.CONFIRMED,  # type: ignore[arg-type]
            notes=model.notes,  # type: ignore[arg-type]
            custom_fields=dict(model.custom_fields or {}),
            customer=customer_to_entity(model.customer) if model.customer else None,
            service=service_to_entity(model.service) if model.service else None,
            staff=staff_to_entity(model.staff) if model.staff else None,
        )
        if model.created_at:
            booking.created_at = model.created_at  # type: ignore[assignment]
        if model.updated_at:
            booking.updated_at = model.updated_at  # type: ignore[assignment]
        return booking

    def _to_model(self, booking: Booking) -> BookingModel:
        return BookingModel(
            id=booking.id or generate_uuid_str(),
            tenant_id=booking.tenant_id,
            customer_id=booking.customer_id,
            service_id=booking.service_id,
            staff_id=booking.staff_id,
            recurring_series_id=booking.recurring_series_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            notes=booking.notes,
            custom_fields=dict(booking.custom_fields),
        )

    def _update_model(self, model: BookingModel, booking: Booking) -> None:
        model.staff_id = booking.staff_id  # type: ignore[assignment]
        model.start_time = booking.start_time  # type: ignore[assignment]
        model.end_time = booking.end_time  # type: ignore[assignment]
        model.status = booking.status  # type: ignore[assignment]
        model.notes = booking.notes  # type: ignore[assignment]
        # New dict so the JSON column registers the change
        model.custom_fields = dict(booking.custom_fields)  # type: ignore[assignment]
