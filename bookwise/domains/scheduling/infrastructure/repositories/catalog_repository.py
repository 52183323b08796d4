"""
Catalog Repository Implementation

SQLAlchemy implementation of ICatalogRepository, plus the model-to-entity
mapping for catalog rows shared with the booking repository. Working hours
and time off are the only catalog rows written here.
"""

import logging
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.core.domain import generate_uuid_str
from bookwise.domains.scheduling.application.ports import ICatalogRepository
from bookwise.domains.scheduling.domain.entities import Customer, Service, Staff, TimeOff, WorkingHours
from bookwise.domains.scheduling.domain.value_objects import ServiceKind, StaffRole
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    CustomerModel,
    ServiceModel,
    StaffModel,
    TimeOffModel,
    WorkingHoursModel,
)

logger = logging.getLogger(__name__)


def service_to_entity(model: ServiceModel) -> Service:
    return Service(
        id=model.id,  # type: ignore[arg-type]
        tenant_id=model.tenant_id,  # type: ignore[arg-type]
        name=model.name,  # type: ignore[arg-type]
        duration_minutes=model.duration_minutes or 0,  # type: ignore[arg-type]
        price=Decimal(model.price or 0),  # type: ignore[arg-type]
        deposit_required=bool(model.deposit_required),
        deposit_amount=Decimal(model.deposit_amount) if model.deposit_amount is not None else None,  # type: ignore[arg-type]
        kind=model.kind or ServiceKind.OTHER,  # type: ignore[arg-type]
        is_active=bool(model.is_active),
    )


def staff_to_entity(model: StaffModel) -> Staff:
    return Staff(
        id=model.id,  # type: ignore[arg-type]
        tenant_id=model.tenant_id,  # type: ignore[arg-type]
        name=model.name,  # type: ignore[arg-type]
        email=model.email,  # type: ignore[arg-type]
        role=model.role or StaffRole.SERVICE_PROVIDER,  # type: ignore[arg-type]
        is_active=bool(model.is_active),
        working_hours=[
            WorkingHours(
                day_of_week=row.day_of_week,
                start_time=row.start_time,
                end_time=row.end_time,
                is_off=bool(row.is_off),
            )
            for row in model.working_hours
        ],
        time_off=[time_off_to_entity(row) for row in model.time_off],
    )


def time_off_to_entity(model: TimeOffModel) -> TimeOff:
    return TimeOff(
        start_date=model.start_date,  # type: ignore[arg-type]
        end_date=model.end_date,  # type: ignore[arg-type]
        reason=model.reason,  # type: ignore[arg-type]
        id=model.id,  # type: ignore[arg-type]
    )


def customer_to_entity(model: CustomerModel) -> Customer:
    return Customer(
        id=model.id,  # type: ignore[arg-type]
        tenant_id=model.tenant_id,  # type: ignore[arg-type]
        name=model.name,  # type: ignore[arg-type]
        email=model.email,  # type: ignore[arg-type]
        phone=model.phone,  # type: ignore[arg-type]
    )


class SQLAlchemyCatalogRepository(ICatalogRepository):
    """
    Services, staff and customers of a tenant.

    Staff reads refresh already-loaded rows so schedule edits made earlier in
    the session are visible.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_service(self, tenant_id: str, service_id: str) -> Service | None:
        result = await self.session.execute(
            select(ServiceModel).where(
                ServiceModel.id == service_id,
                ServiceModel.tenant_id == tenant_id,
            )
        )
        model = result.scalar_one_or_none()
        return service_to_entity(model) if model else None

    async def get_staff(self, tenant_id: str, staff_id: str) -> Staff | None:
        result = await self.session.execute(
            select(StaffModel)
            .where(
                StaffModel.id == staff_id,
                StaffModel.tenant_id == tenant_id,
            )
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return staff_to_entity(model) if model else None

    async def get_staff_members(self, tenant_id: str, staff_ids: list[str]) -> list[Staff]:
        if not staff_ids:
            return []
        result = await self.session.execute(
            select(StaffModel)
            .where(StaffModel.tenant_id == tenant_id, StaffModel.id.in_(staff_ids))
            .order_by(StaffModel.name)
            .execution_options(populate_existing=True)
        )
        return [staff_to_entity(m) for m in result.scalars().all()]

    async def get_active_staff(self, tenant_id: str, staff_id: str | None = None) -> list[Staff]:
        query = select(StaffModel).where(
            StaffModel.tenant_id == tenant_id,
            StaffModel.is_active.is_(True),
        )
        if staff_id:
            query = query.where(StaffModel.id == staff_id)
        query = query.order_by(StaffModel.name)

        result = await self.session.execute(query)
        return [staff_to_entity(m) for m in result.scalars().all()]

    async def get_customer(self, tenant_id: str, customer_id: str) -> Customer | None:
        result = await self.session.execute(
            select(CustomerModel).where(
                CustomerModel.id == customer_id,
                CustomerModel.tenant_id == tenant_id,
            )
        )
        model = result.scalar_one_or_none()
        return customer_to_entity(model) if model else None

    # Staff schedules

    async def upsert_working_hours(self, staff_id: str, hours: list[WorkingHours]) -> None:
        result = await self.session.execute(select(WorkingHoursModel).where(WorkingHoursModel.staff_id == staff_id))
        existing = {row.day_of_week: row for row in result.scalars().all()}

        for row in hours:
            model = existing.get(row.day_of_week)
            if model is None:
                self.session.add(
                    WorkingHoursModel(
                        staff_id=staff_id,
                        day_of_week=row.day_of_week,
                        start_time=row.start_time,
                        end_time=row.end_time,
                        is_off=row.is_off,
                    )
                )
            else:
                model.start_time = row.start_time  # type: ignore[assignment]
                model.end_time = row.end_time  # type: ignore[assignment]
                model.is_off = row.is_off  # type: ignore[assignment]

        await self.session.flush()

    async def add_time_off(self, staff_id: str, time_off: TimeOff) -> TimeOff:
        model = TimeOffModel(
            id=time_off.id or generate_uuid_str(),
            staff_id=staff_id,
            start_date=time_off.start_date,
            end_date=time_off.end_date,
            reason=time_off.reason,
        )
        self.session.add(model)
        await self.session.flush()
        return time_off_to_entity(model)

    async def find_time_off(self, tenant_id: str, time_off_id: str) -> TimeOff | None:
        result = await self.session.execute(
            select(TimeOffModel)
            .join(StaffModel, StaffModel.id == TimeOffModel.staff_id)
            .where(TimeOffModel.id == time_off_id, StaffModel.tenant_id == tenant_id)
        )
        model = result.scalar_one_or_none()
        return time_off_to_entity(model) if model else None

    async def delete_time_off(self, time_off_id: str) -> None:
        await self.session.execute(
            delete(TimeOffModel).where(TimeOffModel.id == time_off_id).execution_options(synchronize_session=False)
        )
        await self.session.flush()
