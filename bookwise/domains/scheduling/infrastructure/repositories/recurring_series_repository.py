"""
Recurring Series Repository Implementation
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.core.domain import generate_uuid_str
from bookwise.domains.scheduling.application.ports import IRecurringSeriesRepository
from bookwise.domains.scheduling.domain.entities import RecurringSeries
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import RecurringSeriesModel


class SQLAlchemyRecurringSeriesRepository(IRecurringSeriesRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, series: RecurringSeries) -> RecurringSeries:
        model = RecurringSeriesModel(
            id=series.id or generate_uuid_str(),
            tenant_id=series.tenant_id,
            customer_id=series.customer_id,
            service_id=series.service_id,
            staff_id=series.staff_id,
            start_date=series.start_date,
            time_of_day=series.time_of_day,
            days_of_week=list(series.days_of_week),
            interval_weeks=series.interval_weeks,
            total_count=series.total_count,
            ends_on=series.ends_on,
            notes=series.notes,
        )
        self.session.add(model)
        await self.session.flush()
        series.id = model.id  # type: ignore[assignment]
        return series

    async def find_by_id(self, tenant_id: str, series_id: str) -> RecurringSeries | None:
        result = await self.session.execute(
            select(RecurringSeriesModel).where(
                RecurringSeriesModel.id == series_id,
                RecurringSeriesModel.tenant_id == tenant_id,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: RecurringSeriesModel) -> RecurringSeries:
        series = RecurringSeries(
            id=model.id,  # type: ignore[arg-type]
            tenant_id=model.tenant_id,  # type: ignore[arg-type]
            customer_id=model.customer_id,  # type: ignore[arg-type]
            service_id=model.service_id,  # type: ignore[arg-type]
            staff_id=model.staff_id,  # type: ignore[arg-type]
            start_date=model.start_date,  # type: ignore[arg-type]
            time_of_day=model.time_of_day,  # type: ignore[arg-type]
            days_of_week=list(model.days_of_week or []),
            interval_weeks=model.interval_weeks or 1,  # type: ignore[arg-type]
            total_count=model.total_count or 0,  # type: ignore[arg-type]
            ends_on=model.ends_on,  # type: ignore[arg-type]
            notes=model.notes,  # type: ignore[arg-type]
        )
        if model.created_at:
            series.created_at = model.created_at  # type: ignore[assignment]
        return series
