"""
Reminder Repository Implementation

SQLAlchemy implementation of IReminderRepository.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.core.domain import EntityNotFoundException, generate_uuid_str
from bookwise.domains.scheduling.application.ports import IReminderRepository
from bookwise.domains.scheduling.domain.entities import Reminder
from bookwise.domains.scheduling.domain.value_objects import ReminderStatus
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import ReminderModel


class SQLAlchemyReminderRepository(IReminderRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_many(self, reminders: list[Reminder]) -> list[Reminder]:
        if not reminders:
            return []
        models = [self._to_model(reminder) for reminder in reminders]
        self.session.add_all(models)
        await self.session.flush()
        for reminder, model in zip(reminders, models):
            reminder.id = model.id  # type: ignore[assignment]
        return reminders

    async def cancel_pending_for_booking(self, booking_id: str) -> int:
        result = await self.session.execute(
            update(ReminderModel)
            .where(
                ReminderModel.booking_id == booking_id,
                ReminderModel.status == ReminderStatus.PENDING,
            )
            .values(status=ReminderStatus.CANCELLED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def find_by_booking(self, booking_id: str) -> list[Reminder]:
        result = await self.session.execute(
            select(ReminderModel)
            .where(ReminderModel.booking_id == booking_id)
            .order_by(ReminderModel.scheduled_at)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_due(self, now: datetime, limit: int = 100) -> list[Reminder]:
        result = await self.session.execute(
            select(ReminderModel)
            .where(
                ReminderModel.status == ReminderStatus.PENDING,
                ReminderModel.scheduled_at <= now,
            )
            .order_by(ReminderModel.scheduled_at)
            .limit(limit)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def update(self, reminder: Reminder) -> Reminder:
        model = await self.session.get(ReminderModel, reminder.id)
        if model is None:
            raise EntityNotFoundException("Reminder", reminder.id)
        model.status = reminder.status  # type: ignore[assignment]
        model.sent_at = reminder.sent_at  # type: ignore[assignment]
        model.scheduled_at = reminder.scheduled_at  # type: ignore[assignment]
        await self.session.flush()
        return reminder

    # Mapping methods

    def _to_entity(self, model: ReminderModel) -> Reminder:
        return Reminder(
            id=model.id,  # type: ignore[arg-type]
            tenant_id=model.tenant_id,  # type: ignore[arg-type]
            booking_id=model.booking_id,  # type: ignore[arg-type]
            type=model.type,  # type: ignore[arg-type]
            scheduled_at=model.scheduled_at,  # type: ignore[arg-type]
            status=model.status,  # type: ignore[arg-type]
            sent_at=model.sent_at,  # type: ignore[arg-type]
        )

    def _to_model(self, reminder: Reminder) -> ReminderModel:
        return ReminderModel(
            id=reminder.id or generate_uuid_str(),
            tenant_id=reminder.tenant_id,
            booking_id=reminder.booking_id,
            type=reminder.type,
            scheduled_at=reminder.scheduled_at,
            status=reminder.status,
            sent_at=reminder.sent_at,
        )
