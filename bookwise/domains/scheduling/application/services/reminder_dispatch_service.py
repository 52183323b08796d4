"""
Reminder Dispatch Service

Sends reminders that have come due. Called periodically by the sweep
scheduler; each reminder ends the run either SENT or FAILED.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from bookwise.core.shared import Clock, utc_now
from bookwise.domains.scheduling.application.ports import (
    IBookingRepository,
    INotificationDispatcher,
    IReminderRepository,
    IUnitOfWork,
)
from bookwise.domains.scheduling.domain.entities import Booking, Reminder
from bookwise.domains.scheduling.domain.value_objects import ReminderType

logger = logging.getLogger(__name__)


class ReminderDispatchService:
    def __init__(
        self,
        reminder_repository: IReminderRepository,
        booking_repository: IBookingRepository,
        notifications: INotificationDispatcher,
        unit_of_work: IUnitOfWork,
        clock: Clock = utc_now,
    ):
        self.reminder_repo = reminder_repository
        self.booking_repo = booking_repository
        self.notifications = notifications
        self.uow = unit_of_work
        self.clock = clock

    def _sender_for(self, reminder_type: ReminderType) -> Callable[[Booking], Awaitable[None]]:
        return {
            ReminderType.REMINDER: self.notifications.send_reminder,
            ReminderType.FOLLOW_UP: self.notifications.send_follow_up,
            ReminderType.CONSULT_FOLLOW_UP: self.notifications.send_consult_follow_up,
            ReminderType.AFTERCARE: self.notifications.send_aftercare,
            ReminderType.TREATMENT_CHECK_IN: self.notifications.send_treatment_check_in,
        }[reminder_type]

    async def dispatch_due(self, now: datetime | None = None, batch_size: int = 100) -> dict[str, int]:
        """
        Send every PENDING reminder scheduled at or before ``now``.

        Returns:
            Counts of sent and failed reminders
        """
        now = now or self.clock()
        due = await self.reminder_repo.find_due(now, limit=batch_size)
        if not due:
            return {"sent": 0, "failed": 0}

        sent = failed = 0
        for reminder in due:
            if await self._dispatch_one(reminder, now):
                sent += 1
            else:
                failed += 1

        logger.info(f"Reminder sweep: {sent} sent, {failed} failed")
        return {"sent": sent, "failed": failed}

    async def _dispatch_one(self, reminder: Reminder, now: datetime) -> bool:
        delivered = False
        try:
            booking = await self.booking_repo.find_by_id(reminder.tenant_id, reminder.booking_id)
            if booking is None:
                logger.warning(f"Reminder {reminder.id} points at missing booking {reminder.booking_id}")
            else:
                await self._sender_for(reminder.type)(booking)
                delivered = True
        except Exception as e:
            logger.warning(f"Failed to send {reminder.type.value} reminder {reminder.id}: {e}")

        if delivered:
            reminder.mark_sent(now)
        else:
            reminder.mark_failed()

        try:
            await self.reminder_repo.update(reminder)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to record outcome of reminder {reminder.id}: {e}", exc_info=True)
        return delivered
