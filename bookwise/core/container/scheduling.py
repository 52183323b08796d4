"""
Scheduling Domain Container.

Single Responsibility: Wire all scheduling domain dependencies.
"""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.domains.scheduling.application.services import (
    AvailabilityService,
    BookingService,
    RecurringBookingService,
    ReminderDispatchService,
    SelfServeService,
    StaffScheduleService,
    WaitlistService,
)
from bookwise.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyCatalogRepository,
    SQLAlchemyRecurringSeriesRepository,
    SQLAlchemyReminderRepository,
    SQLAlchemyTenantSettingsRepository,
    SQLAlchemyUnitOfWork,
    SQLAlchemyWaitlistRepository,
)
from bookwise.domains.scheduling.infrastructure.services import SelfServeTokenService

if TYPE_CHECKING:
    from bookwise.core.container.base import BaseContainer

logger = logging.getLogger(__name__)


class SchedulingContainer:
    """
    Scheduling domain container.

    Single Responsibility: Create scheduling repositories and services.
    """

    def __init__(self, base: "BaseContainer"):
        """
        Initialize scheduling container.

        Args:
            base: BaseContainer with shared singletons
        """
        self._base = base

    # ==================== REPOSITORIES ====================

    def create_unit_of_work(self, db: AsyncSession) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session=db)

    def create_booking_repository(self, db: AsyncSession) -> SQLAlchemyBookingRepository:
        return SQLAlchemyBookingRepository(session=db)

    def create_catalog_repository(self, db: AsyncSession) -> SQLAlchemyCatalogRepository:
        return SQLAlchemyCatalogRepository(session=db)

    def create_reminder_repository(self, db: AsyncSession) -> SQLAlchemyReminderRepository:
        return SQLAlchemyReminderRepository(session=db)

    def create_recurring_series_repository(self, db: AsyncSession) -> SQLAlchemyRecurringSeriesRepository:
        return SQLAlchemyRecurringSeriesRepository(session=db)

    def create_waitlist_repository(self, db: AsyncSession) -> SQLAlchemyWaitlistRepository:
        return SQLAlchemyWaitlistRepository(session=db)

    def create_tenant_settings_repository(self, db: AsyncSession) -> SQLAlchemyTenantSettingsRepository:
        return SQLAlchemyTenantSettingsRepository(session=db, default_timezone=self._base.settings.DEFAULT_TIMEZONE)

    def create_token_service(self, db: AsyncSession) -> SelfServeTokenService:
        return SelfServeTokenService(session=db)

    # ==================== SERVICES ====================

    def create_availability_service(self, db: AsyncSession) -> AvailabilityService:
        return AvailabilityService(
            catalog_repository=self.create_catalog_repository(db),
            booking_repository=self.create_booking_repository(db),
            calendar_sync=self._base.get_calendar_sync(),
            tenant_settings=self.create_tenant_settings_repository(db),
            slot_increment_minutes=self._base.settings.SLOT_INCREMENT_MINUTES,
        )

    def create_waitlist_service(self, db: AsyncSession) -> WaitlistService:
        return WaitlistService(
            waitlist_repository=self.create_waitlist_repository(db),
            catalog_repository=self.create_catalog_repository(db),
            unit_of_work=self.create_unit_of_work(db),
            token_issuer=self.create_token_service(db),
            notifications=self._base.get_notification_dispatcher(),
            tenant_settings=self.create_tenant_settings_repository(db),
            side_effects=self._base.get_side_effect_runner(),
            web_url=self._base.settings.WEB_URL,
        )

    def create_booking_service(self, db: AsyncSession, waitlist: WaitlistService | None = None) -> BookingService:
        settings = self._base.settings
        return BookingService(
            booking_repository=self.create_booking_repository(db),
            catalog_repository=self.create_catalog_repository(db),
            reminder_repository=self.create_reminder_repository(db),
            unit_of_work=self.create_unit_of_work(db),
            token_issuer=self.create_token_service(db),
            notifications=self._base.get_notification_dispatcher(),
            calendar_sync=self._base.get_calendar_sync(),
            tenant_settings=self.create_tenant_settings_repository(db),
            side_effects=self._base.get_side_effect_runner(),
            waitlist=waitlist or self.create_waitlist_service(db),
            web_url=settings.WEB_URL,
            reminder_lead_hours=settings.REMINDER_LEAD_HOURS,
            link_expiry_hours=settings.SELF_SERVE_LINK_EXPIRY_HOURS,
            bulk_max_ids=settings.BULK_UPDATE_MAX_IDS,
        )

    def create_self_serve_service(self, db: AsyncSession) -> SelfServeService:
        waitlist = self.create_waitlist_service(db)
        return SelfServeService(
            token_issuer=self.create_token_service(db),
            booking_service=self.create_booking_service(db, waitlist=waitlist),
            availability_service=self.create_availability_service(db),
            waitlist_service=waitlist,
            tenant_settings=self.create_tenant_settings_repository(db),
        )

    def create_staff_schedule_service(self, db: AsyncSession) -> StaffScheduleService:
        return StaffScheduleService(
            catalog_repository=self.create_catalog_repository(db),
            unit_of_work=self.create_unit_of_work(db),
        )

    def create_recurring_booking_service(self, db: AsyncSession) -> RecurringBookingService:
        return RecurringBookingService(
            series_repository=self.create_recurring_series_repository(db),
            booking_repository=self.create_booking_repository(db),
            catalog_repository=self.create_catalog_repository(db),
            reminder_repository=self.create_reminder_repository(db),
            unit_of_work=self.create_unit_of_work(db),
            notifications=self._base.get_notification_dispatcher(),
            calendar_sync=self._base.get_calendar_sync(),
            tenant_settings=self.create_tenant_settings_repository(db),
            side_effects=self._base.get_side_effect_runner(),
            reminder_lead_hours=self._base.settings.REMINDER_LEAD_HOURS,
        )

    def create_reminder_dispatch_service(self, db: AsyncSession) -> ReminderDispatchService:
        return ReminderDispatchService(
            reminder_repository=self.create_reminder_repository(db),
            booking_repository=self.create_booking_repository(db),
            notifications=self._base.get_notification_dispatcher(),
            unit_of_work=self.create_unit_of_work(db),
        )

    def for_session(self, db: AsyncSession) -> "SchedulingServices":
        return SchedulingServices(self, db)


class SchedulingServices:
    """Services bound to one database session (one request or one sweep run)."""

    def __init__(self, container: SchedulingContainer, db: AsyncSession):
        self._container = container
        self._db = db

    def availability_service(self) -> AvailabilityService:
        return self._container.create_availability_service(self._db)

    def booking_service(self) -> BookingService:
        return self._container.create_booking_service(self._db)

    def waitlist_service(self) -> WaitlistService:
        return self._container.create_waitlist_service(self._db)

    def self_serve_service(self) -> SelfServeService:
        return self._container.create_self_serve_service(self._db)

    def reminder_dispatch_service(self) -> ReminderDispatchService:
        return self._container.create_reminder_dispatch_service(self._db)

    def staff_schedule_service(self) -> StaffScheduleService:
        return self._container.create_staff_schedule_service(self._db)

    def recurring_booking_service(self) -> RecurringBookingService:
        return self._container.create_recurring_booking_service(self._db)
