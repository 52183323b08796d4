"""
Scheduling Infrastructure Repositories

Repository implementations for the scheduling domain.
"""

from bookwise.domains.scheduling.infrastructure.repositories.booking_repository import (
    SQLAlchemyBookingRepository,
)
from bookwise.domains.scheduling.infrastructure.repositories.catalog_repository import (
    SQLAlchemyCatalogRepository,
)
from bookwise.domains.scheduling.infrastructure.repositories.recurring_series_repository import (
    SQLAlchemyRecurringSeriesRepository,
)
from bookwise.domains.scheduling.infrastructure.repositories.reminder_repository import (
    SQLAlchemyReminderRepository,
)
from bookwise.domains.scheduling.infrastructure.repositories.tenant_settings_repository import (
    SQLAlchemyTenantSettingsRepository,
)
from bookwise.domains.scheduling.infrastructure.repositories.unit_of_work import SQLAlchemyUnitOfWork
from bookwise.domains.scheduling.infrastructure.repositories.waitlist_repository import (
    SQLAlchemyWaitlistRepository,
)

__all__ = [
    "SQLAlchemyBookingRepository",
    "SQLAlchemyCatalogRepository",
    "SQLAlchemyRecurringSeriesRepository",
    "SQLAlchemyReminderRepository",
    "SQLAlchemyTenantSettingsRepository",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyWaitlistRepository",
]
