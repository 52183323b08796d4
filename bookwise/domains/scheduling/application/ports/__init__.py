"""
Scheduling Domain Ports

Interfaces (ports) for the scheduling domain following Clean Architecture.
"""

from bookwise.domains.scheduling.application.ports.booking_repository import BookingFilters, IBookingRepository
from bookwise.domains.scheduling.application.ports.catalog_repository import ICatalogRepository
from bookwise.domains.scheduling.application.ports.collaborators import (
    ICalendarSync,
    INotificationDispatcher,
    ITenantSettingsProvider,
    IWaitlistOfferSink,
)
from bookwise.domains.scheduling.application.ports.recurring_series_repository import IRecurringSeriesRepository
from bookwise.domains.scheduling.application.ports.reminder_repository import IReminderRepository
from bookwise.domains.scheduling.application.ports.token_issuer import ITokenIssuer
from bookwise.domains.scheduling.application.ports.unit_of_work import IUnitOfWork
from bookwise.domains.scheduling.application.ports.waitlist_repository import IWaitlistRepository

__all__ = [
    "BookingFilters",
    "IBookingRepository",
    "ICatalogRepository",
    "ICalendarSync",
    "INotificationDispatcher",
    "ITenantSettingsProvider",
    "IWaitlistOfferSink",
    "IRecurringSeriesRepository",
    "IReminderRepository",
    "ITokenIssuer",
    "IUnitOfWork",
    "IWaitlistRepository",
]
