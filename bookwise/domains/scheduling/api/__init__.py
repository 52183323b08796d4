"""
Scheduling API Layer

FastAPI routers for the scheduling domain.
"""

from bookwise.domains.scheduling.api.routes import (
    availability_router,
    bookings_router,
    manage_router,
    recurring_router,
    routers,
    staff_router,
    waitlist_router,
)

__all__ = [
    "availability_router",
    "bookings_router",
    "manage_router",
    "recurring_router",
    "staff_router",
    "waitlist_router",
    "routers",
]
