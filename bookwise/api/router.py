from fastapi import APIRouter

from bookwise.domains.scheduling.api import (
    availability_router,
    bookings_router,
    manage_router,
    recurring_router,
    staff_router,
    waitlist_router,
)

api_router = APIRouter()

# API routes (all have /api/v1 prefix from the app factory)
api_router.include_router(availability_router)
api_router.include_router(bookings_router)
api_router.include_router(recurring_router)
api_router.include_router(staff_router)
api_router.include_router(waitlist_router)

# Public self-serve pages, authorized by the token in the path
api_router.include_router(manage_router)
