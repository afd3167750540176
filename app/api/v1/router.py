"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import availability, bookings, payouts

api_router = APIRouter()

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payouts
api_router.include_router(payouts.router, prefix="/payouts", tags=["Payouts"])

# Availability
api_router.include_router(availability.router, prefix="/professionals", tags=["Availability"])
