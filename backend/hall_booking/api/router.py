"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from hall_booking.api.routes import auth, halls, bookings, admin

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(halls.router)
api_router.include_router(bookings.router)
api_router.include_router(admin.router)
