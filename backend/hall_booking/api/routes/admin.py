"""
Admin booking review: list bookings across users and accept or reject
pending ones.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hall_booking.core.security import Actor, require_admin
from hall_booking.db.session import get_db
from hall_booking.models.enums import BookingStatus
from hall_booking.schemas.booking import BookingResponse, BookingReview
from hall_booking.services.booking_service import list_all_bookings, review_booking
from hall_booking.services.cache_service import invalidate_hall_cache

router = APIRouter(prefix="/admin/bookings", tags=["Admin"])


@router.get("/", response_model=list[BookingResponse])
async def admin_list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await list_all_bookings(db, status_filter)


@router.post("/{booking_id}/review", response_model=BookingResponse)
async def admin_review_booking(
    booking_id: int,
    review: BookingReview,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Accept or reject a pending booking. Rejection frees the hall date."""
    booking = await review_booking(db, admin, booking_id, review.status, review.reason)
    if review.status == BookingStatus.REJECTED:
        await invalidate_hall_cache()
    return booking
