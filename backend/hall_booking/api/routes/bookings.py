"""
Booking endpoints: submission, the owner's booking list and summary,
cancellation, and invoices.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hall_booking.api.deps import get_date_lock_strategy, get_today
from hall_booking.core.security import Actor, get_current_actor, get_optional_actor
from hall_booking.db.session import get_db
from hall_booking.models.enums import BookingView
from hall_booking.schemas.booking import (
    BookingCancel, BookingCancelResponse, BookingCreate, BookingListItem,
    BookingResponse, BookingSummary, InvoiceResponse,
)
from hall_booking.services.booking_rules import summarize_bookings
from hall_booking.services.booking_service import (
    build_invoice, cancel_booking, get_booking_for_user, get_user_bookings, submit_booking,
)
from hall_booking.services.cache_service import invalidate_hall_cache
from hall_booking.services.interfaces.date_lock import DateLockStrategy

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    actor: Optional[Actor] = Depends(get_optional_actor),
    today: date = Depends(get_today),
    date_lock: DateLockStrategy = Depends(get_date_lock_strategy),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a hall for one date.

    The booking starts as pending and the date is removed from the hall's
    calendar in the same transaction. A date that is already taken, including
    one taken by a concurrent request a moment earlier, returns 409.
    """
    booking = await submit_booking(db, actor, booking_data, today, date_lock=date_lock)
    await invalidate_hall_cache()
    return booking


@router.get("/", response_model=list[BookingListItem])
async def list_my_bookings(
    view: Optional[BookingView] = Query(None),
    actor: Actor = Depends(get_current_actor),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """The caller's bookings, oldest date first, optionally filtered by view."""
    items = await get_user_bookings(db, actor, today, view)
    return [
        BookingListItem(
            **BookingResponse.model_validate(booking).model_dump(),
            view=booking_view,
            can_cancel=cancellable,
        )
        for booking, booking_view, cancellable in items
    ]


@router.get("/summary", response_model=BookingSummary)
async def my_booking_summary(
    actor: Actor = Depends(get_current_actor),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    items = await get_user_bookings(db, actor, today)
    return summarize_bookings((booking for booking, _, _ in items), today)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_my_booking(
    booking_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return await get_booking_for_user(db, actor, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    cancel_data: BookingCancel,
    actor: Optional[Actor] = Depends(get_optional_actor),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Cancel an upcoming pending or accepted booking. A reason is required."""
    booking = await cancel_booking(db, actor, booking_id, cancel_data.reason, today)
    await invalidate_hall_cache()
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking_id=booking.id,
        status=booking.status,
    )


@router.get("/{booking_id}/invoice", response_model=InvoiceResponse)
async def booking_invoice(
    booking_id: int,
    actor: Actor = Depends(get_current_actor),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Invoice for an accepted booking."""
    booking = await get_booking_for_user(db, actor, booking_id)
    return build_invoice(booking, issued_on=today)
