"""
Booking service: submission with double-booking prevention, cancellation,
admin review, and read-side views.

CONCURRENCY STRATEGY: Unique date row in the same transaction
=============================================================

Problem:
  Two users open the calendar for the same hall, both see 2025-04-01 free,
  both submit. The read-side check ("is this date in booked_dates?") passes
  for both because neither has written yet.

Solution:
  Each reserved date is a row in hall_booked_dates with a UNIQUE
  (hall_id, booked_on) constraint. Submission writes the booking and that
  row in one transaction:

  1. INSERT booking (status=pending)
  2. INSERT hall_booked_dates (hall_id, date, booking_id)
  3. COMMIT

  If step 2 violates the constraint, another submission already holds the
  date: the whole transaction is rolled back, so no pending booking is left
  behind without its calendar entry, and the caller gets the same 409 as
  the read-side check would have produced.

  An optional DateLockStrategy (Redis SET NX) can turn losers away before
  step 1; it never replaces the constraint.
"""

import time
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from hall_booking.core.config import get_settings
from hall_booking.core.logging import get_booking_logger
from hall_booking.core.metrics import booking_latency, record_booking_attempt, record_transition
from hall_booking.core.security import Actor
from hall_booking.models.booking import Booking
from hall_booking.models.enums import BookingStatus, BookingView, InvalidTransition
from hall_booking.models.hall import Hall
from hall_booking.models.hall_booked_date import HallBookedDate
from hall_booking.schemas.booking import BookingCreate, InvoiceLine, InvoiceResponse
from hall_booking.services import booking_rules
from hall_booking.services.booking_rules import BookingQuote, DATE_ALREADY_BOOKED
from hall_booking.services.hall_service import get_hall
from hall_booking.services.interfaces.date_lock import DateLockStrategy
from hall_booking.services.interfaces.database_lock import DatabaseDateLock

logger = get_booking_logger(__name__)
settings = get_settings()

STORE_FAILURE = "Booking could not be saved, please try again"


def _store_failure() -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_FAILURE)


def _date_taken() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DATE_ALREADY_BOOKED)


# ---------------------------------------------------------------------
# SUBMISSION
# ---------------------------------------------------------------------
async def submit_booking(
    db: AsyncSession,
    actor: Optional[Actor],
    booking_data: BookingCreate,
    today: date,
    date_lock: Optional[DateLockStrategy] = None,
) -> Booking:
    """
    Validate a booking request against the hall as currently stored,
    then persist it. Raises HTTPException on any failed check.
    """
    started = time.perf_counter()
    try:
        booking_rules.require_actor(actor, "You must be signed in to book a hall")
        hall = await get_hall(db, booking_data.hall_id)
        quote = booking_rules.validate_submission(
            actor,
            hall_id=hall.id,
            hall_capacity=hall.capacity,
            hall_hourly_rate=hall.hourly_rate,
            hall_is_available=hall.is_available,
            booked_dates=hall.booked_dates,
            booking_date=booking_data.booking_date,
            start_time=booking_data.start_time,
            end_time=booking_data.end_time,
            attendees=booking_data.attendees,
            purpose=booking_data.purpose,
            today=today,
        )
    except HTTPException as exc:
        outcome = "conflict" if exc.status_code == status.HTTP_409_CONFLICT else "validation"
        record_booking_attempt(outcome)
        logger.info(
            "booking_submission_refused",
            hall_id=booking_data.hall_id,
            booking_date=str(booking_data.booking_date),
            status_code=exc.status_code,
            reason=exc.detail,
        )
        raise

    booking = await persist_booking(db, actor, hall, quote, date_lock=date_lock)
    booking_latency.observe(time.perf_counter() - started)
    return booking


async def persist_booking(
    db: AsyncSession,
    actor: Actor,
    hall: Hall,
    quote: BookingQuote,
    date_lock: Optional[DateLockStrategy] = None,
) -> Booking:
    """
    Write a validated booking and its hall date in one transaction.

    `quote` may have been validated against a stale read of the hall; the
    unique constraint decides who gets the date.
    """
    date_lock = date_lock or DatabaseDateLock()
    hall_id = hall.id
    booking_date = quote.booking_date

    if not await date_lock.acquire(hall_id, booking_date):
        record_booking_attempt("conflict")
        logger.info("booking_date_locked", hall_id=hall_id, booking_date=str(booking_date))
        raise _date_taken()

    try:
        booking = Booking(
            reference=booking_rules.generate_reference(),
            hall_id=hall_id,
            hall_name=hall.name,
            hall_hourly_rate=quote.hourly_rate,
            hall_capacity=hall.capacity,
            user_id=actor.id,
            user_email=actor.email,
            user_name=actor.display_name,
            booking_date=booking_date,
            start_time=quote.start_time,
            end_time=quote.end_time,
            duration=quote.duration,
            attendees=quote.attendees,
            purpose=quote.purpose,
            status=BookingStatus.PENDING.value,
            total_cost=quote.total_cost,
        )
        db.add(booking)
        await db.flush()

        db.add(HallBookedDate(hall_id=hall_id, booked_on=booking_date, booking_id=booking.id))
        await db.flush()
        await db.refresh(booking)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        record_booking_attempt("conflict")
        logger.warning(
            "booking_rejected_date_taken",
            hall_id=hall_id,
            booking_date=str(booking_date),
            user_id=actor.id,
        )
        raise _date_taken()
    except SQLAlchemyError as e:
        await db.rollback()
        record_booking_attempt("error")
        logger.error(
            "booking_store_failed",
            hall_id=hall_id,
            booking_date=str(booking_date),
            user_id=actor.id,
            error=str(e),
        )
        raise _store_failure()
    finally:
        await date_lock.release(hall_id, booking_date)

    record_booking_attempt("success")
    logger.info(
        "booking_submitted",
        booking_id=booking.id,
        reference=booking.reference,
        hall_id=hall_id,
        booking_date=str(booking_date),
        user_id=actor.id,
        duration=booking.duration,
        total_cost=booking.total_cost,
    )
    return booking


# ---------------------------------------------------------------------
# LIFECYCLE
# ---------------------------------------------------------------------
async def get_booking_for_user(db: AsyncSession, actor: Actor, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id, Booking.user_id == actor.id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()

    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


async def _release_date(db: AsyncSession, booking_id: int) -> None:
    await db.execute(delete(HallBookedDate).where(HallBookedDate.booking_id == booking_id))


async def _commit_transition(
    db: AsyncSession,
    booking: Booking,
    event: str,
    release_date: bool = False,
    **context,
) -> Booking:
    """Write a status change, optionally freeing the hall date in the same transaction."""
    booking_id = booking.id
    try:
        if release_date:
            await _release_date(db, booking_id)
        await db.flush()
        await db.refresh(booking)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(event + "_store_failed", booking_id=booking_id, error=str(e), **context)
        raise _store_failure()
    return booking


async def cancel_booking(
    db: AsyncSession,
    actor: Optional[Actor],
    booking_id: int,
    reason: str,
    today: date,
) -> Booking:
    """
    Owner cancellation: pending|accepted -> cancelled while the date is
    today or later. Frees the hall date. Refused with 400 and no write when
    the booking is terminal, in the past, or no reason is given.
    """
    actor = booking_rules.require_actor(actor, "You must be signed in to cancel a booking")
    booking = await get_booking_for_user(db, actor, booking_id)
    current = booking.booking_status

    try:
        reason = booking_rules.check_cancellation(current, booking.booking_date, reason, today)
    except HTTPException as exc:
        logger.info(
            "booking_cancellation_refused",
            booking_id=booking.id,
            status=current.value,
            reason=exc.detail,
        )
        raise
    new_status = current.transition_to(BookingStatus.CANCELLED)

    booking.status = new_status.value
    booking.cancelled_at = datetime.now(timezone.utc)
    booking.cancellation_reason = reason
    booking = await _commit_transition(
        db, booking, "booking_cancellation", release_date=True, user_id=actor.id
    )

    record_transition(current.value, new_status.value)
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        reference=booking.reference,
        user_id=actor.id,
        hall_id=booking.hall_id,
        previous_status=current.value,
    )
    return booking


async def review_booking(
    db: AsyncSession,
    admin: Actor,
    booking_id: int,
    target: BookingStatus,
    reason: Optional[str] = None,
) -> Booking:
    """Admin decision on a pending booking: accept it or reject it with a reason."""
    if target not in (BookingStatus.ACCEPTED, BookingStatus.REJECTED):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A review can only accept or reject a booking",
        )

    result = await db.execute(
        select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")

    current = booking.booking_status
    try:
        new_status = current.transition_to(target)
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    reason = (reason or "").strip()
    if new_status == BookingStatus.REJECTED and not reason:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a reason for rejection",
        )

    booking.status = new_status.value
    booking.reviewed_at = datetime.now(timezone.utc)
    if new_status == BookingStatus.REJECTED:
        booking.rejection_reason = reason
    booking = await _commit_transition(
        db,
        booking,
        "booking_review",
        release_date=new_status == BookingStatus.REJECTED,
        admin_id=admin.id,
    )

    record_transition(current.value, new_status.value)
    logger.info(
        "booking_reviewed",
        booking_id=booking.id,
        reference=booking.reference,
        admin_id=admin.id,
        previous_status=current.value,
        status=new_status.value,
    )
    return booking


# ---------------------------------------------------------------------
# READ SIDE
# ---------------------------------------------------------------------
async def get_user_bookings(
    db: AsyncSession,
    actor: Actor,
    today: date,
    view: Optional[BookingView] = None,
) -> list[tuple[Booking, BookingView, bool]]:
    """
    The actor's bookings sorted by date, each with its view classification
    and whether the owner may still cancel it.
    """
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == actor.id)
        .order_by(Booking.booking_date.asc(), Booking.start_time.asc())
        .execution_options(populate_existing=True)
    )
    items = []
    for booking in result.scalars().all():
        booking_status = booking.booking_status
        booking_view = booking_rules.classify_booking(booking.booking_date, booking_status, today)
        if view is not None and booking_view != view:
            continue
        items.append((
            booking,
            booking_view,
            booking_rules.can_cancel(booking_status, booking.booking_date, today),
        ))
    return items


async def list_all_bookings(db: AsyncSession, status_filter: Optional[BookingStatus] = None) -> list[Booking]:
    query = select(Booking)
    if status_filter is not None:
        query = query.where(Booking.status == status_filter.value)
    result = await db.execute(
        query.order_by(Booking.booking_date.asc()).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


def build_invoice(booking: Booking, issued_on: date) -> InvoiceResponse:
    """Invoice for an accepted booking, priced at the rate snapshotted on the booking."""
    if booking.booking_status != BookingStatus.ACCEPTED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invoices are only available for accepted bookings",
        )

    line = InvoiceLine(
        description=(
            f"{booking.hall_name} rental, {booking.booking_date.isoformat()} "
            f"{booking.start_time.strftime('%H:%M')}-{booking.end_time.strftime('%H:%M')}"
        ),
        quantity=booking.duration,
        unit_price=booking.hall_hourly_rate,
        amount=booking.total_cost,
    )
    return InvoiceResponse(
        invoice_number=f"INV-{booking.reference}",
        booking_reference=booking.reference,
        issued_on=issued_on,
        billed_to=booking.user_name,
        billed_email=booking.user_email,
        hall_name=booking.hall_name,
        booking_date=booking.booking_date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        lines=[line],
        total=booking.total_cost,
        currency=settings.CURRENCY,
    )
