"""
Booking business rules that need no database access.

Submission checks run in a fixed order and stop at the first failure:
  1. an actor is present
  2. date, start time and end time are supplied
  3. end time is strictly after start time
  4. the date is not already in the hall's booked dates
then the hall/date/attendee/purpose checks. Nothing is written by any of them.
"""

import secrets
import string
import time as time_module
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Optional

from fastapi import HTTPException, status

from hall_booking.core.config import get_settings
from hall_booking.core.security import Actor
from hall_booking.models.enums import BookingStatus, BookingView
from hall_booking.schemas.booking import BookingSummary

settings = get_settings()

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
_REFERENCE_SUFFIX_LENGTH = 5

DATE_ALREADY_BOOKED = "This hall is already booked on the selected date"


@dataclass(frozen=True)
class BookingQuote:
    """A validated request, priced against the hall as it was read."""

    hall_id: int
    booking_date: date
    start_time: time
    end_time: time
    duration: float
    attendees: int
    purpose: str
    hourly_rate: float
    total_cost: float


def parse_clock_time(value: str) -> time:
    """Parse "HH:MM" (hour may be unpadded, e.g. "9:30")."""
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid time '{value}', expected HH:MM",
        )


def compute_duration(start: time, end: time) -> float:
    """Hours between two times on the same date; may be fractional or <= 0."""
    start_minutes = start.hour * 60 + start.minute
    end_minutes = end.hour * 60 + end.minute
    return (end_minutes - start_minutes) / 60


def compute_total_cost(duration: float, hourly_rate: float) -> float:
    return round(duration * hourly_rate, 2)


def generate_reference(now: Optional[float] = None) -> str:
    """BK-<epoch millis>-<5 random base36 chars>."""
    millis = int((now if now is not None else time_module.time()) * 1000)
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(_REFERENCE_SUFFIX_LENGTH))
    return f"{settings.BOOKING_REFERENCE_PREFIX}-{millis}-{suffix}"


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def require_actor(actor: Optional[Actor], detail: str = "Not authenticated") -> Actor:
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor


def validate_submission(
    actor: Optional[Actor],
    *,
    hall_id: int,
    hall_capacity: int,
    hall_hourly_rate: float,
    hall_is_available: bool,
    booked_dates: Iterable[date],
    booking_date: Optional[date],
    start_time: Optional[str],
    end_time: Optional[str],
    attendees: int,
    purpose: str,
    today: date,
) -> BookingQuote:
    require_actor(actor, "You must be signed in to book a hall")

    if booking_date is None or not start_time or not end_time:
        raise _bad_request("Booking date, start time and end time are required")

    start = parse_clock_time(start_time)
    end = parse_clock_time(end_time)
    duration = compute_duration(start, end)
    if duration <= 0:
        raise _bad_request("End time must be after start time")

    if booking_date in set(booked_dates):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DATE_ALREADY_BOOKED)

    if not hall_is_available:
        raise _bad_request("This hall is not accepting bookings")

    if booking_date < today:
        raise _bad_request("Cannot book a date in the past")

    if attendees < 1:
        raise _bad_request("At least one attendee is required")
    if attendees > hall_capacity:
        raise _bad_request(
            f"Attendees ({attendees}) exceed hall capacity ({hall_capacity})"
        )

    purpose = purpose.strip()
    if not purpose:
        raise _bad_request("Please describe the purpose of the booking")

    return BookingQuote(
        hall_id=hall_id,
        booking_date=booking_date,
        start_time=start,
        end_time=end,
        duration=duration,
        attendees=attendees,
        purpose=purpose,
        hourly_rate=hall_hourly_rate,
        total_cost=compute_total_cost(duration, hall_hourly_rate),
    )


# ---------------------------------------------------------------------
# LIFECYCLE
# ---------------------------------------------------------------------
def classify_booking(booking_date: date, booking_status: BookingStatus, today: date) -> BookingView:
    if booking_status == BookingStatus.CANCELLED:
        return BookingView.CANCELLED
    if booking_date >= today:
        return BookingView.UPCOMING
    return BookingView.PAST


def can_cancel(booking_status: BookingStatus, booking_date: date, today: date) -> bool:
    return booking_date >= today and booking_status.can_transition_to(BookingStatus.CANCELLED)


def check_cancellation(
    booking_status: BookingStatus,
    booking_date: date,
    reason: str,
    today: date,
) -> str:
    """Return the cleaned reason, or raise 400 without side effects."""
    if booking_status.is_terminal:
        raise _bad_request(f"A {booking_status.value} booking cannot be cancelled")
    if booking_date < today:
        raise _bad_request("Past bookings cannot be cancelled")
    reason = (reason or "").strip()
    if not reason:
        raise _bad_request("Please provide a reason for cancellation")
    return reason


def summarize_bookings(bookings: Iterable, today: date) -> BookingSummary:
    """Counts and cost totals over every booking the actor owns."""
    counts = {s: 0 for s in BookingStatus}
    views = {v: 0 for v in BookingView}
    total_cost = 0.0
    accepted_cost = 0.0

    for booking in bookings:
        booking_status = BookingStatus(booking.status)
        counts[booking_status] += 1
        views[classify_booking(booking.booking_date, booking_status, today)] += 1
        total_cost += booking.total_cost
        if booking_status == BookingStatus.ACCEPTED:
            accepted_cost += booking.total_cost

    return BookingSummary(
        total=sum(counts.values()),
        pending=counts[BookingStatus.PENDING],
        accepted=counts[BookingStatus.ACCEPTED],
        rejected=counts[BookingStatus.REJECTED],
        cancelled=counts[BookingStatus.CANCELLED],
        upcoming=views[BookingView.UPCOMING],
        past=views[BookingView.PAST],
        total_cost=round(total_cost, 2),
        accepted_cost=round(accepted_cost, 2),
    )
