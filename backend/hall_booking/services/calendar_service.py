"""
Availability calendar for a single hall.

Everything here is a pure function of (booked dates, today, month cursor,
selected date): rendering the same month twice with no writes in between
yields the same grid.
"""

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional

from hall_booking.models.enums import DayState
from hall_booking.schemas.calendar import CalendarDay, CalendarResponse, MonthCursor

GRID_ROWS = 6
GRID_CELLS = GRID_ROWS * 7

# The grid pads into the neighbouring years, which must exist as dates
MIN_YEAR = 2
MAX_YEAR = 9998

# Weeks start on Sunday, matching the booking page
_month_calendar = calendar.Calendar(firstweekday=calendar.SUNDAY)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move the cursor by `delta` months. No lower or upper bound."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def is_date_disabled(day: date, booked_dates: Iterable[date], today: date) -> bool:
    if day < today:
        return True
    return day in set(booked_dates)


def classify_day(
    day: date,
    booked: frozenset,
    today: date,
    selected: Optional[date] = None,
) -> DayState:
    if day < today or day in booked:
        return DayState.DISABLED
    if selected is not None and day == selected:
        return DayState.SELECTED
    if day == today:
        return DayState.TODAY
    return DayState.NORMAL


def month_grid_dates(year: int, month: int) -> list[date]:
    """The 42 dates shown for a month, padded with neighbouring months' days."""
    days = list(_month_calendar.itermonthdates(year, month))
    while len(days) < GRID_CELLS:
        days.append(days[-1] + timedelta(days=1))
    return days


def build_month_grid(
    booked_dates: Iterable[date],
    today: date,
    year: int,
    month: int,
    selected: Optional[date] = None,
) -> list[CalendarDay]:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"year must be {MIN_YEAR}-{MAX_YEAR}, got {year}")

    booked = frozenset(booked_dates)
    return [
        CalendarDay(
            date=day,
            in_month=day.month == month,
            state=classify_day(day, booked, today, selected),
        )
        for day in month_grid_dates(year, month)
    ]


def render_calendar(
    hall_id: int,
    is_available: bool,
    booked_dates: Iterable[date],
    today: date,
    year: int,
    month: int,
    selected: Optional[date] = None,
) -> CalendarResponse:
    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return CalendarResponse(
        hall_id=hall_id,
        year=year,
        month=month,
        is_available=is_available,
        days=build_month_grid(booked_dates, today, year, month, selected),
        previous=MonthCursor(year=prev_year, month=prev_month),
        next=MonthCursor(year=next_year, month=next_month),
    )
