"""
Pydantic schemas for the availability calendar.
"""

from datetime import date
from pydantic import BaseModel

from hall_booking.models.enums import DayState


class CalendarDay(BaseModel):
    date: date
    in_month: bool
    state: DayState


class MonthCursor(BaseModel):
    year: int
    month: int


class CalendarResponse(BaseModel):
    hall_id: int
    year: int
    month: int
    is_available: bool
    days: list[CalendarDay]
    previous: MonthCursor
    next: MonthCursor
