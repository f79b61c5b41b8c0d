"""
Pydantic schemas for booking-related request/response validation.

Date and times are optional on the request model on purpose: missing values
are reported by the submission checks, in order, as a 400 rather than a 422.
"""

from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field

from hall_booking.models.enums import BookingStatus, BookingView


class BookingCreate(BaseModel):
    hall_id: int
    booking_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    attendees: int = 1
    purpose: str = Field("", max_length=2000)


class BookingCancel(BaseModel):
    reason: str = Field("", max_length=1000)


class BookingReview(BaseModel):
    status: BookingStatus
    reason: Optional[str] = Field(None, max_length=1000)


class BookingResponse(BaseModel):
    id: int
    reference: str
    hall_id: int
    hall_name: str
    hall_hourly_rate: float
    user_id: int
    user_email: str
    user_name: str
    booking_date: date
    start_time: time
    end_time: time
    duration: float
    attendees: int
    purpose: str
    status: BookingStatus
    total_cost: float
    created_at: datetime
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingListItem(BookingResponse):
    view: BookingView
    can_cancel: bool


class BookingSummary(BaseModel):
    total: int
    pending: int
    accepted: int
    rejected: int
    cancelled: int
    upcoming: int
    past: int
    total_cost: float
    accepted_cost: float


class InvoiceLine(BaseModel):
    description: str
    quantity: float
    unit_price: float
    amount: float


class InvoiceResponse(BaseModel):
    invoice_number: str
    booking_reference: str
    issued_on: date
    billed_to: str
    billed_email: str
    hall_name: str
    booking_date: date
    start_time: time
    end_time: time
    lines: list[InvoiceLine]
    total: float
    currency: str


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: int
    status: BookingStatus
