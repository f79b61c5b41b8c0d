from hall_booking.schemas.user import UserCreate, UserResponse, UserLogin, Token
from hall_booking.schemas.hall import HallCreate, HallResponse, HallListResponse, HallAvailabilityUpdate
from hall_booking.schemas.calendar import CalendarDay, CalendarResponse, MonthCursor
from hall_booking.schemas.booking import (
    BookingCreate, BookingCancel, BookingReview, BookingResponse, BookingListItem,
    BookingSummary, InvoiceResponse, BookingCancelResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "HallCreate", "HallResponse", "HallListResponse", "HallAvailabilityUpdate",
    "CalendarDay", "CalendarResponse", "MonthCursor",
    "BookingCreate", "BookingCancel", "BookingReview", "BookingResponse", "BookingListItem",
    "BookingSummary", "InvoiceResponse", "BookingCancelResponse",
]
