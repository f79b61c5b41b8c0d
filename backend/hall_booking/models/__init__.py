from hall_booking.models.user import User
from hall_booking.models.hall import Hall
from hall_booking.models.hall_booked_date import HallBookedDate
from hall_booking.models.booking import Booking

__all__ = ["User", "Hall", "HallBookedDate", "Booking"]
