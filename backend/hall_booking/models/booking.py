"""
Booking model representing a user's reservation of a hall for one date.

Key design decisions:
- Hall name, hourly rate and capacity are copied onto the booking when it is
  created; later hall edits never change what a past booking cost
- Status is stored as its string value and read back through BookingStatus
- Rows are never deleted: cancellation and rejection are status changes
"""

from sqlalchemy import (
    Column, Integer, String, Date, Time, Float, DateTime, ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship

from hall_booking.db.base import Base, TimestampMixin
from hall_booking.models.enums import BookingStatus


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(64), unique=True, index=True, nullable=False)

    hall_id = Column(Integer, ForeignKey("halls.id"), nullable=False, index=True)
    hall_name = Column(String(255), nullable=False)
    hall_hourly_rate = Column(Float, nullable=False)
    hall_capacity = Column(Integer, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration = Column(Float, nullable=False)
    attendees = Column(Integer, nullable=False)
    purpose = Column(String(2000), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    total_cost = Column(Float, nullable=False)

    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(1000), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(String(1000), nullable=True)

    hall = relationship("Hall", back_populates="bookings")
    user = relationship("User", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("duration > 0", name="check_booking_duration_positive"),
        CheckConstraint("attendees > 0", name="check_booking_attendees_positive"),
        CheckConstraint("end_time > start_time", name="check_booking_time_order"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected', 'cancelled')",
            name="check_booking_status",
        ),
    )

    @property
    def booking_status(self) -> BookingStatus:
        return BookingStatus(self.status)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, ref={self.reference}, hall={self.hall_id}, status={self.status})>"
