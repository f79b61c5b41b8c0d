"""
Rentable hall with its reserved-date set.

Key design decisions:
- `booked_dates` is a child table rather than an array column so the
  (hall_id, booked_on) unique constraint can be enforced by the database
- Booked dates are loaded eagerly; the calendar and the submission
  pre-check both need them
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from hall_booking.db.base import Base, TimestampMixin


class Hall(Base, TimestampMixin):
    __tablename__ = "halls"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    capacity = Column(Integer, nullable=False)
    equipment_included = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    hourly_rate = Column(Float, nullable=False, default=0.0)
    is_available = Column(Boolean, nullable=False, default=True)
    location = Column(String(255), nullable=True)
    rules = Column(String(2000), nullable=True)

    reserved_dates = relationship(
        "HallBookedDate",
        back_populates="hall",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="HallBookedDate.booked_on",
    )
    bookings = relationship("Booking", back_populates="hall", lazy="noload")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="check_hall_capacity_positive"),
        CheckConstraint("hourly_rate >= 0", name="check_hall_rate_non_negative"),
    )

    @property
    def booked_dates(self) -> list:
        return [row.booked_on for row in self.reserved_dates]

    def __repr__(self) -> str:
        return f"<Hall(id={self.id}, name={self.name}, available={self.is_available})>"
