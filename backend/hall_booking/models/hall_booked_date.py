"""
One reserved calendar date for one hall.

The unique constraint on (hall_id, booked_on) is what actually prevents
double-booking: two transactions that both passed the read-side check cannot
both insert the same row.
"""

from sqlalchemy import Column, Integer, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from hall_booking.db.base import Base, TimestampMixin


class HallBookedDate(Base, TimestampMixin):
    __tablename__ = "hall_booked_dates"

    id = Column(Integer, primary_key=True, index=True)
    hall_id = Column(Integer, ForeignKey("halls.id", ondelete="CASCADE"), nullable=False, index=True)
    booked_on = Column(Date, nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=True)

    hall = relationship("Hall", back_populates="reserved_dates")

    __table_args__ = (
        UniqueConstraint("hall_id", "booked_on", name="uq_hall_booked_date"),
    )

    def __repr__(self) -> str:
        return f"<HallBookedDate(hall={self.hall_id}, date={self.booked_on})>"
