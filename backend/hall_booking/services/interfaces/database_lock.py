"""
Database-only date locking - no pre-check.
Relies entirely on the unique constraint on hall_booked_dates.
"""

from datetime import date

from hall_booking.services.interfaces.date_lock import DateLockStrategy


class DatabaseDateLock(DateLockStrategy):
    """
    Always grant the claim.

    Two submissions for the same date both reach the database; the second
    INSERT into hall_booked_dates fails and its transaction is rolled back.
    """

    async def acquire(self, hall_id: int, booking_date: date) -> bool:
        return True

    async def release(self, hall_id: int, booking_date: date) -> None:
        pass
