"""
Date lock strategy interface.
Allows swapping how concurrent submissions for the same hall date are gated.
"""

from abc import ABC, abstractmethod
from datetime import date


class DateLockStrategy(ABC):
    """
    Interface for hall-date lock strategies.

    Implementations:
    - DatabaseDateLock: No pre-check, rely on the (hall_id, booked_on) unique constraint
    - RedisDateLock: SET NX gate in Redis before touching the database

    A lock is advisory. The database constraint stays authoritative.
    """

    @abstractmethod
    async def acquire(self, hall_id: int, booking_date: date) -> bool:
        """
        Try to claim a hall date for the duration of one submission.

        Returns:
            True if claimed (proceed to DB)
            False if another submission holds it (fail fast)
        """

    @abstractmethod
    async def release(self, hall_id: int, booking_date: date) -> None:
        """Drop the claim once the submission has committed or failed."""
