"""
Redis-backed date lock for high-contention halls.
Implements DateLockStrategy using SET NX EX.

Fail-open policy:
  On Redis failure the claim is granted. The unique constraint on
  hall_booked_dates still rejects a second booking for the same date,
  so a Redis outage degrades to database-only locking, never to
  double-booking.
"""

from datetime import date

from hall_booking.core.config import get_settings
from hall_booking.core.logging import get_logger
from hall_booking.core.metrics import record_date_lock, redis_connection_errors
from hall_booking.services.cache_service import get_redis
from hall_booking.services.interfaces.date_lock import DateLockStrategy

logger = get_logger(__name__)
settings = get_settings()


def _lock_key(hall_id: int, booking_date: date) -> str:
    return f"hall-date:{hall_id}:{booking_date.isoformat()}"


class RedisDateLock(DateLockStrategy):
    """
    Claim hall dates in Redis before hitting the database.

    Use when many users race for the same popular dates and the losers
    should be turned away without opening a transaction.
    """

    def __init__(self, ttl_seconds: int = settings.DATE_LOCK_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds

    async def acquire(self, hall_id: int, booking_date: date) -> bool:
        client = await get_redis()
        if client is None:
            record_date_lock("failed_open")
            return True

        key = _lock_key(hall_id, booking_date)
        try:
            claimed = await client.set(key, "1", nx=True, ex=self.ttl_seconds)
        except Exception as e:
            redis_connection_errors.inc()
            record_date_lock("failed_open")
            logger.error("date_lock_error", key=key, error=str(e))
            return True

        record_date_lock("acquired" if claimed else "contended")
        return bool(claimed)

    async def release(self, hall_id: int, booking_date: date) -> None:
        client = await get_redis()
        if client is None:
            return
        key = _lock_key(hall_id, booking_date)
        try:
            await client.delete(key)
        except Exception as e:
            # The TTL expires the key anyway
            redis_connection_errors.inc()
            logger.warning("date_lock_release_failed", key=key, error=str(e))
