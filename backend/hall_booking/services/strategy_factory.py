"""
Date lock strategy factory.
Configures which date lock strategy to use.
"""

from typing import Optional

from hall_booking.services.interfaces.date_lock import DateLockStrategy
from hall_booking.services.interfaces.database_lock import DatabaseDateLock
from hall_booking.services.date_lock_service import RedisDateLock
from hall_booking.core.config import get_settings


def get_date_lock_strategy() -> DateLockStrategy:
    """
    Build the configured date lock strategy.

    - "database" (default): DatabaseDateLock, unique constraint only
    - "redis": RedisDateLock in front of the constraint

    Selected via the DATE_LOCK_STRATEGY env var.
    """
    strategy = get_settings().DATE_LOCK_STRATEGY

    if strategy == "redis":
        return RedisDateLock()
    return DatabaseDateLock()


# Singleton instance
_strategy: Optional[DateLockStrategy] = None

def get_date_lock() -> DateLockStrategy:
    """Get date lock strategy singleton."""
    global _strategy
    if _strategy is None:
        _strategy = get_date_lock_strategy()
    return _strategy
