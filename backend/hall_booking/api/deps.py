"""
Request-scoped dependencies shared by the route modules.
"""

from datetime import date

from hall_booking.services.interfaces.date_lock import DateLockStrategy
from hall_booking.services.strategy_factory import get_date_lock


def get_today() -> date:
    """The calendar date bookings are judged against. No time zone conversion."""
    return date.today()


def get_date_lock_strategy() -> DateLockStrategy:
    return get_date_lock()
