"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .date_lock import DateLockStrategy
from .database_lock import DatabaseDateLock

__all__ = ['DateLockStrategy', 'DatabaseDateLock']
