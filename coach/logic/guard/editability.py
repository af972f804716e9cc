"""Editability rules for weekly plans.

Only the current ISO week and later weeks may be mutated; past weeks stay
viewable but read-only. Pure functions, no I/O.
"""
from typing import Optional

from coach.domain.Week import DateLike, WeekIdentifier, compare, current_week
from coach.utilities.errors import EditGuardError


def can_modify(week: WeekIdentifier, now: Optional[DateLike] = None) -> bool:
    return compare(week, current_week(now)) != "before"


def is_week_in_past(week: WeekIdentifier, now: Optional[DateLike] = None) -> bool:
    return not can_modify(week, now)


def can_navigate_next(week: WeekIdentifier, now: Optional[DateLike] = None) -> bool:
    """Forward navigation stops at the current week."""
    return compare(week, current_week(now)) == "before"


def ensure_modifiable(week: WeekIdentifier, now: Optional[DateLike] = None) -> None:
    """Raise EditGuardError for read-only weeks. Call before any mutation request."""
    if not can_modify(week, now):
        raise EditGuardError(str(week), str(current_week(now)))


__all__ = ['can_modify', 'is_week_in_past', 'can_navigate_next', 'ensure_modifiable']
