"""Week domain value: ISO year + ISO week number, serialized as 'YYYY-Wnn'."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Literal, Optional, Union

from coach.utilities.constants import DAYS_PER_WEEK, WEEK_FORMAT

_WEEK_PATTERN = re.compile(r'^(\d{4})-W(\d{2})$')

Ordering = Literal["before", "same", "after"]
DateLike = Union[date, datetime]


@dataclass(frozen=True)
class WeekIdentifier:
    year: int
    week: int

    def __post_init__(self):
        if not 1 <= self.week <= 53:
            raise ValueError(f"week must be in 1..53, got {self.week}")
        # fromisocalendar rejects week 53 in years that only have 52
        date.fromisocalendar(self.year, self.week, 1)

    def __str__(self) -> str:
        return WEEK_FORMAT.format(year=self.year, week=self.week)

    @classmethod
    def parse(cls, text: str) -> WeekIdentifier:
        m = _WEEK_PATTERN.match((text or '').strip())
        if not m:
            raise ValueError(f"not a week identifier: {text!r}")
        return cls(int(m.group(1)), int(m.group(2)))

    @classmethod
    def from_date(cls, day: DateLike) -> WeekIdentifier:
        iso = day.isocalendar()
        return cls(iso[0], iso[1])

    def monday(self) -> date:
        return date.fromisocalendar(self.year, self.week, 1)

    def days(self) -> List[date]:
        """Calendar dates of the week, index 0 = Monday (day_index 1)."""
        start = self.monday()
        return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]

    def today_index(self, now: Optional[DateLike] = None) -> Optional[int]:
        """day_index (1..7) of ``now`` when it falls inside this week."""
        now = now or datetime.now()
        if WeekIdentifier.from_date(now) != self:
            return None
        return now.isoweekday()


def current_week(now: Optional[DateLike] = None) -> WeekIdentifier:
    return WeekIdentifier.from_date(now or datetime.now())


def compare(a: WeekIdentifier, b: WeekIdentifier) -> Ordering:
    """Order two weeks through their zero-padded serialization."""
    sa, sb = str(a), str(b)
    if sa < sb:
        return "before"
    if sa > sb:
        return "after"
    return "same"


def add_weeks(week: WeekIdentifier, delta: int) -> WeekIdentifier:
    return WeekIdentifier.from_date(week.monday() + timedelta(weeks=delta))


def coerce_week(value: Union[WeekIdentifier, str, None], now: Optional[DateLike] = None) -> WeekIdentifier:
    """Accept a WeekIdentifier, its string form, or None (current week)."""
    if value is None:
        return current_week(now)
    if isinstance(value, WeekIdentifier):
        return value
    return WeekIdentifier.parse(value)


__all__ = ['WeekIdentifier', 'current_week', 'compare', 'add_weeks', 'coerce_week']
