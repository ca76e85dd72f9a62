"""
Common Value Objects

Value objects used across multiple domains:
- DateInterval: A closed range of calendar days (start and end inclusive)

Every occupancy in the system (bookings, external calendar entries,
housekeeping periods) is expressed as a DateInterval once its dates have
been normalized to the property's local day boundary.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo

from shared.domain.base import ValueObject

DateLike = Union[date, datetime, str]


def get_property_timezone() -> ZoneInfo:
    """Return the reference time zone used for day boundaries."""
    from django.conf import settings  # type: ignore

    return ZoneInfo(getattr(settings, 'PROPERTY_TIME_ZONE', 'Europe/Amsterdam'))


def to_local_date(value: DateLike, tz: Optional[ZoneInfo] = None) -> date:
    """
    Normalize a date-like value to a calendar date in the property's time zone

    - date: returned unchanged
    - aware datetime: converted to the local zone before taking the date,
      so 2025-03-30T22:00:00Z becomes 2025-03-31 in Europe/Amsterdam
    - naive datetime: taken as local wall-clock time
    - str: ISO date ("2025-06-01") or ISO datetime
    """
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        value = datetime.fromisoformat(text.replace('Z', '+00:00'))

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz or get_property_timezone()).date()

    if isinstance(value, date):
        return value

    raise TypeError(f"Cannot convert {type(value).__name__} to a calendar date")


@dataclass(frozen=True)
class DateInterval(ValueObject):
    """
    Date interval value object

    Represents the closed range [start, end] at day granularity: both the
    first and the last day are occupied. A one-day stay has start == end.
    """
    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"End date ({self.end}) must not be before start date ({self.start})")

    @classmethod
    def from_values(cls, start: DateLike, end: DateLike, tz: Optional[ZoneInfo] = None) -> 'DateInterval':
        """Build an interval from raw values, normalizing both ends to local dates."""
        return cls(to_local_date(start, tz), to_local_date(end, tz))

    def overlaps(self, other: 'DateInterval') -> bool:
        """
        Check if this interval shares at least one day with another

        Touching intervals overlap: [1-5] and [5-9] share day 5.
        """
        if not isinstance(other, DateInterval):
            raise TypeError("Can only check overlap with another DateInterval")
        return self.start <= other.end and other.start <= self.end

    def is_within(self, other: 'DateInterval') -> bool:
        """Check if this interval lies entirely inside another one."""
        return self.start >= other.start and self.end <= other.end

    def contains(self, other: 'DateInterval') -> bool:
        return other.is_within(self)

    def contains_day(self, day: date) -> bool:
        return self.start <= day <= self.end

    def intersection(self, other: 'DateInterval') -> Optional['DateInterval']:
        """Return the shared days of both intervals, or None if they are disjoint."""
        if not self.overlaps(other):
            return None
        return DateInterval(max(self.start, other.start), min(self.end, other.end))

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    @property
    def nights(self) -> int:
        """Number of nights between the first and the last day."""
        return (self.end - self.start).days

    def __len__(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1

    def __str__(self):
        return f"{self.start.strftime('%d.%m.%Y')} - {self.end.strftime('%d.%m.%Y')}"

    def __repr__(self):
        return f"DateInterval({self.start}, {self.end})"
