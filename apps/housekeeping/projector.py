"""Month view of occupancy for housekeeping.

Turns approved bookings and blocking calendar entries into one record per
day of a month: which stays arrive, depart or are in house, and which days
need cleaning. Stays that lie completely inside a longer stay (for example
a calendar block entered on top of a booking) are not shown as periods of
their own; they only count towards ``occupied_count``.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Sequence

from shared.domain.value_objects import DateInterval

HOUSEKEEPING_PALETTE: tuple[str, ...] = (
    "blue",
    "purple",
    "orange",
    "teal",
    "pink",
    "indigo",
    "yellow",
    "cyan",
)


class DayType(str, Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    BOTH = "both"
    OCCUPIED = "occupied"


@dataclass(frozen=True)
class OccupancyInterval:
    id: str
    start: date
    end: date
    source: str
    color_tag: str | None = None

    @property
    def interval(self) -> DateInterval:
        return DateInterval(self.start, self.end)

    @property
    def duration(self) -> int:
        return (self.end - self.start).days


@dataclass(frozen=True)
class Period:
    id: str
    start: date
    end: date
    source: str
    color_index: int
    color_tag: str | None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "source": self.source,
            "color_index": self.color_index,
            "color": HOUSEKEEPING_PALETTE[self.color_index],
            "color_tag": self.color_tag,
        }


@dataclass
class DayInfo:
    date: date
    type: DayType
    ending: list[str] = field(default_factory=list)
    staying: list[str] = field(default_factory=list)
    starting: list[str] = field(default_factory=list)
    occupied_count: int = 0

    @property
    def periods(self) -> list[str]:
        """Period ids in display order: departing half first, arriving half last."""
        return [*self.ending, *self.staying, *self.starting]

    def as_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "type": self.type.value,
            "periods": self.periods,
            "ending": self.ending,
            "starting": self.starting,
            "occupied_count": self.occupied_count,
        }


@dataclass(frozen=True)
class CleaningDay:
    date: date
    same_day: bool
    next_check_in: date | None = None

    def as_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "reason": "same_day" if self.same_day else "between",
            "next_check_in": self.next_check_in.isoformat() if self.next_check_in else None,
        }


@dataclass
class MonthProjection:
    year: int
    month: int
    days: dict[date, DayInfo]
    periods: list[Period]
    cleaning_days: list[CleaningDay]

    def as_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "days": {day.isoformat(): info.as_dict() for day, info in sorted(self.days.items())},
            "periods": [period.as_dict() for period in self.periods],
            "cleaning_days": [cleaning_day.as_dict() for cleaning_day in self.cleaning_days],
        }


def month_interval(year: int, month: int) -> DateInterval:
    last_day = calendar.monthrange(year, month)[1]
    return DateInterval(date(year, month, 1), date(year, month, last_day))


def filter_contained(
    intervals: Iterable[OccupancyInterval],
) -> tuple[list[OccupancyInterval], list[OccupancyInterval]]:
    """
    Split intervals into those shown as periods and those lying inside another.

    Longest intervals are considered first, later starts first on equal
    length. An interval is contained if it lies within another interval
    that has not been excluded itself; of several identical intervals only
    the first one in that order is kept.
    """
    ordered = sorted(intervals, key=lambda item: (-item.duration, -item.start.toordinal(), item.id))
    excluded: set[int] = set()
    kept: list[OccupancyInterval] = []
    contained: list[OccupancyInterval] = []

    for index, candidate in enumerate(ordered):
        for other_index, other in enumerate(ordered):
            if other_index == index or other_index in excluded:
                continue
            same_dates = (candidate.start, candidate.end) == (other.start, other.end)
            if (same_dates and other_index < index) or (
                not same_dates and candidate.interval.is_within(other.interval)
            ):
                excluded.add(index)
                contained.append(candidate)
                break
        else:
            kept.append(candidate)

    return kept, contained


def _cleaning_days(periods: Sequence[Period], month: DateInterval) -> list[CleaningDay]:
    """Check-out days followed by another check-in on the same or a later day."""
    by_end = sorted(periods, key=lambda period: (period.end, period.start, period.id))
    by_start = sorted(periods, key=lambda period: (period.start, period.id))
    found: dict[date, CleaningDay] = {}

    for period in by_end:
        following = next(
            (other for other in by_start if other.id != period.id and other.start >= period.end),
            None,
        )
        if following is None:
            continue
        in_month = any(
            month.contains_day(day) for day in (period.start, period.end, following.start)
        )
        if not in_month or period.end in found:
            continue
        same_day = following.start == period.end
        found[period.end] = CleaningDay(
            date=period.end,
            same_day=same_day,
            next_check_in=None if same_day else following.start,
        )

    return [found[day] for day in sorted(found)]


def project_intervals(intervals: Iterable[OccupancyInterval], year: int, month: int) -> MonthProjection:
    month_range = month_interval(year, month)
    relevant = [item for item in intervals if item.interval.overlaps(month_range)]
    kept, _contained = filter_contained(relevant)

    periods = [
        Period(
            id=item.id,
            start=item.start,
            end=item.end,
            source=item.source,
            color_index=index % len(HOUSEKEEPING_PALETTE),
            color_tag=item.color_tag,
        )
        for index, item in enumerate(sorted(kept, key=lambda item: (item.start, item.end, item.id)))
    ]

    days: dict[date, DayInfo] = {}
    for day in month_range.days():
        ending = [period.id for period in periods if period.end == day]
        starting = [period.id for period in periods if period.start == day]
        staying = [period.id for period in periods if period.start < day < period.end]
        if not (ending or starting or staying):
            continue

        if ending and starting:
            day_type = DayType.BOTH
        elif starting:
            day_type = DayType.ARRIVAL
        elif ending:
            day_type = DayType.DEPARTURE
        else:
            day_type = DayType.OCCUPIED

        days[day] = DayInfo(
            date=day,
            type=day_type,
            ending=ending,
            staying=staying,
            starting=starting,
            occupied_count=sum(1 for item in relevant if item.interval.contains_day(day)),
        )

    return MonthProjection(
        year=year,
        month=month,
        days=days,
        periods=periods,
        cleaning_days=_cleaning_days(periods, month_range),
    )
