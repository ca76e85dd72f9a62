"""Conflict detection between bookings and the shared calendar.

Three independent passes:

- OVERLAPPING_REQUESTS: bookings overlapping each other (approved among
  themselves, approved against pending, pending among themselves)
- CALENDAR_CONFLICT: a pending or approved booking overlapping a blocking
  calendar entry that is not the booking's own event
- OVERLAPPING_CALENDAR_EVENTS: blocking calendar entries overlapping each
  other, unless all of them belong to one linked group

Results are deduplicated by ``(type, key)`` and ignored conflicts are
removed before anything is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterable, Sequence, Union

from apps.bookings.models import Booking
from apps.calendar_sync.adapter import CalendarAdapter, ExternalEvent, get_calendar_adapter
from apps.calendar_sync.linking import EventGraph
from apps.calendar_sync.services import booking_event_ids, default_window, is_booking_event
from shared.domain.value_objects import DateInterval

from .ledger import ConflictLedger, conflict_key
from .models import ConflictType


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


def _booking_record(booking: Booking) -> dict:
    return {
        "id": booking.pk,
        "booking_code": booking.booking_code,
        "guest_name": booking.guest_name,
        "guest_email": booking.guest_email,
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
        "status": booking.status,
    }


def _event_record(event: ExternalEvent) -> dict:
    return {
        "id": event.id,
        "summary": event.summary or "Untitled entry",
        "start_date": event.start.isoformat(),
        "end_date": event.end.isoformat(),
    }


class _ConflictRecord:
    """Behaviour shared by every conflict kind."""

    conflict_type: ClassVar[str]

    @property
    def involved_bookings(self) -> Sequence[Booking]:
        return ()

    @property
    def involved_events(self) -> Sequence[ExternalEvent]:
        return ()

    def involves_event(self, event_id: str) -> bool:
        return any(event.id == event_id for event in self.involved_events)

    def to_record(self) -> dict:
        """Payload handed to the notifier and the API."""
        return {
            "conflict_type": self.conflict_type,
            "conflict_key": self.key,
            "description": self.description,
            "severity": self.severity.value,
            "is_potential_conflict": getattr(self, "is_potential_conflict", False),
            "involved_bookings": [_booking_record(booking) for booking in self.involved_bookings],
            "involved_events": [_event_record(event) for event in self.involved_events],
        }


@dataclass(frozen=True)
class OverlappingBookingsConflict(_ConflictRecord):
    bookings: tuple[Booking, ...]
    severity: Severity
    is_potential_conflict: bool = False

    conflict_type: ClassVar[str] = ConflictType.OVERLAPPING_REQUESTS.value

    @property
    def key(self) -> str:
        return conflict_key(booking.pk for booking in self.bookings)

    @property
    def description(self) -> str:
        return f"{len(self.bookings)} overlapping booking requests"

    @property
    def involved_bookings(self) -> Sequence[Booking]:
        return self.bookings


@dataclass(frozen=True)
class CalendarConflict(_ConflictRecord):
    booking: Booking
    event: ExternalEvent

    conflict_type: ClassVar[str] = ConflictType.CALENDAR_CONFLICT.value
    severity: ClassVar[Severity] = Severity.HIGH

    @property
    def key(self) -> str:
        return conflict_key([self.booking.pk, self.event.id])

    @property
    def description(self) -> str:
        return f"Conflict with calendar entry: {self.event.summary or 'Untitled entry'}"

    @property
    def involved_bookings(self) -> Sequence[Booking]:
        return (self.booking,)

    @property
    def involved_events(self) -> Sequence[ExternalEvent]:
        return (self.event,)


@dataclass(frozen=True)
class OverlappingCalendarEventsConflict(_ConflictRecord):
    events: tuple[ExternalEvent, ...]

    conflict_type: ClassVar[str] = ConflictType.OVERLAPPING_CALENDAR_EVENTS.value
    severity: ClassVar[Severity] = Severity.HIGH

    @property
    def key(self) -> str:
        return conflict_key(event.id for event in self.events)

    @property
    def description(self) -> str:
        return f"{len(self.events)} overlapping calendar entries"

    @property
    def involved_events(self) -> Sequence[ExternalEvent]:
        return self.events


Conflict = Union[OverlappingBookingsConflict, CalendarConflict, OverlappingCalendarEventsConflict]


def _booking_overlap_severity(group: Sequence[Booking]) -> tuple[Severity, bool]:
    if all(booking.status == Booking.Status.PENDING for booking in group):
        return Severity.MEDIUM, True
    if len(group) >= 3:
        return Severity.HIGH, False
    if any(booking.status == Booking.Status.PENDING for booking in group):
        return Severity.MEDIUM, True
    return Severity.HIGH, False


def find_overlapping_bookings(
    approved: Sequence[Booking],
    pending: Sequence[Booking],
) -> list[OverlappingBookingsConflict]:
    conflicts: list[OverlappingBookingsConflict] = []

    def add(group: list[Booking]) -> None:
        severity, potential = _booking_overlap_severity(group)
        conflicts.append(OverlappingBookingsConflict(tuple(group), severity, potential))

    for index, anchor in enumerate(approved):
        group = [anchor]
        group.extend(other for other in approved[index + 1:] if anchor.interval.overlaps(other.interval))
        group.extend(other for other in pending if anchor.interval.overlaps(other.interval))
        if len(group) > 1:
            add(group)

    for index, anchor in enumerate(pending):
        group = [anchor]
        group.extend(other for other in pending[index + 1:] if anchor.interval.overlaps(other.interval))
        if len(group) > 1:
            add(group)

    return conflicts


def find_calendar_conflicts(
    bookings: Iterable[Booking],
    events: Sequence[ExternalEvent],
) -> list[CalendarConflict]:
    conflicts = []
    for booking in bookings:
        if booking.status not in (Booking.Status.PENDING, Booking.Status.APPROVED):
            continue
        for event in events:
            if event.is_informational or event.id == booking.google_event_id:
                continue
            if booking.interval.overlaps(event.interval):
                conflicts.append(CalendarConflict(booking, event))
    return conflicts


def find_overlapping_calendar_events(
    events: Sequence[ExternalEvent],
    graph: EventGraph,
) -> list[OverlappingCalendarEventsConflict]:
    blocking = sorted(
        (event for event in events if not event.is_informational),
        key=lambda event: (event.start, event.end, event.id),
    )
    conflicts = []
    for index, anchor in enumerate(blocking):
        group = [anchor]
        group.extend(other for other in blocking[index + 1:] if anchor.interval.overlaps(other.interval))
        if len(group) < 2:
            continue
        if graph.are_connected(event.id for event in group):
            continue
        conflicts.append(OverlappingCalendarEventsConflict(tuple(group)))
    return conflicts


def deduplicate(conflicts: Iterable[Conflict]) -> list[Conflict]:
    seen: set[tuple[str, str]] = set()
    unique: list[Conflict] = []
    for conflict in conflicts:
        marker = (conflict.conflict_type, conflict.key)
        if marker not in seen:
            seen.add(marker)
            unique.append(conflict)
    return unique


class ConflictDetector:
    def __init__(self, adapter: CalendarAdapter | None = None, ledger: ConflictLedger | None = None):
        self.adapter = adapter or get_calendar_adapter()
        self.ledger = ledger or ConflictLedger()

    def manual_events(self, window: DateInterval | None = None) -> list[ExternalEvent]:
        """Blocking calendar entries that do not mirror a booking."""
        window = window or default_window()
        known_ids = booking_event_ids()
        return [
            event
            for event in self.adapter.list_events(window.start, window.end)
            if not event.is_informational and not is_booking_event(event, known_ids)
        ]

    def find_all_conflicts(self, window: DateInterval | None = None, *, include_ignored: bool = False) -> list[Conflict]:
        bookings = list(Booking.objects.active().order_by("start_date", "pk"))
        approved = [booking for booking in bookings if booking.status == Booking.Status.APPROVED]
        pending = [booking for booking in bookings if booking.status == Booking.Status.PENDING]
        events = self.manual_events(window)
        graph = EventGraph.from_database()

        conflicts = deduplicate(
            [
                *find_overlapping_bookings(approved, pending),
                *find_calendar_conflicts(bookings, events),
                *find_overlapping_calendar_events(events, graph),
            ]
        )
        if include_ignored:
            return conflicts

        ignored = self.ledger.ignored_keys()
        return [conflict for conflict in conflicts if (conflict.key, conflict.conflict_type) not in ignored]
