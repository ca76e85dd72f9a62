from datetime import date

import pytest

from apps.bookings.models import Booking
from apps.calendar_sync.colors import info_color
from apps.calendar_sync.linking import EventGraph, EventLinkService
from apps.calendar_sync.tests.fakes import InMemoryCalendarAdapter, make_booking
from apps.conflicts.detector import (
    CalendarConflict,
    ConflictDetector,
    OverlappingBookingsConflict,
    OverlappingCalendarEventsConflict,
    Severity,
    find_overlapping_calendar_events,
)
from apps.conflicts.ledger import ConflictLedger, conflict_key
from apps.conflicts.models import ConflictType
from shared.domain.value_objects import DateInterval

WINDOW = DateInterval(date(2025, 1, 1), date(2025, 12, 31))


@pytest.fixture
def calendar():
    return InMemoryCalendarAdapter()


@pytest.fixture
def detector(calendar):
    return ConflictDetector(adapter=calendar)


def _of_type(conflicts, kind):
    return [conflict for conflict in conflicts if isinstance(conflict, kind)]


def test_conflict_key_is_order_independent():
    assert conflict_key(["b", "a", "c"]) == conflict_key(["c", "b", "a"]) == "a-b-c"


@pytest.mark.django_db
def test_touching_calendar_entries_conflict_until_linked(calendar, detector):
    first = calendar.add("Owner", date(2025, 6, 1), date(2025, 6, 5))
    second = calendar.add("Friends", date(2025, 6, 5), date(2025, 6, 9))

    conflicts = _of_type(detector.find_all_conflicts(WINDOW), OverlappingCalendarEventsConflict)

    assert len(conflicts) == 1
    assert conflicts[0].severity == Severity.HIGH
    assert conflicts[0].key == conflict_key([first.id, second.id])

    EventLinkService(adapter=calendar).link([first.id, second.id])

    assert detector.find_all_conflicts(WINDOW) == []


def test_transitively_linked_entries_do_not_conflict(calendar):
    events = [
        calendar.add("A", date(2025, 6, 1), date(2025, 6, 5)),
        calendar.add("C", date(2025, 6, 4), date(2025, 6, 6)),
    ]
    graph = EventGraph([(events[0].id, "middle"), ("middle", events[1].id)])

    assert find_overlapping_calendar_events(events, graph) == []


@pytest.mark.django_db
def test_informational_entries_never_conflict(calendar, detector):
    calendar.add("Owner", date(2025, 6, 1), date(2025, 6, 5))
    calendar.add("Note", date(2025, 6, 2), date(2025, 6, 3), color_tag=info_color())
    make_booking(date(2025, 6, 20), date(2025, 6, 22))
    calendar.add("Window cleaner", date(2025, 6, 21), date(2025, 6, 21), color_tag=info_color())

    assert detector.find_all_conflicts(WINDOW) == []


@pytest.mark.django_db
def test_booking_against_calendar_entry(calendar, detector):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 5), status=Booking.Status.PENDING)
    event = calendar.add("Owner", date(2025, 6, 5), date(2025, 6, 7))

    conflicts = _of_type(detector.find_all_conflicts(WINDOW), CalendarConflict)

    assert len(conflicts) == 1
    assert conflicts[0].severity == Severity.HIGH
    assert conflicts[0].key == conflict_key([booking.pk, event.id])
    record = conflicts[0].to_record()
    assert record["conflict_type"] == ConflictType.CALENDAR_CONFLICT
    assert record["description"] == "Conflict with calendar entry: Owner"
    assert record["involved_bookings"][0]["booking_code"] == booking.booking_code


@pytest.mark.django_db
def test_booking_own_event_is_not_a_conflict(calendar, detector):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 5))
    own = calendar.add("Booking: Jane Guest", date(2025, 6, 1), date(2025, 6, 5))
    Booking.objects.filter(pk=booking.pk).update(google_event_id=own.id)
    calendar.add("Booking: other", date(2025, 6, 2), date(2025, 6, 3), booking_reference="999")

    assert detector.find_all_conflicts(WINDOW) == []


@pytest.mark.django_db
def test_two_approved_bookings_are_a_high_conflict(detector):
    make_booking(date(2025, 6, 1), date(2025, 6, 5))
    make_booking(date(2025, 6, 5), date(2025, 6, 8))

    (conflict,) = _of_type(detector.find_all_conflicts(WINDOW), OverlappingBookingsConflict)

    assert conflict.severity == Severity.HIGH
    assert conflict.is_potential_conflict is False


@pytest.mark.django_db
def test_pending_request_overlapping_approved_booking_is_potential(detector):
    make_booking(date(2025, 6, 1), date(2025, 6, 5))
    make_booking(date(2025, 6, 3), date(2025, 6, 4), status=Booking.Status.PENDING)

    (conflict,) = _of_type(detector.find_all_conflicts(WINDOW), OverlappingBookingsConflict)

    assert conflict.severity == Severity.MEDIUM
    assert conflict.is_potential_conflict is True


@pytest.mark.django_db
def test_three_pending_requests_stay_medium_and_potential(detector):
    for _ in range(3):
        make_booking(date(2025, 6, 1), date(2025, 6, 5), status=Booking.Status.PENDING)

    conflicts = _of_type(detector.find_all_conflicts(WINDOW), OverlappingBookingsConflict)

    assert conflicts[0].severity == Severity.MEDIUM
    assert conflicts[0].is_potential_conflict is True
    assert len(conflicts[0].bookings) == 3


@pytest.mark.django_db
def test_approved_booking_with_two_pending_requests_is_high(detector):
    make_booking(date(2025, 6, 1), date(2025, 6, 5))
    make_booking(date(2025, 6, 2), date(2025, 6, 3), status=Booking.Status.PENDING)
    make_booking(date(2025, 6, 4), date(2025, 6, 6), status=Booking.Status.PENDING)

    conflicts = _of_type(detector.find_all_conflicts(WINDOW), OverlappingBookingsConflict)

    assert conflicts[0].severity == Severity.HIGH
    assert conflicts[0].is_potential_conflict is False
    assert len(conflicts[0].bookings) == 3


@pytest.mark.django_db
def test_cancelled_bookings_are_ignored(detector):
    make_booking(date(2025, 6, 1), date(2025, 6, 5))
    make_booking(date(2025, 6, 1), date(2025, 6, 5), status=Booking.Status.CANCELLED)
    make_booking(date(2025, 6, 1), date(2025, 6, 5), status=Booking.Status.REJECTED)

    assert detector.find_all_conflicts(WINDOW) == []


@pytest.mark.django_db
def test_ignored_conflict_stays_hidden_until_unignored(calendar, detector):
    calendar.add("Owner", date(2025, 6, 1), date(2025, 6, 5))
    calendar.add("Friends", date(2025, 6, 3), date(2025, 6, 9))
    (conflict,) = detector.find_all_conflicts(WINDOW)
    ledger = ConflictLedger()

    ledger.ignore(conflict.key, conflict.conflict_type, reason="Same family")

    assert detector.find_all_conflicts(WINDOW) == []
    assert len(detector.find_all_conflicts(WINDOW, include_ignored=True)) == 1

    assert ledger.unignore(conflict.key, conflict.conflict_type) is True
    assert len(detector.find_all_conflicts(WINDOW)) == 1
