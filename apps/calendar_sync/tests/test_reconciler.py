from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest
from django.test import override_settings

from apps.bookings.models import Booking
from apps.calendar_sync.adapter import CalendarAdapter
from apps.calendar_sync.reconciler import BookingCalendarReconciler, booking_summary, expected_display

from .fakes import InMemoryCalendarAdapter, make_booking


@pytest.fixture
def calendar():
    return InMemoryCalendarAdapter()


@pytest.fixture
def reconciler(calendar):
    return BookingCalendarReconciler(adapter=calendar)


@pytest.mark.django_db
def test_approved_booking_gets_exactly_one_event(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 4))

    result = reconciler.reconcile()

    booking.refresh_from_db()
    assert result.created == 1
    assert booking.google_event_id in calendar.events
    event = calendar.events[booking.google_event_id]
    assert (event.start, event.end) == (date(2025, 6, 1), date(2025, 6, 4))
    assert event.summary == booking_summary(booking)
    assert event.booking_reference == str(booking.pk)


@pytest.mark.django_db
def test_second_run_changes_nothing(calendar, reconciler):
    make_booking(date(2025, 6, 1), date(2025, 6, 4))
    make_booking(date(2025, 7, 1), date(2025, 7, 2), status=Booking.Status.PENDING)
    reconciler.reconcile()

    result = reconciler.reconcile()

    assert result.as_dict() == {"created": 0, "updated": 0, "deleted": 0, "pulled_from_calendar": 0, "errors": []}
    assert len(calendar.events) == 1


@pytest.mark.django_db
@override_settings(BOOKING_BASE_PRICE="100", BOOKING_CLEANING_FEE="0")
def test_dates_edited_in_calendar_are_taken_over(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3))
    reconciler.reconcile()
    booking.refresh_from_db()
    event_id = booking.google_event_id
    calendar.events[event_id] = replace(calendar.events[event_id], end=date(2025, 6, 5))

    result = reconciler.reconcile()

    booking.refresh_from_db()
    assert result.pulled_from_calendar == 1
    assert (booking.start_date, booking.end_date) == (date(2025, 6, 1), date(2025, 6, 5))
    assert booking.total_price == Decimal("400")
    assert "Dates synced from calendar: 01.06.2025 - 03.06.2025 -> 01.06.2025 - 05.06.2025" in booking.admin_notes
    assert booking.google_event_id == event_id


@pytest.mark.django_db
def test_display_fields_are_restored(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3))
    reconciler.reconcile()
    booking.refresh_from_db()
    calendar.events[booking.google_event_id] = replace(calendar.events[booking.google_event_id], summary="renamed")

    result = reconciler.reconcile()

    assert result.updated == 1
    assert calendar.events[booking.google_event_id].summary == expected_display(booking)["summary"]


@pytest.mark.django_db
def test_cancelled_booking_event_is_removed(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3))
    reconciler.reconcile()
    booking.refresh_from_db()
    event_id = booking.google_event_id
    Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.CANCELLED)

    result = reconciler.reconcile()

    booking.refresh_from_db()
    assert result.deleted == 1
    assert event_id not in calendar.events
    assert booking.google_event_id is None


@pytest.mark.django_db
def test_stale_reference_is_recreated(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3), google_event_id="deleted-by-hand")

    result = reconciler.reconcile()

    booking.refresh_from_db()
    assert result.created == 1
    assert booking.google_event_id != "deleted-by-hand"
    assert booking.google_event_id in calendar.events


@pytest.mark.django_db
def test_event_created_for_booking_cancelled_meanwhile_is_deleted(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3))

    def cancel_during_create(event_id):
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.CANCELLED)

    calendar.after_create = cancel_during_create

    result = reconciler.reconcile()

    booking.refresh_from_db()
    assert result.created == 0
    assert calendar.created == calendar.deleted
    assert calendar.events == {}
    assert booking.google_event_id is None


@pytest.mark.django_db
def test_failures_are_collected_per_booking(calendar, reconciler):
    first = make_booking(date(2025, 6, 1), date(2025, 6, 3))
    second = make_booking(date(2025, 7, 1), date(2025, 7, 3))
    calendar.fail_create = True

    result = reconciler.reconcile()

    assert result.created == 0
    assert len(result.errors) == 2
    assert any(first.booking_code in error for error in result.errors)
    assert any(second.booking_code in error for error in result.errors)


@pytest.mark.django_db
def test_unreachable_event_is_left_alone(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3))
    reconciler.reconcile()
    calendar.unavailable = True

    result = reconciler.reconcile()

    booking.refresh_from_db()
    assert result.created == 0
    assert "could not be fetched" in result.errors[0]
    assert booking.google_event_id in calendar.events


@pytest.mark.django_db
def test_unconfigured_calendar_skips_the_run():
    make_booking(date(2025, 6, 1), date(2025, 6, 3))

    result = BookingCalendarReconciler(adapter=CalendarAdapter()).reconcile()

    assert result.as_dict()["created"] == 0
    assert result.errors == []


@pytest.mark.django_db
def test_pushed_dates_are_not_treated_as_drift(calendar, reconciler):
    booking = make_booking(date(2025, 6, 1), date(2025, 6, 3))
    reconciler.reconcile()
    Booking.objects.filter(pk=booking.pk).update(end_date=date(2025, 6, 6))

    result = reconciler.push_booking(booking)

    booking.refresh_from_db()
    assert result.updated == 1
    assert calendar.events[booking.google_event_id].end == date(2025, 6, 6)
    assert reconciler.reconcile().pulled_from_calendar == 0
