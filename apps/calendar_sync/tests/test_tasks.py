from datetime import timedelta
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from django.utils import timezone

from apps.calendar_sync.tasks import reconcile_calendar
from apps.calendar_sync.tests.fakes import InMemoryCalendarAdapter, make_booking
from apps.conflicts.tasks import check_and_notify_conflicts
from apps.notifications.models import NotificationPreference


@pytest.mark.django_db
def test_periodic_reconcile_creates_missing_events():
    calendar = InMemoryCalendarAdapter()
    today = timezone.localdate()
    booking = make_booking(today, today + timedelta(days=3))

    with mock.patch("apps.calendar_sync.reconciler.get_calendar_adapter", return_value=calendar):
        result = reconcile_calendar.delay().get()

    booking.refresh_from_db()
    assert result["created"] == 1
    assert result["errors"] == []
    assert booking.google_event_id in calendar.events


@pytest.mark.django_db
def test_periodic_reconcile_without_calendar_does_nothing():
    make_booking(timezone.localdate(), timezone.localdate())

    result = reconcile_calendar()

    assert result == {"created": 0, "updated": 0, "deleted": 0, "pulled_from_calendar": 0, "errors": []}


@pytest.mark.django_db
def test_periodic_conflict_check_notifies_once():
    admin = get_user_model().objects.create_user(username="host", email="host@example.com", is_staff=True)
    NotificationPreference.objects.create(user=admin, booking_conflict=True)
    calendar = InMemoryCalendarAdapter()
    today = timezone.localdate()
    make_booking(today, today + timedelta(days=2))
    calendar.add("Owner stay", today + timedelta(days=2), today + timedelta(days=4))

    with mock.patch("apps.conflicts.detector.get_calendar_adapter", return_value=calendar):
        first = check_and_notify_conflicts()
        second = check_and_notify_conflicts()

    assert first["notified"] == 1
    assert second["notified"] == 0
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["host@example.com"]
