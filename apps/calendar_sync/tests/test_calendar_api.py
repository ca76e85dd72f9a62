"""Tests for the calendar sync and manual calendar entry API."""

from __future__ import annotations

from datetime import date
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.calendar_sync.colors import info_color
from apps.calendar_sync.models import CalendarConnection, LinkedCalendarEvent

from .fakes import InMemoryCalendarAdapter, make_booking

User = get_user_model()


class CalendarAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin",
            email="admin@example.com",
            password="StrongPass123",
            is_staff=True,
        )
        self.calendar = InMemoryCalendarAdapter()
        patcher = mock.patch("apps.calendar_sync.views.get_calendar_adapter", return_value=self.calendar)
        patcher.start()
        self.addCleanup(patcher.stop)
        # manual entries trigger a conflict check through the conflicts app
        conflicts_patcher = mock.patch(
            "apps.calendar_sync.services._check_event_conflicts",
        )
        self.check_conflicts = conflicts_patcher.start()
        self.addCleanup(conflicts_patcher.stop)
        self.client.force_authenticate(self.admin)

    def test_regular_users_are_rejected(self) -> None:
        guest = User.objects.create_user(username="guest", password="StrongPass123")
        self.client.force_authenticate(guest)

        response = self.client.post(reverse("calendar-sync"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_sync_now_returns_counters(self) -> None:
        make_booking(date(2025, 6, 1), date(2025, 6, 3))

        response = self.client.post(reverse("calendar-sync"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["created"], 1)
        self.assertEqual(response.data["errors"], [])

    def test_manual_entry_lifecycle(self) -> None:
        response = self.client.post(
            reverse("calendar-event-list"),
            {"summary": "Owner stay", "start_date": "2025-08-01", "end_date": "2025-08-03"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        event_id = response.data["id"]
        self.check_conflicts.assert_called_once()

        response = self.client.get(reverse("calendar-event-list"), {"start": "2025-07-01", "end": "2025-09-01"})
        self.assertEqual([item["id"] for item in response.data], [event_id])
        self.assertEqual(response.data[0]["end_date"], "2025-08-03")

        response = self.client.patch(
            reverse("calendar-event-detail", kwargs={"pk": event_id}),
            {"summary": "Owner stay (extended)"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(self.calendar.events[event_id].summary, "Owner stay (extended)")

        response = self.client.delete(reverse("calendar-event-detail", kwargs={"pk": event_id}))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertNotIn(event_id, self.calendar.events)

    def test_informational_entry_does_not_block_dates(self) -> None:
        response = self.client.post(
            reverse("calendar-event-list"),
            {"summary": "Window cleaner", "start_date": "2025-08-01", "end_date": "2025-08-01", "is_info": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.calendar.events[response.data["id"]].color_tag, info_color())

        response = self.client.get(
            reverse("calendar-blocked-dates"), {"start": "2025-07-01", "end": "2025-09-01"}
        )
        self.assertEqual(response.data, [])

    def test_blocked_dates_include_approved_bookings_and_blockers(self) -> None:
        make_booking(date(2025, 8, 10), date(2025, 8, 12))
        make_booking(date(2025, 8, 20), date(2025, 8, 22), status="pending")
        self.calendar.add("Maintenance", date(2025, 8, 1), date(2025, 8, 2))

        response = self.client.get(
            reverse("calendar-blocked-dates"), {"start": "2025-07-01", "end": "2025-09-01"}
        )

        self.assertEqual(
            [(str(item["start_date"]), str(item["end_date"])) for item in response.data],
            [("2025-08-01", "2025-08-02"), ("2025-08-10", "2025-08-12")],
        )

    def test_invalid_range_is_rejected(self) -> None:
        response = self.client.post(
            reverse("calendar-event-list"),
            {"summary": "Broken", "start_date": "2025-08-03", "end_date": "2025-08-01"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_booking_event_cannot_be_edited_as_manual_entry(self) -> None:
        make_booking(date(2025, 8, 10), date(2025, 8, 12), google_event_id="booking-event")

        response = self.client.delete(reverse("calendar-event-detail", kwargs={"pk": "booking-event"}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_group_and_ungroup(self) -> None:
        first = self.calendar.add("Block 1", date(2025, 8, 1), date(2025, 8, 3))
        second = self.calendar.add("Block 2", date(2025, 8, 3), date(2025, 8, 5))

        response = self.client.post(
            reverse("calendar-event-group"), {"event_ids": [first.id, second.id]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(LinkedCalendarEvent.objects.count(), 1)

        response = self.client.post(
            reverse("calendar-event-grouped"), {"event_ids": [first.id, second.id]}, format="json"
        )
        self.assertTrue(response.data["grouped"])

        response = self.client.post(
            reverse("calendar-event-ungroup-single"), {"event_id": first.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(LinkedCalendarEvent.objects.count(), 0)

    def test_group_needs_two_events(self) -> None:
        event = self.calendar.add("Block", date(2025, 8, 1), date(2025, 8, 3))

        response = self.client.post(reverse("calendar-event-group"), {"event_ids": [event.id]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(ENCRYPTION_KEY="test-key")
    def test_connection_credentials_are_write_only(self) -> None:
        response = self.client.put(
            reverse("calendar-connection"),
            {
                "calendar_id": "house@group.calendar.google.com",
                "service_account_json": '{"client_email": "sync@x.iam", "private_key": "k", "token_uri": "u"}',
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertNotIn("service_account_json", response.data)
        self.assertEqual(response.data["service_account_email"], "sync@x.iam")
        self.assertTrue(CalendarConnection.get_solo().service_account_info())

    def test_connection_rejects_incomplete_key_file(self) -> None:
        response = self.client.put(
            reverse("calendar-connection"),
            {"service_account_json": '{"client_email": "sync@x.iam"}'},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
