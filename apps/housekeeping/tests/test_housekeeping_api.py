"""Tests for the housekeeping calendar API."""

from __future__ import annotations

from datetime import date
from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.calendar_sync.colors import info_color
from apps.calendar_sync.tests.fakes import InMemoryCalendarAdapter, make_booking

User = get_user_model()


class HousekeepingCalendarAPITests(APITestCase):
    def setUp(self) -> None:
        self.cleaner = User.objects.create_user(username="cleaner", password="StrongPass123")
        self.calendar = InMemoryCalendarAdapter()
        patcher = mock.patch("apps.housekeeping.views.get_calendar_adapter", return_value=self.calendar)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client.force_authenticate(self.cleaner)

    def test_month_combines_bookings_and_blocking_entries(self) -> None:
        make_booking(date(2025, 6, 1), date(2025, 6, 5), guest_name="Private Person")
        make_booking(date(2025, 6, 7), date(2025, 6, 8), status=Booking.Status.PENDING)
        self.calendar.add("Owner", date(2025, 6, 5), date(2025, 6, 9))
        self.calendar.add("Window cleaner", date(2025, 6, 20), date(2025, 6, 20), color_tag=info_color())

        response = self.client.get(reverse("housekeeping-calendar"), {"year": 2025, "month": 6})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([period["source"] for period in response.data["periods"]], ["booking", "external"])
        self.assertEqual(response.data["days"]["2025-06-05"]["type"], "both")
        self.assertNotIn("2025-06-20", response.data["days"])
        self.assertNotIn("Private Person", str(response.data))

    def test_invalid_month_is_rejected(self) -> None:
        response = self.client.get(reverse("housekeeping-calendar"), {"year": 2025, "month": 13})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_anonymous_access_is_rejected(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.get(reverse("housekeeping-calendar"))

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
