"""URL routing for calendar sync."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import (
    BlockedDatesView,
    CalendarConnectionTestView,
    CalendarConnectionView,
    CalendarEventViewSet,
    CalendarSyncView,
)

router = DefaultRouter()
router.register(r"events", CalendarEventViewSet, basename="calendar-event")

urlpatterns = [
    path("sync/", CalendarSyncView.as_view(), name="calendar-sync"),
    path("connection/", CalendarConnectionView.as_view(), name="calendar-connection"),
    path("connection/test/", CalendarConnectionTestView.as_view(), name="calendar-connection-test"),
    path("blocked-dates/", BlockedDatesView.as_view(), name="calendar-blocked-dates"),
    path("", include(router.urls)),
]
