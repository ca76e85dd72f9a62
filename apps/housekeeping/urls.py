from django.urls import path  # type: ignore

from .views import HousekeepingCalendarView

urlpatterns = [
    path("calendar/", HousekeepingCalendarView.as_view(), name="housekeeping-calendar"),
]
