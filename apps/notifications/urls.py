"""URL routing for notifications."""

from django.urls import path  # type: ignore

from .views import NotificationPreferenceView

urlpatterns = [
    path("preferences/", NotificationPreferenceView.as_view(), name="notification-preferences"),
]
