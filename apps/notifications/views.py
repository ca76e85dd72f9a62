"""API views for notification preferences."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore
from rest_framework.generics import RetrieveUpdateAPIView  # type: ignore

from .models import NotificationPreference
from .serializers import NotificationPreferenceSerializer


class NotificationPreferenceView(RetrieveUpdateAPIView):
    """Preferences of the authenticated admin (created on first access)."""

    serializer_class = NotificationPreferenceSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_object(self):  # type: ignore
        preference, _created = NotificationPreference.objects.get_or_create(user=self.request.user)
        return preference
