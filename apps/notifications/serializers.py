"""Serializers for notification preferences."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import NotificationPreference


class NotificationPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationPreference
        fields = ["booking_conflict", "new_booking_request", "updated_at"]
        read_only_fields = ["updated_at"]
