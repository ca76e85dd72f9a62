"""Serializers for calendar endpoints."""

from __future__ import annotations

import json

from rest_framework import serializers  # type: ignore

from .models import CalendarConnection


def _validate_range(attrs: dict) -> dict:
    start = attrs.get("start_date")
    end = attrs.get("end_date")
    if start and end and end < start:
        raise serializers.ValidationError({"end_date": "The end date must not be before the start date."})
    return attrs


class ExternalEventSerializer(serializers.Serializer):
    """Read representation of a calendar entry."""

    id = serializers.CharField()
    summary = serializers.CharField()
    description = serializers.CharField()
    start_date = serializers.DateField(source="start")
    end_date = serializers.DateField(source="end")
    color_tag = serializers.CharField(allow_null=True)
    is_info = serializers.BooleanField(source="is_informational")


class ManualEventCreateSerializer(serializers.Serializer):
    summary = serializers.CharField(max_length=1024)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    is_info = serializers.BooleanField(required=False, default=False)
    color_tag = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)

    def validate(self, attrs):  # type: ignore
        return _validate_range(attrs)


class ManualEventUpdateSerializer(serializers.Serializer):
    summary = serializers.CharField(max_length=1024, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    is_info = serializers.BooleanField(required=False)

    def validate(self, attrs):  # type: ignore
        if not attrs:
            raise serializers.ValidationError("Nothing to update.")
        if ("start_date" in attrs) != ("end_date" in attrs):
            raise serializers.ValidationError("start_date and end_date must be changed together.")
        return _validate_range(attrs)


class EventIdsSerializer(serializers.Serializer):
    event_ids = serializers.ListField(child=serializers.CharField(max_length=1024), allow_empty=False)


class SingleEventSerializer(serializers.Serializer):
    event_id = serializers.CharField(max_length=1024)


class CalendarConnectionSerializer(serializers.ModelSerializer):
    service_account_json = serializers.CharField(write_only=True, required=False, allow_blank=True)
    service_account_email = serializers.CharField(read_only=True)
    has_credentials = serializers.SerializerMethodField()

    class Meta:
        model = CalendarConnection
        fields = ["calendar_id", "service_account_json", "service_account_email", "has_credentials", "is_active", "updated_at"]
        read_only_fields = ["updated_at"]

    def get_has_credentials(self, obj: CalendarConnection) -> bool:
        return obj.service_account_info() is not None

    def validate_service_account_json(self, value: str) -> str:
        if not value:
            return value
        try:
            info = json.loads(value)
        except ValueError as exc:
            raise serializers.ValidationError("Not valid JSON.") from exc
        missing = {"client_email", "private_key", "token_uri"} - set(info if isinstance(info, dict) else ())
        if missing:
            raise serializers.ValidationError(f"Missing keys: {', '.join(sorted(missing))}")
        return value
