"""Serializers for the booking domain."""

from __future__ import annotations

from datetime import date

from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Booking
from .services import price_booking


def _validate_dates(start: date, end: date) -> None:
    if end < start:
        raise serializers.ValidationError({"end_date": "The end date must not be before the start date."})


class BookingCreateSerializer(serializers.ModelSerializer):
    """Booking entered by an admin (phone or e-mail requests)."""

    class Meta:
        model = Booking
        fields = [
            "start_date",
            "end_date",
            "guest_name",
            "guest_email",
            "guest_phone",
            "number_of_guests",
            "message",
            "use_family_price",
        ]
        extra_kwargs = {
            "number_of_guests": {"min_value": 1},
        }

    def validate(self, attrs):  # type: ignore
        _validate_dates(attrs["start_date"], attrs["end_date"])
        return attrs

    def create(self, validated_data):  # type: ignore
        booking = Booking(**validated_data)
        price_booking(booking)
        request = self.context.get("request")
        if request is not None and request.user.is_authenticated:
            booking.append_admin_note("Created by admin.", actor=request.user)
        with transaction.atomic():
            booking.save()
        return booking


class BookingSerializer(serializers.ModelSerializer):
    approved_by_email = serializers.ReadOnlyField(source="approved_by.email")
    nights = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "status",
            "start_date",
            "end_date",
            "nights",
            "guest_name",
            "guest_email",
            "guest_phone",
            "number_of_guests",
            "message",
            "use_family_price",
            "total_price",
            "pricing_details",
            "admin_notes",
            "google_event_id",
            "approved_by_email",
            "approved_at",
            "rejected_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_nights(self, obj: Booking) -> int:
        return obj.interval.nights


class BookingUpdateSerializer(serializers.Serializer):
    """Date change of an existing booking; the price is recomputed."""

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    use_family_price = serializers.BooleanField(required=False)

    def validate(self, attrs):  # type: ignore
        _validate_dates(attrs["start_date"], attrs["end_date"])
        return attrs


class BookingActionSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
