"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "guest_name",
        "guest_email",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "google_event_id",
        "created_at",
    )
    list_filter = ("status", "use_family_price", "start_date")
    search_fields = ("booking_code", "guest_name", "guest_email", "google_event_id")
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "total_price",
        "pricing_details",
        "google_event_id",
        "approved_by",
        "approved_at",
        "rejected_at",
        "cancelled_at",
    )
