"""Admin registration for notification preferences."""

from __future__ import annotations

from django.contrib import admin

from .models import NotificationPreference


@admin.register(NotificationPreference)
class NotificationPreferenceAdmin(admin.ModelAdmin):
    list_display = ("user", "booking_conflict", "new_booking_request", "updated_at")
    list_filter = ("booking_conflict", "new_booking_request")
    search_fields = ("user__email", "user__username")
