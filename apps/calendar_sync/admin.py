"""Admin registration for calendar sync models."""

from __future__ import annotations

from django.contrib import admin

from .models import CalendarConnection, LinkedCalendarEvent


@admin.register(CalendarConnection)
class CalendarConnectionAdmin(admin.ModelAdmin):
    list_display = ("calendar_id", "is_active", "updated_by", "updated_at")
    exclude = ("service_account_json",)
    readonly_fields = ("updated_at",)


@admin.register(LinkedCalendarEvent)
class LinkedCalendarEventAdmin(admin.ModelAdmin):
    list_display = ("event_id_1", "event_id_2", "created_by", "created_at")
    search_fields = ("event_id_1", "event_id_2")
    readonly_fields = ("created_at",)
