"""Admin registration for conflict markers."""

from __future__ import annotations

from django.contrib import admin

from .models import IgnoredConflict, NotifiedConflict


@admin.register(IgnoredConflict)
class IgnoredConflictAdmin(admin.ModelAdmin):
    list_display = ("conflict_type", "conflict_key", "ignored_by", "created_at")
    list_filter = ("conflict_type",)
    search_fields = ("conflict_key", "reason")
    readonly_fields = ("created_at",)


@admin.register(NotifiedConflict)
class NotifiedConflictAdmin(admin.ModelAdmin):
    list_display = ("conflict_type", "conflict_key", "notified_at")
    list_filter = ("conflict_type",)
    search_fields = ("conflict_key",)
