"""Admin registration for pricing phases."""

from __future__ import annotations

from django.contrib import admin

from .models import PricingPhase


@admin.register(PricingPhase)
class PricingPhaseAdmin(admin.ModelAdmin):
    list_display = ("name", "start_date", "end_date", "price_per_night", "family_price_per_night", "priority", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")
