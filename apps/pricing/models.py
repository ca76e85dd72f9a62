"""Pricing models: seasonal phases that override the default nightly rate."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PricingPhaseQuerySet(models.QuerySet):
    def active(self):  # type: ignore
        return self.filter(is_active=True)


class PricingPhase(models.Model):
    """Seasonal price that overrides the default nightly rate.

    Phases may overlap; the one with the highest priority wins for a given
    night. Both ``start_date`` and ``end_date`` belong to the phase.
    """

    name = models.CharField(max_length=120)
    start_date = models.DateField()
    end_date = models.DateField()
    price_per_night = models.DecimalField(max_digits=10, decimal_places=2)
    family_price_per_night = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Alternate rate used for family bookings; falls back to the regular price."),
    )
    min_nights = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Minimum stay for bookings starting inside this phase (warning only)."),
    )
    priority = models.PositiveSmallIntegerField(
        default=0,
        help_text=_("When phases overlap the higher priority wins."),
    )
    color_code = models.CharField(max_length=7, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_pricing_phases",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PricingPhaseQuerySet.as_manager()

    class Meta:
        verbose_name = _("Pricing phase")
        verbose_name_plural = _("Pricing phases")
        ordering = ["-priority", "start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="pricing_phase_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["is_active", "start_date", "end_date", "priority"], name="pricing_phase_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name}: {self.start_date} - {self.end_date}"

    def covers(self, day) -> bool:  # type: ignore
        return self.start_date <= day <= self.end_date

    def nightly_price(self, use_family_price: bool = False):  # type: ignore
        if use_family_price and self.family_price_per_night is not None:
            return self.family_price_per_night
        return self.price_per_night
