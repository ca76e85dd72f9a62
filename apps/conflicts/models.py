"""Conflict suppression markers."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ConflictType(models.TextChoices):
    OVERLAPPING_REQUESTS = "OVERLAPPING_REQUESTS", _("Overlapping bookings")
    CALENDAR_CONFLICT = "CALENDAR_CONFLICT", _("Booking overlaps a calendar entry")
    OVERLAPPING_CALENDAR_EVENTS = "OVERLAPPING_CALENDAR_EVENTS", _("Overlapping calendar entries")


class IgnoredConflict(models.Model):
    """A conflict an admin has reviewed and chosen to hide."""

    conflict_key = models.CharField(max_length=2048)
    conflict_type = models.CharField(max_length=32, choices=ConflictType.choices)
    reason = models.TextField(blank=True)
    ignored_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Ignored conflict")
        verbose_name_plural = _("Ignored conflicts")
        constraints = [
            models.UniqueConstraint(fields=["conflict_key", "conflict_type"], name="ignored_conflict_unique_key"),
        ]

    def __str__(self) -> str:
        return f"{self.conflict_type}: {self.conflict_key}"


class NotifiedConflict(models.Model):
    """Admins were notified about this conflict at ``notified_at``."""

    conflict_key = models.CharField(max_length=2048)
    conflict_type = models.CharField(max_length=32, choices=ConflictType.choices)
    notified_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Notified conflict")
        verbose_name_plural = _("Notified conflicts")
        constraints = [
            models.UniqueConstraint(fields=["conflict_key", "conflict_type"], name="notified_conflict_unique_key"),
        ]

    def __str__(self) -> str:
        return f"{self.conflict_type}: {self.conflict_key} @ {self.notified_at:%Y-%m-%d %H:%M}"
