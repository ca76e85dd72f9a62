"""Notification preferences of admin users."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class NotificationPreference(models.Model):
    """Per-admin opt-in for notification kinds."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_preference",
    )
    booking_conflict = models.BooleanField(
        default=False,
        help_text=_("Email me when a double booking is detected."),
    )
    new_booking_request = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Notification preference")
        verbose_name_plural = _("Notification preferences")

    def __str__(self) -> str:
        return f"Notification preferences of {self.user}"
