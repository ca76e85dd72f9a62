"""Calendar sync models: connection settings and linked calendar entries."""

from __future__ import annotations

import json
import logging

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.fields import EncryptedTextField

logger = logging.getLogger(__name__)


class CalendarConnection(models.Model):
    """Google Calendar connection configured from the admin area.

    A single row is used. Values stored here take precedence over the
    ``GOOGLE_*`` environment settings.
    """

    calendar_id = models.CharField(max_length=255, blank=True)
    service_account_json = EncryptedTextField(
        blank=True,
        help_text=_("Service account key file (JSON), stored encrypted."),
    )
    is_active = models.BooleanField(default=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Calendar connection")
        verbose_name_plural = _("Calendar connection")

    def __str__(self) -> str:
        return self.calendar_id or "Calendar connection (not configured)"

    @classmethod
    def get_solo(cls) -> "CalendarConnection":
        connection, _created = cls.objects.get_or_create(pk=1)
        return connection

    def service_account_info(self) -> dict | None:
        if not self.service_account_json:
            return None
        try:
            info = json.loads(self.service_account_json)
        except ValueError:
            logger.error("Stored service account JSON is not valid JSON")
            return None
        return info if isinstance(info, dict) else None

    @property
    def service_account_email(self) -> str:
        info = self.service_account_info() or {}
        return info.get("client_email", "")


class LinkedCalendarEvent(models.Model):
    """Undirected edge between two calendar entries forming one logical stay.

    The pair is stored once with ``event_id_1 < event_id_2``; group
    membership is the transitive closure over all edges.
    """

    event_id_1 = models.CharField(max_length=1024)
    event_id_2 = models.CharField(max_length=1024)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Linked calendar event")
        verbose_name_plural = _("Linked calendar events")
        constraints = [
            models.UniqueConstraint(fields=["event_id_1", "event_id_2"], name="linked_event_unique_pair"),
            models.CheckConstraint(
                condition=models.Q(event_id_1__lt=models.F("event_id_2")),
                name="linked_event_ordered_pair",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event_id_1} <-> {self.event_id_2}"

    @staticmethod
    def ordered(first: str, second: str) -> tuple[str, str]:
        return (first, second) if first < second else (second, first)
