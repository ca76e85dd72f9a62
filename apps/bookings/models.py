"""Booking domain models."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models, transaction  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateInterval


class BookingQuerySet(models.QuerySet):
    def approved(self):  # type: ignore
        return self.filter(status=Booking.Status.APPROVED)

    def pending(self):  # type: ignore
        return self.filter(status=Booking.Status.PENDING)

    def active(self):  # type: ignore
        """Bookings that occupy the property or may still do so."""
        return self.filter(status__in=[Booking.Status.PENDING, Booking.Status.APPROVED])

    def released_with_event(self):  # type: ignore
        """Cancelled or rejected bookings still pointing at a calendar event."""
        return self.filter(
            status__in=[Booking.Status.CANCELLED, Booking.Status.REJECTED],
            google_event_id__isnull=False,
        )

    def overlapping(self, start, end):  # type: ignore
        return self.filter(start_date__lte=end, end_date__gte=start)


class Booking(models.Model):
    """A requested or confirmed stay.

    ``start_date`` and ``end_date`` are calendar dates in the property's time
    zone and both are part of the stay. ``google_event_id`` is only set while
    the booking is approved and its shared-calendar event exists.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    start_date = models.DateField()
    end_date = models.DateField()
    guest_name = models.CharField(max_length=255, blank=True)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=32, blank=True)
    number_of_guests = models.PositiveSmallIntegerField(default=1)
    message = models.TextField(blank=True)
    use_family_price = models.BooleanField(
        default=False,
        help_text=_("Price the stay with the alternate (family) rate."),
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    pricing_details = models.JSONField(default=dict, blank=True)
    admin_notes = models.TextField(blank=True)
    google_event_id = models.CharField(
        max_length=1024,
        null=True,
        blank=True,
        unique=True,
        help_text=_("Identifier of the shared-calendar event mirroring this booking."),
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_bookings",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["start_date", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "start_date", "end_date"], name="booking_status_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} ({self.start_date} - {self.end_date})"

    def clean(self) -> None:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError(_("The end date must not be before the start date."))

    def save(self, *args, **kwargs):  # type: ignore
        with transaction.atomic():
            if self._state.adding and not self.booking_code:
                self.booking_code = self.generate_booking_code()
            self.clean()
            super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_code() -> str:
        return secrets.token_hex(4).upper()

    @property
    def interval(self) -> DateInterval:
        return DateInterval(self.start_date, self.end_date)

    @property
    def display_name(self) -> str:
        return self.guest_name or self.guest_email

    def append_admin_note(self, text: str, actor=None, at=None) -> None:  # type: ignore
        """Append a timestamped line to ``admin_notes`` (not saved)."""
        moment = timezone.localtime(at or timezone.now())
        author = _actor_label(actor)
        line = f"[{moment:%Y-%m-%d %H:%M}] {author}: {text}"
        self.admin_notes = f"{self.admin_notes.rstrip()}\n{line}" if self.admin_notes.strip() else line


def _actor_label(actor) -> str:  # type: ignore
    if actor is None:
        return "system"
    if isinstance(actor, str):
        return actor
    return getattr(actor, "email", None) or getattr(actor, "username", None) or str(actor)
