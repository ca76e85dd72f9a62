"""Domain services for booking workflows.

Status transitions are performed by admins. Each transition is committed
locally first; the calendar is updated afterwards as a side effect, and a
calendar failure never undoes the transition (the next reconciliation run
picks it up).
"""

from __future__ import annotations

import logging
from datetime import date

from django.core.exceptions import ValidationError  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)


class BookingTransitionError(Exception):
    """Raised when a booking cannot move to the requested status."""


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _real_user(actor):  # type: ignore
    return actor if getattr(actor, "pk", None) else None


def price_booking(booking: Booking) -> None:
    """Store the current price of the booking's dates on the booking."""
    from apps.pricing.services import calculate_booking_price

    price = calculate_booking_price(booking.start_date, booking.end_date, booking.use_family_price)
    booking.total_price = price.total_price
    booking.pricing_details = price.as_dict()


def sync_booking_calendar(booking: Booking, actor=None, *, push_dates: bool = False) -> None:  # type: ignore
    """Mirror the booking to the shared calendar; failures are only logged."""
    from apps.calendar_sync.adapter import get_calendar_adapter
    from apps.calendar_sync.reconciler import BookingCalendarReconciler

    reconciler = BookingCalendarReconciler(adapter=get_calendar_adapter())
    if push_dates:
        result = reconciler.push_booking(booking, actor=actor)
    else:
        result = reconciler.reconcile_booking(booking, actor=actor)
    for error in result.errors:
        logger.error(f"Calendar update after change of booking {booking.booking_code} failed: {error}")


def _transition(booking: Booking, allowed: tuple[str, ...], target: str) -> Booking:
    current = lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).get()
    if current.status not in allowed:
        raise BookingTransitionError(
            f"Booking {current.booking_code} is {current.get_status_display().lower()} "
            f"and cannot become {Booking.Status(target).label.lower()}."
        )
    current.status = target
    return current


def approve_booking(booking: Booking, actor=None, note: str = "") -> Booking:  # type: ignore
    with transaction.atomic():
        booking = _transition(booking, (Booking.Status.PENDING,), Booking.Status.APPROVED)
        booking.approved_at = timezone.now()
        booking.approved_by = _real_user(actor)
        booking.append_admin_note(f"Approved. {note}".strip(), actor=actor)
        booking.save(update_fields=["status", "approved_at", "approved_by", "admin_notes", "updated_at"])

    sync_booking_calendar(booking, actor)
    booking.refresh_from_db()
    return booking


def reject_booking(booking: Booking, actor=None, note: str = "") -> Booking:  # type: ignore
    with transaction.atomic():
        booking = _transition(booking, (Booking.Status.PENDING,), Booking.Status.REJECTED)
        booking.rejected_at = timezone.now()
        booking.append_admin_note(f"Rejected. {note}".strip(), actor=actor)
        booking.save(update_fields=["status", "rejected_at", "admin_notes", "updated_at"])

    sync_booking_calendar(booking, actor)
    booking.refresh_from_db()
    return booking


def cancel_booking(booking: Booking, actor=None, note: str = "") -> Booking:  # type: ignore
    with transaction.atomic():
        booking = _transition(
            booking,
            (Booking.Status.PENDING, Booking.Status.APPROVED),
            Booking.Status.CANCELLED,
        )
        booking.cancelled_at = timezone.now()
        booking.append_admin_note(f"Cancelled. {note}".strip(), actor=actor)
        booking.save(update_fields=["status", "cancelled_at", "admin_notes", "updated_at"])

    sync_booking_calendar(booking, actor)
    booking.refresh_from_db()
    return booking


def update_booking_dates(
    booking: Booking,
    start_date: date,
    end_date: date,
    actor=None,  # type: ignore
    *,
    use_family_price: bool | None = None,
) -> Booking:
    """Re-date a pending or approved booking and recompute its price."""
    if end_date < start_date:
        raise ValidationError("The end date must not be before the start date.")

    with transaction.atomic():
        current = lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).get()
        if current.status not in (Booking.Status.PENDING, Booking.Status.APPROVED):
            raise BookingTransitionError(f"Booking {current.booking_code} can no longer be changed.")

        previous = current.interval
        current.start_date = start_date
        current.end_date = end_date
        if use_family_price is not None:
            current.use_family_price = use_family_price
        price_booking(current)
        current.append_admin_note(
            f"Dates changed: {previous} -> {current.interval}, new total {current.total_price}",
            actor=actor,
        )
        current.save()

    sync_booking_calendar(current, actor, push_dates=True)
    current.refresh_from_db()
    return current
