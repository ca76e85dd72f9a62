"""Reconciliation between bookings and the shared calendar.

For every approved booking the reconciler makes sure exactly one calendar
event mirrors it, and for every cancelled or rejected booking that its event
is gone. Admins also edit the calendar by hand; when an event's dates no
longer match its booking the calendar wins and the booking is re-dated
(``pulled_from_calendar``).

The calendar round trip is not part of the local transaction, so every
local write that follows a remote call re-reads the booking first and only
proceeds if it is still in the expected state. A failure for one booking is
recorded in ``errors`` and the run continues with the next one.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.services import lock_queryset_if_possible
from apps.pricing.services import calculate_booking_price

from .adapter import CalendarAdapter, CalendarEventNotFound, ExternalEvent, get_calendar_adapter
from .colors import color_for_identifier

logger = logging.getLogger(__name__)

RELEASED_STATUSES = (Booking.Status.CANCELLED, Booking.Status.REJECTED)


@dataclass
class SyncResult:
    created: int = 0
    updated: int = 0
    deleted: int = 0
    pulled_from_calendar: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


def booking_summary(booking: Booking) -> str:
    return f"Booking: {booking.display_name}"


def booking_description(booking: Booking) -> str:
    lines = [
        f"Booking code: {booking.booking_code}",
        f"Guest: {booking.guest_name or '-'} <{booking.guest_email}>",
        f"Guests: {booking.number_of_guests}",
        f"Dates: {booking.interval}",
    ]
    if booking.guest_phone:
        lines.append(f"Phone: {booking.guest_phone}")
    return "\n".join(lines)


def booking_color(booking: Booking) -> str:
    return color_for_identifier(booking.booking_code)


def expected_display(booking: Booking) -> dict[str, str]:
    """Display fields the calendar event of a booking should carry."""
    return {
        "summary": booking_summary(booking),
        "description": booking_description(booking),
        "color_tag": booking_color(booking),
    }


class BookingCalendarReconciler:
    """Drives bookings and calendar events towards the same state."""

    def __init__(
        self,
        adapter: CalendarAdapter | None = None,
        pricing: Callable | None = None,
        clock: Callable | None = None,
    ):
        self.adapter = adapter or get_calendar_adapter()
        self.pricing = pricing or calculate_booking_price
        self.clock = clock or timezone.now

    # ------------------------------------------------------------------
    # entry points
    # ------------------------------------------------------------------

    def reconcile(self, actor=None) -> SyncResult:  # type: ignore
        """Reconcile every booking with the calendar."""
        result = SyncResult()
        if not self.adapter.is_configured:
            logger.warning("Calendar is not configured; skipping reconciliation")
            return result

        for booking in Booking.objects.approved().order_by("start_date", "pk"):
            self._run(self._sync_approved, booking, result, actor)

        for booking in Booking.objects.released_with_event().order_by("pk"):
            self._run(self._release, booking, result, actor)

        logger.info(
            f"Calendar reconciliation finished: created={result.created} updated={result.updated} "
            f"deleted={result.deleted} pulled={result.pulled_from_calendar} errors={len(result.errors)}"
        )
        return result

    def reconcile_booking(self, booking: Booking, actor=None) -> SyncResult:  # type: ignore
        """Reconcile a single booking, e.g. right after a status change."""
        result = SyncResult()
        if not self.adapter.is_configured:
            return result

        booking.refresh_from_db()
        if booking.status == Booking.Status.APPROVED:
            self._run(self._sync_approved, booking, result, actor)
        elif booking.status in RELEASED_STATUSES and booking.google_event_id:
            self._run(self._release, booking, result, actor)
        return result

    def push_booking(self, booking: Booking, actor=None) -> SyncResult:  # type: ignore
        """Write locally edited dates of an approved booking to its event."""
        result = SyncResult()
        if not self.adapter.is_configured:
            return result

        booking.refresh_from_db()
        if booking.status != Booking.Status.APPROVED or not booking.google_event_id:
            return self.reconcile_booking(booking, actor)

        pushed = self.adapter.update_event(
            booking.google_event_id,
            start=booking.start_date,
            end=booking.end_date,
            **expected_display(booking),
        )
        if pushed:
            result.updated += 1
        else:
            result.errors.append(f"{booking.booking_code}: calendar event could not be updated")
        return result

    # ------------------------------------------------------------------
    # steps
    # ------------------------------------------------------------------

    def _run(self, step: Callable, booking: Booking, result: SyncResult, actor) -> None:  # type: ignore
        try:
            step(booking, result, actor)
        except Exception as e:
            logger.error(f"Calendar sync failed for booking {booking.booking_code}: {e}", exc_info=True)
            result.errors.append(f"{booking.booking_code}: {e}")

    def _sync_approved(self, booking: Booking, result: SyncResult, actor) -> None:  # type: ignore
        if not booking.google_event_id:
            self._create(booking, result)
            return

        event_id = booking.google_event_id
        try:
            event = self.adapter.get_event(event_id)
        except CalendarEventNotFound:
            event = None
            missing = True
        else:
            if event is None:
                result.errors.append(f"{booking.booking_code}: calendar event {event_id} could not be fetched")
                return
            missing = event.cancelled

        if missing:
            logger.info(f"Calendar event {event_id} of booking {booking.booking_code} is gone; recreating")
            if self._clear_reference(booking, event_id):
                self._create(booking, result)
            return

        if (event.start, event.end) != (booking.start_date, booking.end_date):
            if not self._absorb_drift(booking, event, result, actor):
                return

        changes = self._display_changes(booking, event)
        if not changes:
            return
        if self.adapter.update_event(event_id, **changes):
            result.updated += 1
        else:
            result.errors.append(f"{booking.booking_code}: calendar event {event_id} could not be updated")

    def _create(self, booking: Booking, result: SyncResult) -> None:
        display = expected_display(booking)
        event_id = self.adapter.create_event(
            display["summary"],
            display["description"],
            booking.start_date,
            booking.end_date,
            color_tag=display["color_tag"],
            booking_reference=booking.pk,
        )
        if not event_id:
            result.errors.append(f"{booking.booking_code}: calendar event could not be created")
            return

        with transaction.atomic():
            current = lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).first()
            keep = (
                current is not None
                and current.status == Booking.Status.APPROVED
                and not current.google_event_id
            )
            if keep:
                current.google_event_id = event_id
                current.save(update_fields=["google_event_id", "updated_at"])

        if not keep:
            logger.warning(
                f"Booking {booking.booking_code} changed while its calendar event was created; "
                f"deleting event {event_id}"
            )
            if not self.adapter.delete_event(event_id):
                result.errors.append(f"{booking.booking_code}: orphaned calendar event {event_id} could not be deleted")
            return

        booking.google_event_id = event_id
        result.created += 1

    def _clear_reference(self, booking: Booking, event_id: str) -> bool:
        cleared = Booking.objects.filter(pk=booking.pk, google_event_id=event_id).update(
            google_event_id=None,
            updated_at=timezone.now(),
        )
        booking.google_event_id = None
        return bool(cleared)

    def _absorb_drift(self, booking: Booking, event: ExternalEvent, result: SyncResult, actor) -> bool:  # type: ignore
        """Take over dates edited directly in the calendar."""
        previous = booking.interval
        pulled = event.interval
        price = self.pricing(pulled.start, pulled.end, booking.use_family_price)

        with transaction.atomic():
            current = lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).first()
            if (
                current is None
                or current.status != Booking.Status.APPROVED
                or current.google_event_id != event.id
            ):
                logger.info(f"Booking {booking.booking_code} changed during sync; calendar dates not taken over")
                return False

            current.start_date = pulled.start
            current.end_date = pulled.end
            current.total_price = price.total_price
            current.pricing_details = price.as_dict()
            current.append_admin_note(
                f"Dates synced from calendar: {previous} -> {pulled}, new total {price.total_price}",
                actor=actor,
                at=self.clock(),
            )
            current.save(
                update_fields=["start_date", "end_date", "total_price", "pricing_details", "admin_notes", "updated_at"]
            )

        booking.start_date = current.start_date
        booking.end_date = current.end_date
        booking.total_price = current.total_price
        booking.pricing_details = current.pricing_details
        booking.admin_notes = current.admin_notes
        result.pulled_from_calendar += 1
        logger.info(f"Booking {booking.booking_code} re-dated from calendar: {previous} -> {pulled}")
        return True

    @staticmethod
    def _display_changes(booking: Booking, event: ExternalEvent) -> dict[str, str]:
        expected = expected_display(booking)
        current = {
            "summary": event.summary or "",
            "description": (event.description or "").strip(),
            "color_tag": event.color_tag or "",
        }
        return {name: value for name, value in expected.items() if current[name] != value.strip()}

    def _release(self, booking: Booking, result: SyncResult, actor) -> None:  # type: ignore
        event_id = booking.google_event_id
        current = Booking.objects.filter(pk=booking.pk).values("status", "google_event_id").first()
        if current is None or current["status"] not in RELEASED_STATUSES or current["google_event_id"] != event_id:
            return

        if not self.adapter.delete_event(event_id):
            result.errors.append(f"{booking.booking_code}: calendar event {event_id} could not be deleted")
            return

        Booking.objects.filter(
            pk=booking.pk,
            google_event_id=event_id,
            status__in=RELEASED_STATUSES,
        ).update(google_event_id=None, updated_at=timezone.now())
        booking.google_event_id = None
        result.deleted += 1
