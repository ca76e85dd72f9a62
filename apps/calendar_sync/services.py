"""Calendar services shared by the sync, conflict and housekeeping code.

Besides the helpers that tell booking events apart from manual entries,
this module implements the admin operations on manual calendar entries
(blocked periods and informational notes entered directly in the calendar).
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from django.conf import settings  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from shared.domain.value_objects import DateInterval

from .adapter import CalendarAdapter, ExternalEvent
from .colors import info_color
from .models import LinkedCalendarEvent

logger = logging.getLogger(__name__)


class ManualEventError(Exception):
    """Raised when an operation is not allowed on a calendar entry."""


def booking_event_ids() -> set[str]:
    """Identifiers of every calendar event referenced by a booking."""
    return set(
        Booking.objects.filter(google_event_id__isnull=False).values_list("google_event_id", flat=True)
    )


def is_booking_event(event: ExternalEvent, known_ids: Iterable[str]) -> bool:
    """True if the event mirrors a booking (by reference or by marker)."""
    return event.id in known_ids or bool(event.booking_reference)


def default_window(today: date | None = None) -> DateInterval:
    today = today or timezone.localdate()
    lookback = int(getattr(settings, "CALENDAR_LOOKBACK_DAYS", 31))
    lookahead = int(getattr(settings, "CALENDAR_LOOKAHEAD_DAYS", 730))
    return DateInterval(today - timedelta(days=lookback), today + timedelta(days=lookahead))


def list_manual_events(
    adapter: CalendarAdapter,
    window: DateInterval | None = None,
    *,
    include_informational: bool = True,
) -> list[ExternalEvent]:
    """Calendar entries that do not belong to a booking."""
    window = window or default_window()
    known_ids = booking_event_ids()
    events = [
        event
        for event in adapter.list_events(window.start, window.end)
        if not is_booking_event(event, known_ids)
    ]
    if not include_informational:
        events = [event for event in events if not event.is_informational]
    return sorted(events, key=lambda event: (event.start, event.end, event.id))


def _ensure_manual(event_id: str) -> None:
    if Booking.objects.filter(google_event_id=event_id).exists():
        raise ManualEventError("This calendar entry belongs to a booking; change the booking instead.")


def create_manual_event(
    adapter: CalendarAdapter,
    *,
    summary: str,
    start: date,
    end: date,
    description: str = "",
    is_info: bool = False,
    color_tag: str | None = None,
) -> str | None:
    if is_info:
        color_tag = info_color()
    event_id = adapter.create_event(summary, description, start, end, color_tag=color_tag)
    if event_id and not is_info:
        _check_event_conflicts(adapter, event_id)
    return event_id


def update_manual_event(adapter: CalendarAdapter, event_id: str, **changes) -> bool:  # type: ignore
    _ensure_manual(event_id)
    if "is_info" in changes:
        changes["color_tag"] = info_color() if changes.pop("is_info") else ""
    if not adapter.update_event(event_id, **changes):
        return False
    if changes.get("color_tag") != info_color():
        _check_event_conflicts(adapter, event_id)
    return True


def set_informational(adapter: CalendarAdapter, event_id: str, informational: bool) -> bool:
    """Mark an entry as informational (non-blocking) or turn it back into a blocker."""
    return update_manual_event(adapter, event_id, is_info=informational)


def delete_manual_event(adapter: CalendarAdapter, event_id: str) -> bool:
    """Delete a manual entry and drop every link that points at it."""
    from apps.conflicts.ledger import ConflictLedger

    _ensure_manual(event_id)
    if not adapter.delete_event(event_id):
        return False
    LinkedCalendarEvent.objects.filter(Q(event_id_1=event_id) | Q(event_id_2=event_id)).delete()
    ConflictLedger().reset_for_events([event_id])
    return True


def get_blocked_intervals(adapter: CalendarAdapter, window: DateInterval | None = None) -> list[DateInterval]:
    """Occupied intervals: approved bookings plus blocking calendar entries."""
    window = window or default_window()
    intervals = [
        booking.interval
        for booking in Booking.objects.approved().overlapping(window.start, window.end)
    ]
    intervals.extend(
        event.interval
        for event in list_manual_events(adapter, window, include_informational=False)
    )
    return sorted(intervals, key=lambda interval: (interval.start, interval.end))


def _check_event_conflicts(adapter: CalendarAdapter, event_id: str) -> None:
    from apps.conflicts.services import check_conflicts_for_event

    result = check_conflicts_for_event(event_id, adapter=adapter)
    if result.errors:
        logger.warning(f"Conflict notification for event {event_id} reported errors: {result.errors}")
