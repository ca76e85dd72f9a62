"""Gathering of occupancy data for the housekeeping calendar."""

from __future__ import annotations

import logging

from apps.bookings.models import Booking
from apps.calendar_sync.adapter import CalendarAdapter, get_calendar_adapter
from apps.calendar_sync.colors import color_for_identifier
from apps.calendar_sync.services import list_manual_events

from .projector import MonthProjection, OccupancyInterval, month_interval, project_intervals

logger = logging.getLogger(__name__)


def occupancy_intervals(year: int, month: int, adapter: CalendarAdapter | None = None) -> list[OccupancyInterval]:
    """Approved bookings and blocking manual calendar entries touching the month.

    Guest names and entry titles are left out on purpose: the result is
    shown to cleaning staff.
    """
    adapter = adapter or get_calendar_adapter()
    window = month_interval(year, month)

    intervals = [
        OccupancyInterval(
            id=f"booking-{booking.pk}",
            start=booking.start_date,
            end=booking.end_date,
            source="booking",
            color_tag=color_for_identifier(booking.booking_code),
        )
        for booking in Booking.objects.approved().overlapping(window.start, window.end)
    ]
    intervals.extend(
        OccupancyInterval(
            id=f"external-{event.id}",
            start=event.start,
            end=event.end,
            source="external",
            color_tag=event.color_tag,
        )
        for event in list_manual_events(adapter, window, include_informational=False)
    )
    return intervals


def project_month(year: int, month: int, adapter: CalendarAdapter | None = None) -> MonthProjection:
    intervals = occupancy_intervals(year, month, adapter)
    projection = project_intervals(intervals, year, month)
    logger.debug(f"Housekeeping month {year}-{month:02d}: {len(projection.periods)} periods from {len(intervals)} stays")
    return projection
