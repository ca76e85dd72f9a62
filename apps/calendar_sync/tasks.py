"""Celery tasks for calendar sync."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.db import OperationalError  # type: ignore

from .reconciler import BookingCalendarReconciler

logger = logging.getLogger(__name__)


@shared_task(
    name="calendar_sync.reconcile_calendar",
    autoretry_for=(OperationalError,),
    retry_backoff=60,
    retry_backoff_max=900,
    max_retries=3,
)
def reconcile_calendar() -> dict:
    """
    Periodic reconciliation of bookings with the shared calendar.

    The same run an admin triggers with "sync now"; scheduled through Celery
    Beat so that manual calendar edits are absorbed without admin action.
    Per-booking failures are part of the returned result, only database
    outages are retried.

    Returns:
        dict: {"created", "updated", "deleted", "pulled_from_calendar", "errors"}
    """
    result = BookingCalendarReconciler().reconcile()
    if result.errors:
        logger.warning(f"Calendar reconciliation reported {len(result.errors)} errors")
    return result.as_dict()
