"""Celery tasks for conflict detection."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import check_and_notify

logger = logging.getLogger(__name__)


@shared_task(name="conflicts.check_and_notify")
def check_and_notify_conflicts() -> dict:
    """
    Periodic conflict check.

    Runs every 15 minutes through Celery Beat and emails admins about new
    HIGH conflicts (for example a manual calendar entry overlapping an
    approved booking).

    Returns:
        dict: {"checked", "notified", "skipped", "errors"}
    """
    result = check_and_notify()
    if result.errors:
        logger.warning(f"Conflict check finished with {len(result.errors)} errors")
    logger.info(f"Conflict check: {result.checked} checked, {result.notified} notified")
    return result.as_dict()
