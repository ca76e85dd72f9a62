"""Ignore and notified markers for conflicts.

Both marker kinds are keyed by ``(conflict_key, conflict_type)``. An ignored
conflict disappears from every listing until it is un-ignored. A notified
conflict is not reported to admins again until the re-notification window
(``CONFLICT_RENOTIFY_DAYS``) has passed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable

from django.conf import settings  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from .models import ConflictType, IgnoredConflict, NotifiedConflict

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "-"


def conflict_key(identifiers: Iterable[object]) -> str:
    """Order-independent key for the set of entities involved in a conflict."""
    return KEY_SEPARATOR.join(sorted(str(identifier) for identifier in identifiers))


class ConflictLedger:
    def __init__(self, clock: Callable[[], datetime] | None = None, renotify_days: int | None = None):
        self.clock = clock or timezone.now
        self.renotify_days = (
            renotify_days
            if renotify_days is not None
            else int(getattr(settings, "CONFLICT_RENOTIFY_DAYS", 7))
        )

    # ignored -----------------------------------------------------------

    def is_ignored(self, key: str, conflict_type: str) -> bool:
        return IgnoredConflict.objects.filter(conflict_key=key, conflict_type=conflict_type).exists()

    def ignore(self, key: str, conflict_type: str, reason: str | None = None, actor=None) -> IgnoredConflict:  # type: ignore
        marker, _created = IgnoredConflict.objects.update_or_create(
            conflict_key=key,
            conflict_type=conflict_type,
            defaults={
                "reason": reason or "",
                "ignored_by": actor if getattr(actor, "pk", None) else None,
            },
        )
        logger.info(f"Conflict {conflict_type} {key} ignored")
        return marker

    def unignore(self, key: str, conflict_type: str) -> bool:
        deleted, _details = IgnoredConflict.objects.filter(conflict_key=key, conflict_type=conflict_type).delete()
        return bool(deleted)

    def ignored_keys(self) -> set[tuple[str, str]]:
        return set(IgnoredConflict.objects.values_list("conflict_key", "conflict_type"))

    # notified ----------------------------------------------------------

    def _is_fresh(self, notified_at: datetime, renotify_days: int | None = None) -> bool:
        days = self.renotify_days if renotify_days is None else renotify_days
        return self.clock() - notified_at < timedelta(days=days)

    def is_notified(self, key: str, conflict_type: str, renotify_days: int | None = None) -> bool:
        """True if admins were told about this conflict within the re-notify window."""
        marker = NotifiedConflict.objects.filter(conflict_key=key, conflict_type=conflict_type).first()
        if marker is None:
            return False
        return self._is_fresh(marker.notified_at, renotify_days)

    def mark_notified(self, key: str, conflict_type: str) -> bool:
        """
        Claim the notification for this conflict.

        A new marker is inserted (unique constraint); an existing marker is
        refreshed with a compare-and-set on its old timestamp, and only once
        the re-notify window has passed. Returns False when another notifier
        got there first.
        """
        now = self.clock()
        marker = NotifiedConflict.objects.filter(conflict_key=key, conflict_type=conflict_type).first()

        if marker is None:
            try:
                with transaction.atomic():
                    NotifiedConflict.objects.create(conflict_key=key, conflict_type=conflict_type, notified_at=now)
            except IntegrityError:
                logger.info(f"Conflict {conflict_type} {key} is already being notified")
                return False
            return True

        if self._is_fresh(marker.notified_at):
            return False

        refreshed = NotifiedConflict.objects.filter(
            pk=marker.pk,
            notified_at=marker.notified_at,
            notified_at__lte=now - timedelta(days=self.renotify_days),
        ).update(notified_at=now)
        return bool(refreshed)

    def unmark_notified(self, key: str, conflict_type: str, previous: datetime | None = None) -> None:
        """Undo a claim: drop a new marker or put back the previous timestamp."""
        markers = NotifiedConflict.objects.filter(conflict_key=key, conflict_type=conflict_type)
        if previous is None:
            markers.delete()
        else:
            markers.update(notified_at=previous)

    def reset_for_events(self, event_ids: Iterable[str]) -> int:
        """Forget notifications of calendar-entry overlaps involving these events."""
        ids = {str(event_id) for event_id in event_ids if event_id}
        if not ids:
            return 0

        matches = Q()
        for event_id in ids:
            matches |= Q(conflict_key__contains=event_id)

        stale = [
            marker.pk
            for marker in NotifiedConflict.objects.filter(
                conflict_type=ConflictType.OVERLAPPING_CALENDAR_EVENTS,
            ).filter(matches)
            if ids & set(marker.conflict_key.split(KEY_SEPARATOR))
        ]
        if not stale:
            return 0
        deleted, _details = NotifiedConflict.objects.filter(pk__in=stale).delete()
        logger.info(f"Reset {deleted} conflict notifications for events {', '.join(sorted(ids))}")
        return deleted
