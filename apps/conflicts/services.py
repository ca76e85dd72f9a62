"""Conflict notification dispatch.

The dispatcher never decides *how* admins are told, only *whether*: a
conflict is handed to the sender when it is HIGH severity, not ignored and
not notified within the re-notification window. The notified marker is
written in the same transaction as the sends and rolled back when no
recipient could be reached, so the next run tries again.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, Iterable

from django.db import transaction  # type: ignore

from apps.calendar_sync.adapter import CalendarAdapter

from .detector import Conflict, ConflictDetector, Severity
from .ledger import ConflictLedger

logger = logging.getLogger(__name__)


class NothingDelivered(Exception):
    """No recipient accepted the notification."""


@dataclass
class DispatchResult:
    checked: int = 0
    notified: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


def _default_sender(recipient: str, record: dict) -> bool:
    from apps.notifications.services import send_conflict_notification

    return send_conflict_notification(recipient, record)


def _default_recipients() -> list[str]:
    from apps.notifications.services import get_admins_to_notify

    return get_admins_to_notify("booking_conflict")


class ConflictNotificationDispatcher:
    def __init__(
        self,
        ledger: ConflictLedger | None = None,
        sender: Callable[[str, dict], bool] | None = None,
        recipients: Callable[[], Iterable[str]] | None = None,
    ):
        self.ledger = ledger or ConflictLedger()
        self.sender = sender or _default_sender
        self.recipients = recipients or _default_recipients

    def should_notify(self, conflict: Conflict) -> bool:
        if conflict.severity != Severity.HIGH:
            return False
        if self.ledger.is_ignored(conflict.key, conflict.conflict_type):
            return False
        return not self.ledger.is_notified(conflict.key, conflict.conflict_type)

    def dispatch(self, conflicts: Iterable[Conflict]) -> DispatchResult:
        result = DispatchResult()
        recipients: list[str] | None = None

        for conflict in conflicts:
            result.checked += 1
            if not self.should_notify(conflict):
                result.skipped += 1
                continue

            if recipients is None:
                recipients = list(self.recipients())
            if not recipients:
                logger.info("No admin has opted in to conflict notifications")
                result.skipped += 1
                continue

            try:
                with transaction.atomic():
                    if not self.ledger.mark_notified(conflict.key, conflict.conflict_type):
                        result.skipped += 1
                        continue
                    self._send(conflict, recipients, result)
            except NothingDelivered:
                logger.warning(f"Conflict {conflict.key} could not be delivered to any admin; will retry")
                result.errors.append(f"{conflict.conflict_type} {conflict.key}: no notification delivered")
                continue

            result.notified += 1

        return result

    def _send(self, conflict: Conflict, recipients: list[str], result: DispatchResult) -> None:
        record = conflict.to_record()
        delivered = 0
        for recipient in recipients:
            try:
                if self.sender(recipient, record):
                    delivered += 1
            except Exception as e:
                logger.error(f"Conflict notification to {recipient} failed: {e}", exc_info=True)
                result.errors.append(f"{recipient}: {e}")
        if not delivered:
            raise NothingDelivered(conflict.key)


def check_and_notify(adapter: CalendarAdapter | None = None) -> DispatchResult:
    """Detect all conflicts and notify admins about new HIGH ones."""
    ledger = ConflictLedger()
    conflicts = ConflictDetector(adapter=adapter, ledger=ledger).find_all_conflicts()
    return ConflictNotificationDispatcher(ledger=ledger).dispatch(conflicts)


def check_conflicts_for_event(event_id: str, adapter: CalendarAdapter | None = None) -> DispatchResult:
    """Notify about conflicts involving one calendar entry (after it was created or edited)."""
    ledger = ConflictLedger()
    conflicts = [
        conflict
        for conflict in ConflictDetector(adapter=adapter, ledger=ledger).find_all_conflicts()
        if conflict.involves_event(event_id)
    ]
    return ConflictNotificationDispatcher(ledger=ledger).dispatch(conflicts)
