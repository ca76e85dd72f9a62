"""Linking of manual calendar entries into one logical stay.

Admins may declare that several calendar entries (for example a stay that
was entered as two separate blocks) belong together. The relation is stored
as undirected edges; membership of a group is always the transitive closure
over the full edge set, so A-B plus B-C puts A, B and C in one group even
without an A-C edge.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from itertools import combinations
from typing import Iterable

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore

from apps.bookings.models import Booking
from apps.conflicts.ledger import ConflictLedger

from .adapter import CalendarAdapter, CalendarError, CalendarEventNotFound, get_calendar_adapter
from .colors import distinct_colors, info_color, link_fallback_color
from .models import LinkedCalendarEvent

logger = logging.getLogger(__name__)


class EventLinkError(Exception):
    """Raised when calendar entries cannot be linked or unlinked."""


def _unique(event_ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(str(event_id) for event_id in event_ids if event_id))


class EventGraph:
    """In-memory adjacency view of the linked-event relation."""

    def __init__(self, edges: Iterable[tuple[str, str]] = ()):
        self._adjacency: dict[str, set[str]] = defaultdict(set)
        for first, second in edges:
            self.add_edge(first, second)

    @classmethod
    def from_database(cls) -> "EventGraph":
        return cls(LinkedCalendarEvent.objects.values_list("event_id_1", "event_id_2"))

    def add_edge(self, first: str, second: str) -> None:
        if first == second:
            return
        self._adjacency[first].add(second)
        self._adjacency[second].add(first)

    def remove_node(self, event_id: str) -> None:
        for neighbour in self._adjacency.pop(event_id, set()):
            self._adjacency[neighbour].discard(event_id)

    def neighbours(self, event_id: str) -> frozenset[str]:
        return frozenset(self._adjacency.get(event_id, ()))

    def component(self, event_id: str) -> set[str]:
        """Every event reachable from ``event_id``, itself included."""
        seen = {event_id}
        queue = deque([event_id])
        while queue:
            current = queue.popleft()
            for neighbour in self._adjacency.get(current, ()):
                if neighbour not in seen:
                    seen.add(neighbour)
                    queue.append(neighbour)
        return seen

    def are_connected(self, event_ids: Iterable[str]) -> bool:
        ids = _unique(event_ids)
        if len(ids) < 2:
            return True
        reachable = self.component(ids[0])
        return all(event_id in reachable for event_id in ids[1:])

    def components(self, event_ids: Iterable[str]) -> list[set[str]]:
        """Partition ``event_ids`` by connected component, largest first."""
        remaining = _unique(event_ids)
        groups: list[set[str]] = []
        while remaining:
            reachable = self.component(remaining[0])
            group = {event_id for event_id in remaining if event_id in reachable}
            groups.append(group)
            remaining = [event_id for event_id in remaining if event_id not in group]
        return sorted(groups, key=lambda group: (-len(group), min(group)))


class EventLinkService:
    """Admin operations that group and ungroup manual calendar entries."""

    def __init__(self, adapter: CalendarAdapter | None = None, ledger: ConflictLedger | None = None):
        self.adapter = adapter or get_calendar_adapter()
        self.ledger = ledger or ConflictLedger()

    def _reject_booking_events(self, event_ids: list[str]) -> None:
        owned = set(Booking.objects.filter(google_event_id__in=event_ids).values_list("google_event_id", flat=True))
        if owned:
            raise EventLinkError(f"Booking events cannot be linked: {', '.join(sorted(owned))}")

    def _current_color(self, event_id: str) -> str | None:
        try:
            event = self.adapter.get_event(event_id)
        except CalendarEventNotFound as exc:
            raise EventLinkError(f"Calendar event {event_id} does not exist") from exc
        if event is None:
            return None
        if event.booking_reference:
            raise EventLinkError(f"Booking events cannot be linked: {event_id}")
        return event.color_tag

    def _safe_color(self, event_id: str) -> str | None:
        try:
            event = self.adapter.get_event(event_id)
        except CalendarError as exc:
            logger.warning(f"Could not read colour of calendar event {event_id}: {exc}")
            return None
        return event.color_tag if event else None

    def _apply_colors(self, colors: dict[str, str]) -> None:
        for event_id, color in colors.items():
            if not self.adapter.update_event(event_id, color_tag=color):
                logger.warning(f"Could not recolour calendar event {event_id}")

    def link(self, event_ids: Iterable[str], actor=None) -> str:  # type: ignore
        """Link the events into one group and give them a shared colour."""
        ids = _unique(event_ids)
        if len(ids) < 2:
            raise EventLinkError("At least two calendar events are required to link them.")
        self._reject_booking_events(ids)

        colors = [self._current_color(event_id) for event_id in ids]
        shared_color = next(
            (color for color in colors if color and color != info_color()),
            link_fallback_color(),
        )

        with transaction.atomic():
            for first, second in combinations(ids, 2):
                low, high = LinkedCalendarEvent.ordered(first, second)
                LinkedCalendarEvent.objects.get_or_create(
                    event_id_1=low,
                    event_id_2=high,
                    defaults={"created_by": actor if getattr(actor, "pk", None) else None},
                )

        self._apply_colors({event_id: shared_color for event_id in ids})
        logger.info(f"Linked calendar events {', '.join(ids)} with colour {shared_color}")
        return shared_color

    def unlink(self, event_ids: Iterable[str], actor=None) -> dict[str, str]:  # type: ignore
        """Remove the edges among exactly these events and give each its own colour."""
        ids = _unique(event_ids)
        if not ids:
            raise EventLinkError("No calendar events given.")

        removed, _details = LinkedCalendarEvent.objects.filter(
            event_id_1__in=ids,
            event_id_2__in=ids,
        ).delete()

        colors = distinct_colors(ids)
        self._apply_colors(colors)
        self.ledger.reset_for_events(ids)
        logger.info(f"Unlinked calendar events {', '.join(ids)} ({removed} links removed) by {actor or 'system'}")
        return colors

    def unlink_single(self, event_id: str, actor=None) -> dict[str, str]:  # type: ignore
        """
        Take one event out of its group.

        The remaining members keep their links and colour. Members that end
        up alone, and any further pieces the group falls apart into, get a
        colour of their own.
        """
        graph = EventGraph.from_database()
        former_members = graph.component(event_id) - {event_id}

        removed, _details = LinkedCalendarEvent.objects.filter(
            Q(event_id_1=event_id) | Q(event_id_2=event_id)
        ).delete()
        graph.remove_node(event_id)

        recolor = [event_id]
        pieces = graph.components(former_members)
        for index, piece in enumerate(pieces):
            if len(piece) == 1:
                recolor.extend(piece)
            elif index > 0:
                recolor.append(min(piece))

        kept_color = None
        if pieces and len(pieces[0]) > 1:
            kept_color = self._safe_color(min(pieces[0]))
        colors = distinct_colors(recolor, taken=[kept_color] if kept_color else ())
        for piece in pieces[1:]:
            if len(piece) > 1:
                shared = colors.pop(min(piece))
                colors.update({member: shared for member in piece})
        self._apply_colors(colors)

        self.ledger.reset_for_events([event_id, *former_members])
        logger.info(f"Removed calendar event {event_id} from its group ({removed} links) by {actor or 'system'}")
        return colors

    def are_grouped(self, event_ids: Iterable[str]) -> bool:
        return EventGraph.from_database().are_connected(event_ids)
