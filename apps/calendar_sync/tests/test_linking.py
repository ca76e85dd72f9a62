from datetime import date

import pytest
from django.utils import timezone

from apps.calendar_sync.colors import IDENTITY_PALETTE, distinct_colors, link_fallback_color
from apps.calendar_sync.linking import EventGraph, EventLinkError, EventLinkService
from apps.calendar_sync.models import LinkedCalendarEvent
from apps.conflicts.models import ConflictType, NotifiedConflict

from .fakes import InMemoryCalendarAdapter, make_booking


@pytest.fixture
def calendar():
    adapter = InMemoryCalendarAdapter()
    for name in ("a", "b", "c", "d"):
        adapter.add(f"Block {name}", date(2025, 6, 1), date(2025, 6, 3), id=name)
    return adapter


@pytest.fixture
def service(calendar):
    return EventLinkService(adapter=calendar)


def test_graph_membership_is_transitive():
    graph = EventGraph([("a", "b"), ("b", "c")])

    assert graph.are_connected(["a", "c"])
    assert graph.component("c") == {"a", "b", "c"}
    assert not graph.are_connected(["a", "d"])
    assert graph.are_connected(["d"])


def test_components_are_largest_first():
    graph = EventGraph([("x", "y"), ("p", "q"), ("q", "r")])

    assert graph.components(["x", "y", "p", "q", "r", "z"]) == [{"p", "q", "r"}, {"x", "y"}, {"z"}]


@pytest.mark.django_db
def test_link_stores_every_pair_and_shares_a_colour(calendar, service):
    calendar.events["b"].color_tag = "5"

    color = service.link(["c", "a", "b"])

    assert color == "5"
    assert set(LinkedCalendarEvent.objects.values_list("event_id_1", "event_id_2")) == {
        ("a", "b"),
        ("a", "c"),
        ("b", "c"),
    }
    assert {calendar.events[name].color_tag for name in ("a", "b", "c")} == {"5"}
    assert service.are_grouped(["a", "c"])


@pytest.mark.django_db
def test_link_falls_back_when_no_colour_is_set(calendar, service):
    assert service.link(["a", "b"]) == link_fallback_color()


@pytest.mark.django_db
def test_linking_twice_does_not_duplicate_edges(service):
    service.link(["a", "b"])
    service.link(["b", "a"])

    assert LinkedCalendarEvent.objects.count() == 1


@pytest.mark.django_db
def test_link_needs_two_events(service):
    with pytest.raises(EventLinkError):
        service.link(["a", "a"])


@pytest.mark.django_db
def test_booking_events_cannot_be_linked(calendar, service):
    make_booking(date(2025, 6, 1), date(2025, 6, 3), google_event_id="a")

    with pytest.raises(EventLinkError):
        service.link(["a", "b"])
    assert LinkedCalendarEvent.objects.count() == 0


@pytest.mark.django_db
def test_unknown_event_cannot_be_linked(service):
    with pytest.raises(EventLinkError):
        service.link(["a", "missing"])


@pytest.mark.django_db
def test_unlink_gives_every_event_its_own_colour(calendar, service):
    service.link(["a", "b", "c"])
    NotifiedConflict.objects.create(
        conflict_key="a-b-c",
        conflict_type=ConflictType.OVERLAPPING_CALENDAR_EVENTS,
        notified_at=timezone.now(),
    )

    colors = service.unlink(["a", "b", "c"])

    assert LinkedCalendarEvent.objects.count() == 0
    assert len(set(colors.values())) == 3
    assert calendar.events["a"].color_tag == colors["a"]
    assert not NotifiedConflict.objects.exists()


@pytest.mark.django_db
def test_unlink_single_keeps_the_rest_of_the_group(calendar, service):
    service.link(["a", "b", "c"])

    colors = service.unlink_single("a")

    assert service.are_grouped(["b", "c"])
    assert not service.are_grouped(["a", "b"])
    assert set(colors) == {"a"}
    assert calendar.events["b"].color_tag == calendar.events["c"].color_tag


@pytest.mark.django_db
def test_unlink_single_recolours_members_left_alone(calendar, service):
    service.link(["a", "b"])

    colors = service.unlink_single("a")

    assert set(colors) == {"a", "b"}
    assert colors["a"] != colors["b"]


@pytest.mark.django_db
def test_unlink_single_splits_a_chain(calendar, service):
    service.link(["a", "b"])
    service.link(["b", "c"])
    service.link(["c", "d"])

    service.unlink_single("b")

    assert service.are_grouped(["c", "d"])
    assert not service.are_grouped(["a", "c"])
    assert calendar.events["a"].color_tag != calendar.events["c"].color_tag


def test_distinct_colours_avoid_taken_ones():
    colors = distinct_colors(["x", "y"], taken=IDENTITY_PALETTE[:-1])

    assert colors["x"] == IDENTITY_PALETTE[-1]
    assert colors["y"] in IDENTITY_PALETTE
