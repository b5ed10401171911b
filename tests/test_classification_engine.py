"""Tests for the classification engine."""

import logging

import pytest

from calendar_colorizer.calendar.events import EventColor
from calendar_colorizer.calendar.writer import MutationKind
from calendar_colorizer.routing.base import RoutingService
from calendar_colorizer.rules.engine import (
    DEFAULT_RULES,
    ClassificationEngine,
    ClassificationRule,
    set_color,
)
from calendar_colorizer.travel import TravelSynthesizer


@pytest.fixture
def engine(store, config, router) -> ClassificationEngine:
    synthesizer = TravelSynthesizer(store, router, config)
    return ClassificationEngine(store, config, synthesizer=synthesizer)


class MalformedResponseRouter(RoutingService):
    """Router choking on a response it cannot read."""

    def find_route(self, origin, destination, mode, arrive_by):
        raise KeyError("duration")


class TestRuleOrder:
    """Tests for the default rule chain."""

    def test_rule_names_in_order(self) -> None:
        assert [r.name for r in DEFAULT_RULES] == [
            "de-tentative",
            "tentative",
            "interview",
            "external",
            "one-on-one",
            "group-meeting",
        ]

    def test_only_de_tentative_continues(self) -> None:
        assert [r.terminal for r in DEFAULT_RULES] == [False, True, True, True, True, True]


class TestClassification:
    """Tests for individual rules."""

    def test_tentative_title(self, engine, store, make_event) -> None:
        """A '?' title wins over guests."""
        event = make_event(title="? Lunch", guests=["a@example.com", "b@example.com"])
        store.events.append(event)

        result = engine.classify(event)

        assert result.rule == "tentative"
        assert result.color == EventColor.TENTATIVE
        assert event.color == EventColor.TENTATIVE
        assert store.writes == [("set_color", event.id, EventColor.TENTATIVE)]

    def test_already_tentative_title_is_left_alone(self, engine, store, make_event) -> None:
        event = make_event(
            title="?Lunch", color=EventColor.TENTATIVE, guests=["a@example.com"]
        )

        result = engine.classify(event)

        assert result.rule == "tentative"
        assert result.color == EventColor.TENTATIVE
        assert result.changed is False
        assert store.writes == []

    def test_tentative_interview_stays_tentative(self, engine, store, make_event) -> None:
        """A marked title keeps its Tentative color even when later rules would match."""
        event = make_event(title="?Interview prep", color=EventColor.TENTATIVE)

        result = engine.classify(event)

        assert result.rule == "tentative"
        assert result.color == EventColor.TENTATIVE
        assert store.writes == []

    def test_stale_tentative_is_reset(self, engine, store, make_event) -> None:
        """Without a marker and without other matches the color ends at Default."""
        event = make_event(title="Lunch", color=EventColor.TENTATIVE)

        result = engine.classify(event)

        assert result.rule is None
        assert result.color == EventColor.DEFAULT
        assert [m.color for m in result.mutations] == [EventColor.DEFAULT]

    def test_stale_tentative_continues_to_next_rule(self, engine, make_event) -> None:
        event = make_event(
            title="Sync", color=EventColor.TENTATIVE, guests=["a@example.com"]
        )

        result = engine.classify(event)

        assert result.rule == "one-on-one"
        assert [m.color for m in result.mutations] == [
            EventColor.DEFAULT,
            EventColor.ONE_ON_ONE,
        ]
        assert event.color == EventColor.ONE_ON_ONE

    def test_interview_beats_location_and_guests(self, engine, store, make_event) -> None:
        event = make_event(
            title="Interview with Sam",
            location="Main Street 1, Springfield",
            guests=["a@example.com", "b@example.com"],
        )

        result = engine.classify(event)

        assert result.rule == "interview"
        assert result.color == EventColor.INTERVIEW
        assert not any(op == "create_event" for op, _, _ in store.writes)

    def test_tentative_beats_interview(self, engine, make_event) -> None:
        result = engine.classify(make_event(title="?Interview with Sam"))
        assert result.color == EventColor.TENTATIVE

    def test_physical_location_is_external(self, engine, store, make_event) -> None:
        event = make_event(title="Dentist", location="Main Street 1", guests=["a@example.com"])

        result = engine.classify(event)

        assert result.rule == "external"
        assert result.color == EventColor.EXTERNAL
        assert result.travel_events_created == 0
        assert store.writes == [("set_color", event.id, EventColor.EXTERNAL)]

    def test_virtual_location_falls_through_to_guests(self, engine, make_event) -> None:
        event = make_event(title="Sync", location="Google Meet", guests=["a@example.com"])
        assert engine.classify(event).color == EventColor.ONE_ON_ONE

    def test_meeting_link_with_many_guests(self, engine, make_event) -> None:
        event = make_event(
            title="Planning",
            location="https://zoom.us/j/123",
            guests=["a@example.com", "b@example.com", "c@example.com"],
        )

        result = engine.classify(event)

        assert result.rule == "group-meeting"
        assert result.color == EventColor.GROUP_MEETING

    def test_no_match_leaves_event_unchanged(self, engine, store, make_event) -> None:
        event = make_event(title="Focus time")

        result = engine.classify(event)

        assert result.rule is None
        assert result.color is None
        assert result.changed is False
        assert event.color is None
        assert store.writes == []

    def test_empty_title_and_location(self, engine, make_event) -> None:
        result = engine.classify(make_event(title="", location=""))
        assert result.rule is None


class TestTravelThroughEngine:
    """Tests for external events with transport markers."""

    def test_marker_creates_travel_events(self, engine, store, make_event) -> None:
        event = make_event(title="🚗Dentist", location="Main Street 1")
        store.events.append(event)

        result = engine.classify(event)

        assert result.color == EventColor.EXTERNAL
        assert result.travel_events_created == 2
        assert event.title == "Dentist"
        assert [m.kind for m in result.mutations] == [
            MutationKind.CREATE_EVENT,
            MutationKind.CREATE_EVENT,
            MutationKind.SET_TITLE,
            MutationKind.SET_COLOR,
        ]

    def test_no_home_address_still_colors(self, store, router, make_event) -> None:
        from calendar_colorizer.config import ColorizerConfig

        config = ColorizerConfig()
        engine = ClassificationEngine(
            store, config, synthesizer=TravelSynthesizer(store, router, config)
        )
        event = make_event(title="🚗Dentist", location="Main Street 1")

        result = engine.classify(event)

        assert result.color == EventColor.EXTERNAL
        assert result.travel_events_created == 0
        assert event.title == "🚗Dentist"
        assert router.calls == []

    def test_router_failure_still_colors(self, store, config, make_event) -> None:
        synthesizer = TravelSynthesizer(store, MalformedResponseRouter(), config)
        engine = ClassificationEngine(store, config, synthesizer=synthesizer)
        event = make_event(title="🚗Dentist", location="Main Street 1")

        result = engine.classify(event)

        assert result.color == EventColor.EXTERNAL
        assert result.travel_events_created == 0
        assert event.color == EventColor.EXTERNAL

    def test_second_pass_is_a_no_op(self, engine, store, make_event) -> None:
        """After classification the event is colored and the marker is gone."""
        event = make_event(title="🚗Dentist", location="Main Street 1")
        store.events.append(event)
        engine.classify(event)
        writes = len(store.writes)

        result = engine.classify(event)

        assert result.travel_events_created == 0
        assert result.color == EventColor.EXTERNAL
        # Only the color is rewritten, to the same value
        assert store.writes[writes:] == [("set_color", event.id, EventColor.EXTERNAL)]
        assert len([e for e in store.events if e.is_travel_event]) == 2


class TestDryRun:
    """Tests for dry-run classification."""

    def test_dry_run_records_without_writing(self, engine, store, make_event) -> None:
        event = make_event(title="🚎Museum", location="Museum Square 2")
        store.events.append(event)

        result = engine.classify(event, dry_run=True)

        assert result.dry_run is True
        assert result.color == EventColor.EXTERNAL
        assert result.travel_events_created == 2
        assert store.writes == []
        assert event.color is None
        assert event.title == "🚎Museum"
        assert len(store.events) == 1


class TestCustomRules:
    """Tests for engines with their own rule chains."""

    def test_first_terminal_rule_wins(self, store, config, make_event) -> None:
        rules = [
            ClassificationRule(
                name="everything",
                predicate=lambda ctx: True,
                action=set_color(EventColor.INTERVIEW, "Always"),
            ),
            ClassificationRule(
                name="never-reached",
                predicate=lambda ctx: True,
                action=set_color(EventColor.EXTERNAL, "Never"),
            ),
        ]
        engine = ClassificationEngine(store, config, rules=rules, logger=logging.getLogger("t"))

        result = engine.classify(make_event())

        assert result.rule == "everything"
        assert len(result.mutations) == 1
