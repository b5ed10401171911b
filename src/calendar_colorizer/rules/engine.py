"""Rule engine for colorizing calendar events."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, Field

from calendar_colorizer.calendar.events import CalendarEvent, EventColor
from calendar_colorizer.calendar.store import EventStore
from calendar_colorizer.calendar.writer import EventWriter, Mutation, MutationKind
from calendar_colorizer.config import ColorizerConfig
from calendar_colorizer.rules import conditions

if TYPE_CHECKING:
    from calendar_colorizer.travel import TravelEvents, TravelSynthesizer


class Classification(BaseModel):
    """Result of running the rule chain over one event."""

    event_id: str
    title: str = Field(description="Title as it was before classification")
    color: EventColor | None = Field(default=None, description="Color after the pass")
    rule: str | None = Field(default=None, description="Name of the terminal rule that matched")
    mutations: list[Mutation] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.mutations)

    @property
    def travel_events_created(self) -> int:
        return sum(1 for m in self.mutations if m.kind == MutationKind.CREATE_EVENT)


@dataclass
class RuleContext:
    """Evaluation state of one event during a classification pass."""

    event: CalendarEvent
    config: ColorizerConfig
    writer: EventWriter
    logger: logging.Logger
    synthesizer: "TravelSynthesizer | None" = None
    color: EventColor | None = None
    travel: "TravelEvents | None" = None

    @property
    def title(self) -> str:
        """Lowercased title, for matching."""
        return (self.event.title or "").lower()

    @property
    def location(self) -> str:
        return self.event.location or ""

    def apply_color(self, color: EventColor) -> None:
        self.writer.set_color(self.event, color)
        self.color = color


@dataclass(frozen=True)
class ClassificationRule:
    """A single step of the rule chain."""

    name: str
    predicate: Callable[[RuleContext], bool]
    action: Callable[[RuleContext], None]
    terminal: bool = True
    description: str = field(default="", compare=False)


def set_color(color: EventColor, message: str) -> Callable[[RuleContext], None]:
    """Build an action that logs ``message`` and colors the event."""

    def action(ctx: RuleContext) -> None:
        ctx.logger.info(f"{message}: {ctx.title}")
        ctx.apply_color(color)

    return action


def mark_tentative(ctx: RuleContext) -> None:
    # Already tentative: the rule still ends the chain, but nothing is written
    if ctx.color == EventColor.TENTATIVE:
        return
    ctx.logger.info(f"Colorizing tentative event found: {ctx.title}")
    ctx.apply_color(EventColor.TENTATIVE)


def colorize_external(ctx: RuleContext) -> None:
    """Create travel events when the title asks for them, then color External."""
    ctx.logger.info(f"New event found with valid location: {ctx.title}")

    marker = ctx.config.transport_marker(ctx.event.title or "")
    if marker and ctx.synthesizer is not None:
        ctx.travel = ctx.synthesizer.synthesize(ctx.event, marker, writer=ctx.writer)

    ctx.logger.info(f"Colorizing event with valid location: {ctx.title}")
    ctx.apply_color(EventColor.EXTERNAL)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name="de-tentative",
        predicate=conditions.is_stale_tentative,
        action=set_color(EventColor.DEFAULT, "Removing color from non-tentative event"),
        terminal=False,
        description="Reset Tentative color once the '?' prefix is gone",
    ),
    ClassificationRule(
        name="tentative",
        predicate=conditions.has_tentative_marker,
        action=mark_tentative,
        description="Title starts with '?'",
    ),
    ClassificationRule(
        name="interview",
        predicate=conditions.mentions_interview,
        action=set_color(EventColor.INTERVIEW, "Colorizing interview found"),
        description="Title contains 'interview'",
    ),
    ClassificationRule(
        name="external",
        predicate=conditions.has_physical_location,
        action=colorize_external,
        description="Physical location; adds travel events for transport markers",
    ),
    ClassificationRule(
        name="one-on-one",
        predicate=conditions.has_one_guest,
        action=set_color(EventColor.ONE_ON_ONE, "Colorizing event with one participant"),
        description="Exactly one guest",
    ),
    ClassificationRule(
        name="group-meeting",
        predicate=conditions.has_many_guests,
        action=set_color(EventColor.GROUP_MEETING, "Colorizing event with multiple participants"),
        description="More than one guest",
    ),
)


class ClassificationEngine:
    """Runs events through an ordered rule chain; the first terminal match wins."""

    def __init__(
        self,
        store: EventStore,
        config: ColorizerConfig,
        synthesizer: "TravelSynthesizer | None" = None,
        rules: tuple[ClassificationRule, ...] | list[ClassificationRule] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            store: Event store receiving the writes.
            config: Classification constants.
            synthesizer: Travel synthesizer for events with transport markers.
            rules: Rule chain, in evaluation order. Defaults to DEFAULT_RULES.
            logger: Logger for the activity trace.
        """
        self.store = store
        self.config = config
        self.synthesizer = synthesizer
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.logger = logger or logging.getLogger(__name__)

    def classify(self, event: CalendarEvent, *, dry_run: bool = False) -> Classification:
        """
        Classify one event and apply the resulting writes.

        Args:
            event: The event to classify.
            dry_run: If True, record the writes without applying them.

        Returns:
            Classification with the final color, the matching rule and the
            writes in the order they were made.
        """
        writer = EventWriter(self.store, dry_run=dry_run)
        ctx = RuleContext(
            event=event,
            config=self.config,
            writer=writer,
            logger=self.logger,
            synthesizer=self.synthesizer,
            color=event.color,
        )
        title = event.title or ""

        matched: str | None = None
        for rule in self.rules:
            if not rule.predicate(ctx):
                continue
            rule.action(ctx)
            if rule.terminal:
                matched = rule.name
                break

        if matched is None:
            self.logger.debug(f"No matching rule for: {ctx.title}")

        return Classification(
            event_id=event.id,
            title=title,
            color=ctx.color,
            rule=matched,
            mutations=writer.mutations,
            dry_run=dry_run,
        )
