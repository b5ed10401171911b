"""Predicates used by the classification rules.

Every predicate takes the rule context of the event being classified. Titles
are compared lowercased; a missing title or location counts as empty.
"""

from typing import TYPE_CHECKING

from calendar_colorizer.calendar.events import EventColor

if TYPE_CHECKING:
    from calendar_colorizer.rules.engine import RuleContext


def is_stale_tentative(ctx: "RuleContext") -> bool:
    """Tentative color on an event whose title lost the tentative marker."""
    return ctx.color == EventColor.TENTATIVE and not has_tentative_marker(ctx)


def has_tentative_marker(ctx: "RuleContext") -> bool:
    return ctx.title.startswith(ctx.config.tentative_marker.lower())


def mentions_interview(ctx: "RuleContext") -> bool:
    return ctx.config.interview_keyword.lower() in ctx.title


def has_physical_location(ctx: "RuleContext") -> bool:
    """
    Check if the event takes place somewhere you have to travel to.

    Locations starting with a videoconferencing provider name or containing
    a link are virtual.
    """
    location = ctx.location
    if not location:
        return False
    if location.startswith(ctx.config.video_prefixes):
        return False
    return ctx.config.link_marker not in location


def has_one_guest(ctx: "RuleContext") -> bool:
    return len(ctx.event.guests) == 1


def has_many_guests(ctx: "RuleContext") -> bool:
    return len(ctx.event.guests) > 1
