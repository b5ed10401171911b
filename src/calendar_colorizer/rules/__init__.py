"""Rule engine for calendar event classification."""

from calendar_colorizer.rules.engine import (
    DEFAULT_RULES,
    Classification,
    ClassificationEngine,
    ClassificationRule,
    RuleContext,
)
from calendar_colorizer.rules.skip import should_skip

__all__ = [
    "DEFAULT_RULES",
    "Classification",
    "ClassificationEngine",
    "ClassificationRule",
    "RuleContext",
    "should_skip",
]
