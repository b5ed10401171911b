"""Trigger registration for change-driven and daily runs."""

import logging
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from calendar_colorizer.orchestrator.models import RunMode

logger = logging.getLogger(__name__)


class TriggerKind(str, Enum):
    """Kinds of run triggers."""

    ON_EVENT_UPDATED = "on_event_updated"
    DAILY = "daily"

    @property
    def run_mode(self) -> RunMode:
        if self is TriggerKind.ON_EVENT_UPDATED:
            return RunMode.CHANGE_NOTIFICATION
        return RunMode.SCHEDULED


class Trigger(BaseModel):
    """A registered trigger."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    kind: TriggerKind
    calendar_id: str | None = Field(
        default=None, description="Calendar watched by on_event_updated triggers"
    )
    every_days: int = Field(default=1, ge=1, description="Interval of daily triggers")


class TriggerRegistry(ABC):
    """Abstract base class for trigger backends."""

    @abstractmethod
    def list_triggers(self) -> list[Trigger]:
        """Get all registered triggers."""
        ...

    @abstractmethod
    def create_trigger(self, trigger: Trigger) -> Trigger:
        """Register a trigger."""
        ...

    @abstractmethod
    def delete_trigger(self, trigger: Trigger) -> None:
        """Remove a registered trigger."""
        ...

    def has_trigger(self, kind: TriggerKind) -> bool:
        return any(t.kind == kind for t in self.list_triggers())


class YamlTriggerRegistry(TriggerRegistry):
    """Triggers stored in a YAML file, read by the local watcher."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> list[Trigger]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return [Trigger(**raw) for raw in data.get("triggers", [])]

    def _save(self, triggers: list[Trigger]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {"triggers": [t.model_dump(mode="json", exclude_none=True) for t in triggers]}
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def list_triggers(self) -> list[Trigger]:
        return self._load()

    def create_trigger(self, trigger: Trigger) -> Trigger:
        triggers = self._load()
        triggers.append(trigger)
        self._save(triggers)
        return trigger

    def delete_trigger(self, trigger: Trigger) -> None:
        self._save([t for t in self._load() if t.id != trigger.id])


def initialize_triggers(registry: TriggerRegistry, calendar_id: str) -> list[Trigger]:
    """
    Recreate all triggers: one for calendar changes, one running daily.

    Existing triggers are deleted first, so calling this again never
    registers duplicates.

    Args:
        registry: Trigger backend.
        calendar_id: Calendar whose changes start a run.

    Returns:
        The registered triggers.
    """
    for trigger in registry.list_triggers():
        registry.delete_trigger(trigger)

    registry.create_trigger(Trigger(kind=TriggerKind.ON_EVENT_UPDATED, calendar_id=calendar_id))
    registry.create_trigger(Trigger(kind=TriggerKind.DAILY, every_days=1))

    triggers = registry.list_triggers()
    logger.info("Triggers initialized successfully:")
    for trigger in triggers:
        logger.info(f" - Trigger type: {trigger.kind.value}")
    return triggers
