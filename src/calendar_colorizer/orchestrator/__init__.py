"""Run orchestration, triggers and the local watcher."""

from calendar_colorizer.orchestrator.engine import RunOrchestrator
from calendar_colorizer.orchestrator.models import ProcessResult, RunMode, RunResult
from calendar_colorizer.orchestrator.triggers import (
    Trigger,
    TriggerKind,
    TriggerRegistry,
    YamlTriggerRegistry,
    initialize_triggers,
)
from calendar_colorizer.orchestrator.watcher import CalendarWatcher

__all__ = [
    "CalendarWatcher",
    "ProcessResult",
    "RunMode",
    "RunOrchestrator",
    "RunResult",
    "Trigger",
    "TriggerKind",
    "TriggerRegistry",
    "YamlTriggerRegistry",
    "initialize_triggers",
]
