from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Event(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str


class ScaffoldStarted(Event):
    event_type: str = "ScaffoldStarted"
    operation: str = "scaffold"
    worktree_path: str
    preset: str = ""
    step_count: int = 0


class PreFlightFailed(Event):
    event_type: str = "PreFlightFailed"
    worktree_path: str
    error: str = ""


class StepStarted(Event):
    event_type: str = "StepStarted"
    step_name: str
    index: int = 0


class StepSkipped(Event):
    event_type: str = "StepSkipped"
    step_name: str
    index: int = 0
    reason: str = ""


class StepCompleted(Event):
    event_type: str = "StepCompleted"
    step_name: str
    index: int = 0
    duration_ms: int = 0
    dry_run: bool = False


class StepFailed(Event):
    event_type: str = "StepFailed"
    step_name: str
    index: int = 0
    error: str = ""


class ScaffoldCompleted(Event):
    event_type: str = "ScaffoldCompleted"
    operation: str = "scaffold"
    worktree_path: str
    executed: int = 0
    skipped: int = 0
    duration_ms: int = 0


class ScaffoldFailed(Event):
    event_type: str = "ScaffoldFailed"
    operation: str = "scaffold"
    worktree_path: str
    error: str = ""


EVENT_TYPE_MAP: dict[str, type[Event]] = {
    "ScaffoldStarted": ScaffoldStarted,
    "PreFlightFailed": PreFlightFailed,
    "StepStarted": StepStarted,
    "StepSkipped": StepSkipped,
    "StepCompleted": StepCompleted,
    "StepFailed": StepFailed,
    "ScaffoldCompleted": ScaffoldCompleted,
    "ScaffoldFailed": ScaffoldFailed,
}
