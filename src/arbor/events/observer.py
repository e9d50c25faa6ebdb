from __future__ import annotations

from typing import Protocol

import typer

from arbor.events.types import (
    Event,
    PreFlightFailed,
    ScaffoldCompleted,
    ScaffoldFailed,
    ScaffoldStarted,
    StepCompleted,
    StepFailed,
    StepSkipped,
    StepStarted,
)


class EventObserver(Protocol):
    def on_event(self, event: Event) -> None: ...


class StdoutObserver:
    def __init__(self, *, verbose: bool = False) -> None:
        self._verbose = verbose

    def on_event(self, event: Event) -> None:
        label = f"[{event.operation.capitalize()}]" if hasattr(event, "operation") else ""
        if isinstance(event, ScaffoldStarted):
            preset = f" (preset: {event.preset})" if event.preset else ""
            typer.echo(f"{label} Started: {event.worktree_path}{preset}, {event.step_count} steps")
        elif isinstance(event, PreFlightFailed):
            typer.echo(f"[Pre-flight] FAILED: {event.error}")
        elif isinstance(event, StepStarted):
            if self._verbose:
                typer.echo(f"  [Step] Started: {event.step_name}")
        elif isinstance(event, StepSkipped):
            typer.echo(f"  [Step] Skipped: {event.step_name} ({event.reason})")
        elif isinstance(event, StepCompleted):
            suffix = " [dry run]" if event.dry_run else f" ({event.duration_ms}ms)"
            typer.echo(f"  [Step] Completed: {event.step_name}{suffix}")
        elif isinstance(event, StepFailed):
            typer.echo(f"  [Step] FAILED: {event.step_name}: {event.error}")
        elif isinstance(event, ScaffoldCompleted):
            typer.echo(
                f"{label} Completed: {event.executed} run, {event.skipped} skipped ({event.duration_ms}ms)"
            )
        elif isinstance(event, ScaffoldFailed):
            typer.echo(f"{label} FAILED: {event.error}")
