from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from arbor.conditions.evaluator import evaluate_condition
from arbor.events.dispatcher import NullEmitter
from arbor.models.results import ExecutionResult

if TYPE_CHECKING:
    from arbor.events.dispatcher import EventEmitter
    from arbor.models.context import ScaffoldContext, StepOptions
    from arbor.steps.base import Step

logger = logging.getLogger(__name__)


class StepFailedError(Exception):
    def __init__(self, step_name: str, cause: BaseException) -> None:
        self.step_name = step_name
        self.cause = cause
        super().__init__(f"step {step_name} failed: {cause}")


class ScaffoldCancelledError(Exception):
    def __init__(self, completed: int) -> None:
        self.completed = completed
        super().__init__(f"run cancelled after {completed} step(s)")


class StepExecutor:
    """Runs steps one at a time in the order given, stopping at the first failure."""

    def __init__(
        self,
        steps: list[Step],
        context: ScaffoldContext,
        options: StepOptions,
        event_emitter: EventEmitter | None = None,
    ) -> None:
        self._steps = list(steps)
        self._context = context
        self._options = options
        self._emitter = event_emitter or NullEmitter()
        self._results: list[ExecutionResult] = []
        self._cancel = threading.Event()

    def request_cancel(self) -> None:
        self._cancel.set()

    def results(self) -> list[ExecutionResult]:
        return list(self._results)

    def execute(self) -> list[ExecutionResult]:
        self._results = []
        for index, step in enumerate(self._steps):
            if self._cancel.is_set():
                raise ScaffoldCancelledError(len(self._results))
            self._execute_step(index, step)
        return self.results()

    def _skip(self, index: int, step: Step, reason: str) -> None:
        logger.debug("Skipping step (%s): %s", reason, step.name)
        self._results.append(ExecutionResult(step=step, skipped=True))
        self._emitter.emit("StepSkipped", step_name=step.name, index=index, reason=reason)

    def _execute_step(self, index: int, step: Step) -> None:
        if not step.enabled:
            self._skip(index, step, "disabled")
            return
        if not evaluate_condition(step.condition, self._context):
            self._skip(index, step, "condition")
            return
        if not step.check(self._context):
            self._skip(index, step, "gate")
            return

        if self._options.dry_run:
            logger.info("[dry-run] Would execute: %s", step.name)
            self._results.append(ExecutionResult(step=step))
            self._emitter.emit("StepCompleted", step_name=step.name, index=index, dry_run=True)
            return

        logger.debug("Executing step: %s", step.name)
        self._emitter.emit("StepStarted", step_name=step.name, index=index)
        start = time.monotonic()
        try:
            step.run(self._context, self._options)
        except Exception as e:
            self._results.append(ExecutionResult(step=step, error=e))
            self._emitter.emit("StepFailed", step_name=step.name, index=index, error=str(e))
            raise StepFailedError(step.name, e) from e

        duration_ms = int((time.monotonic() - start) * 1000)
        self._results.append(ExecutionResult(step=step))
        self._emitter.emit("StepCompleted", step_name=step.name, index=index, duration_ms=duration_ms)
