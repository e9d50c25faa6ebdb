from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from arbor.steps.base import Step


@dataclass
class ExecutionResult:
    step: Step
    error: Exception | None = None
    skipped: bool = False

    @property
    def name(self) -> str:
        return self.step.name
