from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from arbor.config.settings import CleanupStepConfig, StepConfig


@runtime_checkable
class Preset(Protocol):
    name: str

    def detect(self, path: Path) -> bool: ...

    def default_steps(self) -> list[StepConfig]: ...

    def cleanup_steps(self) -> list[CleanupStepConfig]: ...


def step(name: str, **fields: object) -> StepConfig:
    return StepConfig.model_validate({"name": name, **fields})
