from __future__ import annotations

from pathlib import Path

from arbor.config.settings import CleanupStepConfig, StepConfig
from arbor.presets.base import step


class PhpPreset:
    """Plain Composer project: install dependencies and nothing else."""

    name = "php"

    def detect(self, path: Path) -> bool:
        return (Path(path) / "composer.json").is_file()

    def default_steps(self) -> list[StepConfig]:
        return [
            step("php.composer", args=["install"], condition={"file_exists": "composer.json"}),
        ]

    def cleanup_steps(self) -> list[CleanupStepConfig]:
        return []
