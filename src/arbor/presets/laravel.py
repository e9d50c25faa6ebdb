from __future__ import annotations

from pathlib import Path

from arbor.config.settings import CleanupStepConfig, StepConfig
from arbor.presets.base import step


class LaravelPreset:
    name = "laravel"

    def detect(self, path: Path) -> bool:
        return (Path(path) / "artisan").is_file()

    def default_steps(self) -> list[StepConfig]:
        return [
            step("php.composer", args=["install"], condition={"file_exists": "composer.json"}),
            step(
                "file.copy",
                **{"from": ".env.example", "to": ".env"},
                condition={"not": {"file_exists": ".env"}},
            ),
            step(
                "php.laravel",
                args=["key:generate", "--no-interaction"],
                condition={"env_file_missing": "APP_KEY"},
            ),
            step("db.create", condition={"env_file_contains": "DB_CONNECTION"}),
            step(
                "env.write",
                key="DB_DATABASE",
                value="{{ .SanitizedSiteName }}_{{ .DbSuffix }}",
                condition={
                    "env_file_contains": "DB_CONNECTION",
                    "not": {"file_contains": {"file": ".env", "pattern": "DB_CONNECTION=sqlite"}},
                },
            ),
            step(
                "php.laravel",
                args=["migrate:fresh", "--seed", "--no-interaction"],
                condition={"env_file_contains": "DB_CONNECTION"},
            ),
            step("node.npm", args=["ci"], condition={"file_exists": "package-lock.json"}),
            step(
                "node.npm",
                args=["run", "build"],
                condition={"file_exists": "package-lock.json", "file_has_script": "build"},
            ),
            step("php.laravel", args=["storage:link", "--no-interaction"]),
            step("herd", args=["link", "--secure", "{{ .SiteName }}"], condition={"command_exists": "herd"}),
        ]

    def cleanup_steps(self) -> list[CleanupStepConfig]:
        return [
            CleanupStepConfig(name="herd", condition={"command_exists": "herd"}),
            CleanupStepConfig(name="db.destroy"),
        ]
