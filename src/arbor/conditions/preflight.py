from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from arbor.conditions.evaluator import evaluate_condition
from arbor.conditions.probes import string_values

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext


class PreFlightError(Exception):
    def __init__(
        self,
        missing_env: list[str] | None = None,
        missing_commands: list[str] | None = None,
        missing_files: list[str] | None = None,
        file_errors: list[str] | None = None,
    ) -> None:
        self.missing_env = missing_env or []
        self.missing_commands = missing_commands or []
        self.missing_files = missing_files or []
        self.file_errors = file_errors or []
        super().__init__(self._format())

    def _format(self) -> str:
        groups = [
            ("Missing environment variables", self.missing_env),
            ("Missing commands", self.missing_commands),
            ("Missing files", self.missing_files),
            ("File check errors", self.file_errors),
        ]
        parts = [
            f"{title}:\n" + "\n".join(f"  - {item}" for item in items)
            for title, items in groups
            if items
        ]
        if not parts:
            return "pre-flight checks failed"
        return (
            "pre-flight checks failed:\n\n"
            + "\n\n".join(parts)
            + "\n\nPlease resolve these issues and try again"
        )


@dataclass
class PreFlightValues:
    envs: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


def collect_values(condition: Any, values: PreFlightValues | None = None) -> PreFlightValues:
    """Depth-first walk collecting every env/command/file named in the tree, ``not`` included."""
    values = values if values is not None else PreFlightValues()
    if isinstance(condition, dict):
        for key, value in condition.items():
            if key == "not":
                collect_values(value, values)
            elif key == "env_exists":
                values.envs.extend(string_values(value, "env"))
            elif key == "command_exists":
                values.commands.extend(string_values(value, "command"))
            elif key == "file_exists":
                values.files.extend(string_values(value, "file"))
    elif isinstance(condition, (list, tuple)):
        for item in condition:
            collect_values(item, values)
    return values


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def build_preflight_error(condition: Any, context: ScaffoldContext) -> PreFlightError:
    values = collect_values(condition)

    missing_env = [name for name in _unique(values.envs) if name not in os.environ]
    missing_commands = [name for name in _unique(values.commands) if shutil.which(name) is None]

    missing_files: list[str] = []
    file_errors: list[str] = []
    for path in _unique(values.files):
        try:
            context.resolve(path).stat()
        except FileNotFoundError:
            missing_files.append(path)
        except OSError as e:
            file_errors.append(f"{path}: {e}")

    return PreFlightError(
        missing_env=missing_env,
        missing_commands=missing_commands,
        missing_files=missing_files,
        file_errors=file_errors,
    )


def run_preflight(condition: dict[str, Any] | None, context: ScaffoldContext) -> None:
    """Raise PreFlightError when ``condition`` does not hold for ``context``."""
    if not condition:
        return
    if not evaluate_condition(condition, context):
        raise build_preflight_error(condition, context)
