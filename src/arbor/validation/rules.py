from __future__ import annotations

from typing import Callable

from arbor.config.settings import StepConfig
from arbor.models.diagnostics import Diagnostic, Severity

Rule = Callable[[str, StepConfig], list[Diagnostic]]

DATABASE_TYPES = ["mysql", "pgsql", "sqlite"]


def required_field(field_name: str, attribute: str | None = None) -> Rule:
    attribute = attribute or field_name

    def rule(step_name: str, cfg: StepConfig) -> list[Diagnostic]:
        if getattr(cfg, attribute):
            return []
        return [
            Diagnostic(
                rule="required_field",
                severity=Severity.ERROR,
                message=f"required field {field_name!r} is missing",
                step=step_name,
                field=field_name,
                suggestion=f"Add '{field_name}:' to the {step_name} step",
            )
        ]

    return rule


def one_of(field_name: str, allowed: list[str], severity: Severity = Severity.ERROR) -> Rule:
    def rule(step_name: str, cfg: StepConfig) -> list[Diagnostic]:
        value = getattr(cfg, field_name)
        if not value or value in allowed:
            return []
        return [
            Diagnostic(
                rule="one_of",
                severity=severity,
                message=f"field {field_name!r} must be one of {allowed}, got {value!r}",
                step=step_name,
                field=field_name,
            )
        ]

    return rule


def binary_name(step: str, cfg: StepConfig) -> list[Diagnostic]:
    if step:
        return []
    return [
        Diagnostic(
            rule="binary_name",
            severity=Severity.ERROR,
            message="binary step: 'name' is required",
            field="name",
        )
    ]


def store_as_without_command(step: str, cfg: StepConfig) -> list[Diagnostic]:
    if not cfg.store_as or step in ("bash.run", "command.run", "env.read"):
        return []
    return [
        Diagnostic(
            rule="store_as_ignored",
            severity=Severity.WARNING,
            message=f"'store_as' has no effect on {step} steps",
            step=step,
            field="store_as",
        )
    ]


STEP_RULES: dict[str, list[Rule]] = {
    "file.copy": [required_field("from", "from_"), required_field("to")],
    "bash.run": [required_field("command")],
    "command.run": [required_field("command")],
    "env.read": [required_field("key")],
    "env.write": [required_field("key")],
    "db.create": [one_of("type", DATABASE_TYPES, Severity.WARNING)],
    "db.destroy": [one_of("type", DATABASE_TYPES, Severity.WARNING)],
}

BINARY_RULES: list[Rule] = [binary_name]

COMMON_RULES: list[Rule] = [store_as_without_command]
