from __future__ import annotations

import logging

from arbor.config.settings import StepConfig
from arbor.models.diagnostics import DiagnosticCollection
from arbor.validation.rules import BINARY_RULES, COMMON_RULES, STEP_RULES, Rule

logger = logging.getLogger(__name__)


class StepConfigError(ValueError):
    def __init__(self, step_name: str, diagnostics: DiagnosticCollection) -> None:
        self.step_name = step_name
        self.diagnostics = diagnostics
        errors = diagnostics.errors
        messages = [f"  [{d.rule}] {d.message}" for d in errors]
        super().__init__(
            f"invalid config for step {step_name!r} ({len(errors)} error(s)):\n" + "\n".join(messages)
        )


class StepValidator:
    """A named list of rules applied together; every failure is reported."""

    def __init__(self, step_name: str, rules: list[Rule] | None = None) -> None:
        self.step_name = step_name
        self.rules: list[Rule] = list(rules or [])

    def add_rule(self, rule: Rule) -> StepValidator:
        self.rules.append(rule)
        return self

    def validate(self, cfg: StepConfig) -> DiagnosticCollection:
        collection = DiagnosticCollection()
        for rule in self.rules:
            for diagnostic in rule(self.step_name, cfg):
                collection.add(diagnostic)
        return collection

    def validate_or_raise(self, cfg: StepConfig) -> DiagnosticCollection:
        collection = self.validate(cfg)
        if collection.has_errors:
            raise StepConfigError(self.step_name, collection)
        for warning in collection.warnings:
            logger.warning("step %s: %s", self.step_name, warning.message)
        return collection


def builtin_validator(step_name: str) -> StepValidator:
    rules = STEP_RULES.get(step_name, BINARY_RULES)
    return StepValidator(step_name, [*rules, *COMMON_RULES])


def validate_step_config(step_name: str, cfg: StepConfig) -> DiagnosticCollection:
    return builtin_validator(step_name).validate_or_raise(cfg)
