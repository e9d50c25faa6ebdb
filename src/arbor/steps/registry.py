from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from arbor.config.settings import StepConfig
from arbor.steps.base import Step
from arbor.steps.binary import BINARIES, BinaryStep
from arbor.steps.database import DbCreateStep, DbDestroyStep
from arbor.steps.env import EnvReadStep, EnvWriteStep
from arbor.steps.file_copy import FileCopyStep
from arbor.steps.shell import BashRunStep, CommandRunStep
from arbor.validation.validator import StepValidator, builtin_validator

if TYPE_CHECKING:
    from arbor.database.client import DatabaseClientFactory
    from arbor.interviewer.base import Interviewer

logger = logging.getLogger(__name__)

StepFactory = Callable[[StepConfig], Step]


class UnknownStepError(ValueError):
    def __init__(self, name: str, available: list[str]) -> None:
        self.step_name = name
        self.available = available
        super().__init__(f"unknown step {name!r} (available: {', '.join(available)})")


class StepRegistry:
    def __init__(self) -> None:
        self._factories: dict[str, StepFactory] = {}
        self._validators: dict[str, StepValidator] = {}

    def register(
        self, name: str, factory: StepFactory, validator: StepValidator | None = None
    ) -> None:
        if name in self._factories:
            raise ValueError(f"step {name!r} is already registered")
        self._factories[name] = factory
        if validator is not None:
            self._validators[name] = validator

    def is_registered(self, name: str) -> bool:
        return name in self._factories

    def create(self, name: str, cfg: StepConfig) -> Step:
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownStepError(name, self.list())

        validator = self._validators.get(name) or builtin_validator(name)
        validator.validate_or_raise(cfg)
        return factory(cfg)

    def list(self) -> list[str]:
        return sorted(self._factories)


def _common(cfg: StepConfig) -> dict[str, Any]:
    return {"enabled": cfg.is_enabled(), "condition": dict(cfg.condition)}


def _binary_factory(name: str, binary: str) -> StepFactory:
    def factory(cfg: StepConfig) -> Step:
        return BinaryStep(name=name, binary=binary, args=list(cfg.args), **_common(cfg))

    return factory


def default_registry(
    client_factory: DatabaseClientFactory | None = None,
    interviewer: Interviewer | None = None,
) -> StepRegistry:
    """A registry holding every built-in step.

    ``client_factory`` and ``interviewer`` are handed to the database steps.
    """
    db_kwargs: dict[str, Any] = {}
    if client_factory is not None:
        db_kwargs["client_factory"] = client_factory

    registry = StepRegistry()
    registry.register(
        "file.copy",
        lambda cfg: FileCopyStep(source=cfg.from_, destination=cfg.to, **_common(cfg)),
    )
    registry.register(
        "bash.run",
        lambda cfg: BashRunStep(command=cfg.command, store_as=cfg.store_as, **_common(cfg)),
    )
    registry.register(
        "command.run",
        lambda cfg: CommandRunStep(command=cfg.command, store_as=cfg.store_as, **_common(cfg)),
    )
    registry.register(
        "env.read",
        lambda cfg: EnvReadStep(key=cfg.key, store_as=cfg.store_as, file=cfg.file, **_common(cfg)),
    )
    registry.register(
        "env.write",
        lambda cfg: EnvWriteStep(key=cfg.key, value=cfg.value, file=cfg.file, **_common(cfg)),
    )
    registry.register(
        "db.create",
        lambda cfg: DbCreateStep(args=list(cfg.args), type=cfg.type, **db_kwargs, **_common(cfg)),
    )
    registry.register(
        "db.destroy",
        lambda cfg: DbDestroyStep(
            args=list(cfg.args), type=cfg.type, interviewer=interviewer, **db_kwargs, **_common(cfg)
        ),
    )
    for name, binary in BINARIES.items():
        registry.register(name, _binary_factory(name, binary))

    logger.debug("Registered %d steps", len(registry.list()))
    return registry
