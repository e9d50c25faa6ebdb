from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext, StepOptions


class StepError(Exception):
    pass


class CommandError(StepError):
    def __init__(self, step_name: str, command: str, returncode: int, output: str) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"{step_name} failed: exit status {returncode}"
        if output.strip():
            message += f"\n{output.rstrip()}"
        super().__init__(message)


@runtime_checkable
class Step(Protocol):
    name: str
    enabled: bool
    condition: dict[str, Any]

    def check(self, context: ScaffoldContext) -> bool: ...

    def run(self, context: ScaffoldContext, options: StepOptions) -> None: ...


@dataclass(kw_only=True)
class BaseStep:
    """Fields every step carries from its config: the on/off switch and the condition tree.

    ``check`` is the step's own gate, separate from ``condition``.
    """

    name: str
    enabled: bool = True
    condition: dict[str, Any] = field(default_factory=dict)

    def check(self, context: ScaffoldContext) -> bool:
        return True

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        raise NotImplementedError
