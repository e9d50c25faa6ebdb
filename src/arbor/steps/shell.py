from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from arbor.steps.base import BaseStep, CommandError, StepError
from arbor.templates.renderer import TemplateRenderError, render_for_context

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext, StepOptions

logger = logging.getLogger(__name__)


def run_shell(shell: str, command: str, *, cwd: str) -> subprocess.CompletedProcess[str]:
    """Run ``command`` through ``shell -c`` with stderr folded into stdout.

    The process environment is inherited unchanged.
    """
    return subprocess.run(
        [shell, "-c", command],
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )


@dataclass(kw_only=True)
class CommandRunStep(BaseStep):
    """Run a shell command verbatim in the worktree, optionally storing its output."""

    name: str = "command.run"
    command: str
    store_as: str = ""
    shell: str = "sh"

    def prepare_command(self, context: ScaffoldContext) -> str:
        return self.command

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        command = self.prepare_command(context)
        logger.debug("Running %s: %s", self.name, command)

        try:
            result = run_shell(self.shell, command, cwd=str(context.worktree_path))
        except OSError as e:
            raise StepError(f"{self.name} failed: {e}") from e

        if result.returncode != 0:
            raise CommandError(self.name, command, result.returncode, result.stdout)

        if self.store_as:
            context.set_var(self.store_as, result.stdout.rstrip())
            logger.debug("Stored output as %s", self.store_as)


@dataclass(kw_only=True)
class BashRunStep(CommandRunStep):
    """Like ``command.run`` but renders ``{{ .Name }}`` placeholders and runs under bash."""

    name: str = "bash.run"
    shell: str = "bash"

    def prepare_command(self, context: ScaffoldContext) -> str:
        try:
            return render_for_context(self.command, context)
        except TemplateRenderError as e:
            raise StepError(f"template replacement failed: {e}") from e
