from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arbor.steps.base import BaseStep, CommandError, StepError
from arbor.templates.renderer import TemplateRenderError, render

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext, StepOptions

logger = logging.getLogger(__name__)

# Step name -> executable (plus any fixed leading arguments).
BINARIES: dict[str, str] = {
    "php": "php",
    "php.composer": "composer",
    "php.laravel": "php artisan",
    "node.npm": "npm",
    "node.yarn": "yarn",
    "node.pnpm": "pnpm",
    "node.bun": "bun",
    "herd": "herd",
}


@dataclass(kw_only=True)
class BinaryStep(BaseStep):
    binary: str
    args: list[str] = field(default_factory=list)

    @property
    def executable(self) -> str:
        parts = self.binary.split()
        return parts[0] if parts else ""

    def check(self, context: ScaffoldContext) -> bool:
        return bool(self.executable) and shutil.which(self.executable) is not None

    def argv(self, context: ScaffoldContext, extra: list[str] | None = None) -> list[str]:
        variables = context.snapshot_for_template()
        try:
            rendered = [render(arg, variables) for arg in [*self.args, *(extra or [])]]
        except TemplateRenderError as e:
            raise StepError(f"template replacement failed: {e}") from e
        return [*self.binary.split(), *rendered]

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        argv = self.argv(context, options.args)
        command = shlex.join(argv)
        logger.debug("Running: %s", command)

        stream = options.verbose and not options.quiet
        try:
            result = subprocess.run(
                argv,
                cwd=str(context.worktree_path),
                stdout=None if stream else subprocess.PIPE,
                stderr=None if stream else subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise StepError(f"{self.name} failed: {e}") from e

        if result.returncode != 0:
            raise CommandError(self.name, command, result.returncode, result.stdout or "")
