from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from arbor.steps.base import BaseStep, StepError

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext, StepOptions

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class FileCopyStep(BaseStep):
    """Copy ``from`` to ``to`` inside the worktree. Paths are used verbatim, not templated."""

    name: str = "file.copy"
    source: str
    destination: str

    def check(self, context: ScaffoldContext) -> bool:
        return context.resolve(self.source).exists()

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        from_path = context.resolve(self.source)
        to_path = context.resolve(self.destination)
        logger.debug("Copying %s to %s", self.source, self.destination)

        try:
            data = from_path.read_bytes()
        except OSError as e:
            raise StepError(f"reading source file {from_path}: {e}") from e

        try:
            to_path.write_bytes(data)
            os.chmod(to_path, 0o644)
        except OSError as e:
            raise StepError(f"writing destination file {to_path}: {e}") from e
