from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from arbor.envfile import DEFAULT_ENV_FILE, read_env_file, upsert_env_value
from arbor.steps.base import BaseStep, StepError
from arbor.templates.renderer import TemplateRenderError, render_for_context

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext, StepOptions

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class EnvReadStep(BaseStep):
    """Copy a value from an env file into the context; absent keys store ``""``."""

    name: str = "env.read"
    key: str
    store_as: str = ""
    file: str = ""

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        file = self.file or DEFAULT_ENV_FILE
        value = read_env_file(context.worktree_path, file).get(self.key, "")
        target = self.store_as or self.key
        context.set_var(target, value)
        logger.debug("Read %s from %s into %s", self.key, file, target)


@dataclass(kw_only=True)
class EnvWriteStep(BaseStep):
    name: str = "env.write"
    key: str
    value: str = ""
    file: str = ""

    def run(self, context: ScaffoldContext, options: StepOptions) -> None:
        file = self.file or DEFAULT_ENV_FILE
        try:
            rendered = render_for_context(self.value, context)
        except TemplateRenderError as e:
            raise StepError(f"template replacement failed: {e}") from e

        try:
            upsert_env_value(context.resolve(file), self.key, rendered)
        except OSError as e:
            raise StepError(f"writing {file}: {e}") from e
        logger.debug("Wrote %s=%s to %s", self.key, rendered, file)
