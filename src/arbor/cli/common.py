from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from arbor.config.settings import ArborConfig
from arbor.interviewer.base import Interviewer
from arbor.interviewer.models import Option, Question, QuestionType
from arbor.models.context import PromptMode
from arbor.presets.catalog import PresetCatalog
from arbor.workspace import git_ops

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_prompt_mode(*, no_interactive: bool, force: bool) -> PromptMode:
    return PromptMode(
        interactive=sys.stdin.isatty(),
        no_interactive=no_interactive,
        force=force,
        ci=bool(os.environ.get("CI")),
    )


@dataclass
class WorktreeIdentity:
    path: Path
    branch: str = ""
    repo_name: str = ""
    bare_path: Path | None = None


def identify_worktree(path: Path) -> WorktreeIdentity:
    """Branch, project name and shared git dir for ``path``; blanks outside a git checkout."""
    path = path.resolve()
    identity = WorktreeIdentity(path=path, repo_name=path.parent.name)
    if not git_ops.is_git_repo(path):
        return identity
    try:
        identity.branch = git_ops.current_branch(cwd=path)
        identity.bare_path = git_ops.common_dir(cwd=path)
    except git_ops.GitError as e:
        logger.debug("Could not read git metadata for %s: %s", path, e)
    return identity


def resolve_site_name(config: ArborConfig, identity: WorktreeIdentity, override: str = "") -> str:
    if override:
        return override
    if config.site_name and identity.branch in ("", config.default_branch):
        return config.site_name
    return identity.path.name


def select_preset(
    catalog: PresetCatalog,
    config: ArborConfig,
    path: Path,
    *,
    override: str,
    prompt_mode: PromptMode,
    interviewer: Interviewer,
) -> str:
    """Pick the preset: explicit option, then config, then detection, then a prompt."""
    preset = override or config.preset or catalog.detect(path)
    if preset or not prompt_mode.allow():
        return preset

    suggested = catalog.suggest(path)
    names = [suggested, *(n for n in catalog.available() if n != suggested)]
    answer = interviewer.ask(
        Question(
            text="No preset detected. Which preset should be used?",
            type=QuestionType.MULTIPLE_CHOICE,
            options=[Option(key=n, label=n) for n in names],
            stage="scaffold",
        )
    )
    if answer.selected_option is not None:
        return answer.selected_option.key
    return ""


def build_interviewer(auto_approve: bool) -> Interviewer:
    if auto_approve:
        from arbor.interviewer.auto_approve import AutoApproveInterviewer

        return AutoApproveInterviewer()
    from arbor.interviewer.console import ConsoleInterviewer

    return ConsoleInterviewer()
