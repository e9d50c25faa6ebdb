from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path

from arbor.naming.words import sanitize_site_name


@dataclass(frozen=True)
class PromptMode:
    interactive: bool = False
    no_interactive: bool = False
    force: bool = False
    ci: bool = False

    def allow(self) -> bool:
        if self.no_interactive or self.force or self.ci:
            return False
        return self.interactive


@dataclass(frozen=True)
class StepOptions:
    args: list[str] = field(default_factory=list)
    dry_run: bool = False
    verbose: bool = False
    quiet: bool = False
    prompt_mode: PromptMode = field(default_factory=PromptMode)


class ScaffoldContext:
    """Run-scoped state shared by every step of a scaffold or cleanup run.

    Identity fields are fixed at construction. The variable store and the
    database suffix are guarded by a lock; ``snapshot_for_template`` returns
    a detached copy.
    """

    def __init__(
        self,
        worktree_path: Path | str,
        *,
        branch: str = "",
        repo_name: str = "",
        site_name: str = "",
        preset: str = "",
        bare_path: Path | str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._worktree_path = Path(worktree_path).absolute()
        self._branch = branch
        self._repo_name = repo_name
        self._site_name = site_name
        self._preset = preset
        self._bare_path = Path(bare_path) if bare_path else None
        self._env = dict(os.environ if env is None else env)
        self._vars: dict[str, str] = {}
        self._db_suffix = ""
        self._lock = threading.Lock()

    @property
    def worktree_path(self) -> Path:
        return self._worktree_path

    @property
    def branch(self) -> str:
        return self._branch

    @property
    def repo_name(self) -> str:
        return self._repo_name

    @property
    def site_name(self) -> str:
        return self._site_name

    @property
    def preset(self) -> str:
        return self._preset

    @property
    def bare_path(self) -> Path | None:
        return self._bare_path

    @property
    def path(self) -> str:
        return self._worktree_path.name

    @property
    def repo_path(self) -> str:
        return self._worktree_path.parent.name

    @property
    def env(self) -> dict[str, str]:
        return dict(self._env)

    def set_var(self, key: str, value: str) -> None:
        with self._lock:
            self._vars[key] = value

    def get_var(self, key: str, default: str = "") -> str:
        with self._lock:
            return self._vars.get(key, default)

    def has_var(self, key: str) -> bool:
        with self._lock:
            return key in self._vars

    def set_db_suffix(self, suffix: str) -> None:
        with self._lock:
            self._db_suffix = suffix

    def get_db_suffix(self) -> str:
        with self._lock:
            return self._db_suffix

    def snapshot_for_template(self) -> dict[str, str]:
        with self._lock:
            snapshot = {
                "Path": self.path,
                "RepoPath": self.repo_path,
                "RepoName": self._repo_name,
                "SiteName": self._site_name,
                "SanitizedSiteName": sanitize_site_name(self._site_name),
                "Branch": self._branch,
                "DbSuffix": self._db_suffix,
            }
            snapshot.update(self._vars)
            return snapshot

    def resolve(self, relative: str | Path) -> Path:
        return self._worktree_path / relative
