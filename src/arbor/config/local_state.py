"""Per-worktree state kept in ``.arbor.local``.

The file is YAML. Only ``db_suffix`` is interpreted; any other keys are
carried through reads and writes untouched. Concurrent runs against the same
worktree are not supported: writes are plain read-modify-write.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from arbor.config.settings import CONFIG_FILENAME

logger = logging.getLogger(__name__)

LOCAL_STATE_FILENAME = ".arbor.local"


class LocalStateError(Exception):
    pass


class LocalState(BaseModel):
    db_suffix: str = ""

    model_config = {"extra": "allow"}


def local_state_path(worktree_path: Path) -> Path:
    return Path(worktree_path) / LOCAL_STATE_FILENAME


def _read_raw(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except (OSError, yaml.YAMLError) as e:
        raise LocalStateError(f"reading {path}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise LocalStateError(f"{path}: expected a mapping, got {type(raw).__name__}")
    return raw


def read_local_state(worktree_path: Path) -> LocalState:
    raw = _read_raw(local_state_path(worktree_path))
    if raw.get("db_suffix") is None:
        raw["db_suffix"] = ""
    else:
        raw["db_suffix"] = str(raw["db_suffix"])
    return LocalState.model_validate(raw)


def write_local_state(worktree_path: Path, state: LocalState) -> None:
    path = local_state_path(worktree_path)
    raw = _read_raw(path)
    raw.update(state.model_dump())
    try:
        with open(path, "w") as f:
            yaml.safe_dump(raw, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise LocalStateError(f"writing {path}: {e}") from e


def migrate_db_suffix_to_local(worktree_path: Path) -> bool:
    """Move a legacy ``db_suffix`` from the worktree's ``arbor.yaml`` into local state.

    Returns True when the project file was rewritten.
    """
    config_path = Path(worktree_path) / CONFIG_FILENAME
    if not config_path.is_file():
        return False

    try:
        with open(config_path) as f:
            project = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LocalStateError(f"reading {config_path}: {e}") from e

    if not isinstance(project, dict) or "db_suffix" not in project:
        return False

    legacy_suffix = str(project.pop("db_suffix") or "")
    state = read_local_state(worktree_path)
    if legacy_suffix and not state.db_suffix:
        state.db_suffix = legacy_suffix
        write_local_state(worktree_path, state)
        logger.debug("Migrated db_suffix %s to %s", legacy_suffix, LOCAL_STATE_FILENAME)

    with open(config_path, "w") as f:
        yaml.safe_dump(project, f, default_flow_style=False, sort_keys=False)
    return True
