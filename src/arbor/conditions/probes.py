"""Host probes used by condition trees.

Every probe returns a bool and never raises: I/O problems count as False.
Argument shapes follow the YAML forms accepted by each condition key.
"""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from arbor.envfile import DEFAULT_ENV_FILE, read_env_file

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext


def string_values(value: Any, map_key: str) -> list[str]:
    """Flatten a scalar, list, or ``{map_key: value}`` argument into a list of strings."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    if isinstance(value, dict):
        item = value.get(map_key)
        if isinstance(item, str):
            return [item]
    return []


def current_os() -> str:
    """Return the platform name in the conventional short form (linux, darwin, windows)."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def file_exists(worktree_path: Path, value: Any) -> bool:
    paths = string_values(value, "file")
    if not paths:
        return False
    return all(_exists(worktree_path / p) for p in paths)


def _exists(path: Path) -> bool:
    try:
        path.stat()
    except (OSError, ValueError):
        return False
    return True


def file_contains(worktree_path: Path, value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    file = value.get("file")
    pattern = value.get("pattern")
    if not isinstance(file, str) or not isinstance(pattern, str) or not file or not pattern:
        return False
    try:
        data = (worktree_path / file).read_bytes()
    except OSError:
        return False
    return pattern.encode() in data


def file_has_script(worktree_path: Path, value: Any) -> bool:
    script = string_values(value, "name")
    if not script or not script[0]:
        return False
    try:
        data = (worktree_path / "package.json").read_bytes()
    except OSError:
        return False
    return f'"{script[0]}"'.encode() in data


def command_exists(value: Any) -> bool:
    commands = string_values(value, "command")
    if not commands:
        return False
    return all(shutil.which(c) is not None for c in commands)


def os_matches(value: Any) -> bool:
    if isinstance(value, str):
        candidates = [value]
    elif isinstance(value, (list, tuple)):
        candidates = [v for v in value if isinstance(v, str)]
    else:
        return False
    name = current_os()
    return any(c.lower() == name for c in candidates)


def env_exists(value: Any) -> bool:
    names = string_values(value, "env")
    if not names:
        return False
    return all(n in os.environ for n in names)


def env_not_exists(value: Any) -> bool:
    return not env_exists(value)


def env_file_contains(worktree_path: Path, value: Any) -> bool:
    if isinstance(value, str):
        file, key = DEFAULT_ENV_FILE, value
    elif isinstance(value, dict):
        file = value.get("file") or DEFAULT_ENV_FILE
        key = value.get("key")
    else:
        return False
    if not isinstance(file, str) or not isinstance(key, str) or not key:
        return False
    return read_env_file(worktree_path, file).get(key, "") != ""


def env_file_missing(worktree_path: Path, value: Any) -> bool:
    return not env_file_contains(worktree_path, value)


def context_var(context: ScaffoldContext, value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    key = value.get("key")
    if not isinstance(key, str) or not key:
        return False
    expected = value.get("value", "")
    return context.get_var(key) == ("" if expected is None else str(expected))
