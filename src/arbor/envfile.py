from __future__ import annotations

import os
import stat
import tempfile
import threading
from pathlib import Path

DEFAULT_ENV_FILE = ".env"

_file_locks: dict[str, threading.Lock] = {}
_file_locks_guard = threading.Lock()


def parse_env(content: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines, skipping blanks and ``#`` comments.

    Keys and values are whitespace-trimmed; quotes are kept verbatim.
    """
    result: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        result[key.strip()] = value.strip()
    return result


def read_env_file(worktree_path: Path | str, filename: str = DEFAULT_ENV_FILE) -> dict[str, str]:
    """Read an env file relative to a worktree. Unreadable or missing files yield ``{}``."""
    try:
        content = Path(worktree_path, filename).read_text()
    except (OSError, UnicodeDecodeError):
        return {}
    return parse_env(content)


def file_lock(path: Path | str) -> threading.Lock:
    """Return the process-wide lock for ``path``, keyed by its canonical absolute path."""
    key = os.path.realpath(os.path.abspath(path))
    with _file_locks_guard:
        lock = _file_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _file_locks[key] = lock
        return lock


def upsert_env_value(path: Path, key: str, value: str) -> None:
    """Set ``key=value`` in the env file at ``path``, creating it if needed.

    The first line starting with ``key=`` or ``key `` is replaced and any later
    ones removed; otherwise the entry is appended. The new content is written to a temp file in the same
    directory, fsynced and renamed over the original, keeping its permissions.
    """
    entry = f"{key}={value}"

    with file_lock(path):
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            mode = stat.S_IMODE(path.stat().st_mode)
            content = path.read_text()
            exists = True
        except FileNotFoundError:
            mode = 0o644
            content = ""
            exists = False

        if not exists:
            new_content = entry + "\n"
        else:
            lines: list[str] = []
            replaced = False
            for line in content.split("\n"):
                if line.startswith(f"{key}=") or line.startswith(f"{key} "):
                    # later duplicates are dropped so exactly one entry remains
                    if not replaced:
                        lines.append(entry)
                        replaced = True
                    continue
                lines.append(line)

            if replaced:
                new_content = "\n".join(lines)
            else:
                new_content = content
                if new_content and not new_content.endswith("\n"):
                    new_content += "\n"
                new_content += entry
            if not new_content.endswith("\n"):
                new_content += "\n"

        _atomic_write(path, new_content, mode)


def _atomic_write(path: Path, content: str, mode: int) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
