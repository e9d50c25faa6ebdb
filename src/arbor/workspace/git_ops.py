from __future__ import annotations

import subprocess
from pathlib import Path


class GitError(Exception):
    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git command failed ({returncode}): {' '.join(command)}\n{stderr}")


def run_git(*args: str, cwd: Path) -> str:
    cmd = ["git", *args]
    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise GitError(cmd, result.returncode, result.stderr.strip())
    return result.stdout.strip()


def current_branch(*, cwd: Path) -> str:
    return run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)


def toplevel(*, cwd: Path) -> Path:
    return Path(run_git("rev-parse", "--show-toplevel", cwd=cwd))


def common_dir(*, cwd: Path) -> Path:
    """The shared git directory of a worktree (the bare repository in a bare-clone layout)."""
    return (cwd / run_git("rev-parse", "--git-common-dir", cwd=cwd)).resolve()


def is_git_repo(path: Path) -> bool:
    try:
        run_git("rev-parse", "--is-inside-work-tree", cwd=path)
        return True
    except (GitError, FileNotFoundError):
        return False
