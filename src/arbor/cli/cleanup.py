from __future__ import annotations

from pathlib import Path

import typer

from arbor.cli.scaffold import run_operation


def cleanup(
    path: Path = typer.Argument(Path("."), help="Worktree to clean up"),
    preset: str = typer.Option("", "--preset", help="Preset to use instead of the configured or detected one"),
    site_name: str = typer.Option("", "--site-name", help="Site name for templates"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would run without running it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and streamed command output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
    no_interactive: bool = typer.Option(False, "--no-interactive", help="Never prompt"),
    force: bool = typer.Option(False, "--force", "-f", help="Drop databases without confirmation"),
    auto_approve: bool = typer.Option(False, "--auto-approve", help="Answer every prompt automatically"),
) -> None:
    """Run the cleanup steps for a worktree (before it is removed)."""
    run_operation(
        "cleanup",
        path,
        preset=preset,
        site_name=site_name,
        dry_run=dry_run,
        verbose=verbose,
        quiet=quiet,
        no_interactive=no_interactive,
        force=force,
        auto_approve=auto_approve,
    )
