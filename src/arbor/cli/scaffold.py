from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import Callable

import typer
import yaml
from pydantic import ValidationError

from arbor.cli.common import (
    build_interviewer,
    build_prompt_mode,
    configure_logging,
    identify_worktree,
    resolve_site_name,
    select_preset,
)
from arbor.conditions.preflight import PreFlightError
from arbor.config.local_state import LocalStateError
from arbor.config.settings import load_config
from arbor.engine.executor import ScaffoldCancelledError, StepFailedError
from arbor.engine.manager import ScaffoldManager
from arbor.events.dispatcher import EventDispatcher
from arbor.events.observer import StdoutObserver
from arbor.models.results import ExecutionResult
from arbor.steps.registry import UnknownStepError, default_registry
from arbor.validation.validator import StepConfigError

logger = logging.getLogger(__name__)

RUN_ERRORS = (
    PreFlightError,
    StepConfigError,
    UnknownStepError,
    StepFailedError,
    ScaffoldCancelledError,
    LocalStateError,
)


def run_operation(
    operation: str,
    path: Path,
    *,
    preset: str,
    site_name: str,
    dry_run: bool,
    verbose: bool,
    quiet: bool,
    no_interactive: bool,
    force: bool,
    auto_approve: bool,
) -> list[ExecutionResult]:
    configure_logging(verbose)
    if not path.is_dir():
        typer.echo(f"Error: not a directory: {path}")
        raise typer.Exit(code=1)

    worktree = identify_worktree(path)
    try:
        config = load_config(start=worktree.path)
    except (yaml.YAMLError, ValidationError) as e:
        typer.echo(f"Error: invalid arbor.yaml: {e}")
        raise typer.Exit(code=1)
    prompt_mode = build_prompt_mode(no_interactive=no_interactive, force=force)
    interviewer = build_interviewer(auto_approve)

    dispatcher = EventDispatcher()
    if not quiet:
        dispatcher.add_observer(StdoutObserver(verbose=verbose))

    manager = ScaffoldManager(
        registry=default_registry(interviewer=interviewer),
        event_emitter=dispatcher,
    )
    chosen_preset = select_preset(
        manager.presets,
        config,
        worktree.path,
        override=preset,
        prompt_mode=prompt_mode,
        interviewer=interviewer,
    )

    run: Callable[..., list[ExecutionResult]] = (
        manager.run_scaffold if operation == "scaffold" else manager.run_cleanup
    )

    original_handler = signal.getsignal(signal.SIGINT)

    def _sigint_handler(signum: int, frame: object) -> None:
        typer.echo(f"\n[{operation.capitalize()}] Cancel requested, finishing current step...")
        manager.request_cancel()

    signal.signal(signal.SIGINT, _sigint_handler)
    try:
        return run(
            worktree.path,
            config=config,
            branch=worktree.branch,
            repo_name=worktree.repo_name,
            site_name=resolve_site_name(config, worktree, site_name),
            preset=chosen_preset,
            bare_path=worktree.bare_path,
            prompt_mode=prompt_mode,
            dry_run=dry_run,
            verbose=verbose,
            quiet=quiet,
        )
    except RUN_ERRORS as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    finally:
        signal.signal(signal.SIGINT, original_handler)


def scaffold(
    path: Path = typer.Argument(Path("."), help="Worktree to scaffold"),
    preset: str = typer.Option("", "--preset", help="Preset to use instead of the configured or detected one"),
    site_name: str = typer.Option("", "--site-name", help="Site name for templates and database names"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would run without running it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and streamed command output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
    no_interactive: bool = typer.Option(False, "--no-interactive", help="Never prompt"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations"),
    auto_approve: bool = typer.Option(False, "--auto-approve", help="Answer every prompt automatically"),
) -> None:
    """Run the scaffold steps for a worktree."""
    run_operation(
        "scaffold",
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
