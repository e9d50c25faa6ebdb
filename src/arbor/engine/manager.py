from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from arbor.conditions.preflight import PreFlightError, run_preflight
from arbor.config.local_state import LocalState, migrate_db_suffix_to_local, read_local_state, write_local_state
from arbor.config.settings import ArborConfig, CleanupStepConfig, StepConfig
from arbor.engine.executor import StepExecutor
from arbor.events.dispatcher import NullEmitter
from arbor.models.context import PromptMode, ScaffoldContext, StepOptions
from arbor.naming import words
from arbor.presets.catalog import PresetCatalog
from arbor.steps.registry import StepRegistry, default_registry

if TYPE_CHECKING:
    from arbor.events.dispatcher import EventEmitter
    from arbor.models.results import ExecutionResult
    from arbor.steps.base import Step

logger = logging.getLogger(__name__)

# Cleanup steps that always run with fixed arguments.
CLEANUP_ARGS: dict[str, list[str]] = {
    "herd": ["unlink"],
}


def cleanup_step_config(cleanup: CleanupStepConfig) -> StepConfig:
    """Turn a cleanup entry into a full step config.

    Only the step name survives, plus ``condition.command`` as the command.
    """
    cfg = StepConfig(name=cleanup.name, args=list(CLEANUP_ARGS.get(cleanup.name, [])))
    command = cleanup.condition.get("command")
    if isinstance(command, str):
        cfg.command = command
    return cfg


class ScaffoldManager:
    def __init__(
        self,
        registry: StepRegistry | None = None,
        presets: PresetCatalog | None = None,
        event_emitter: EventEmitter | None = None,
    ) -> None:
        self._registry = registry or default_registry()
        self._presets = presets or PresetCatalog()
        self._emitter = event_emitter or NullEmitter()
        self._executor: StepExecutor | None = None

    @property
    def presets(self) -> PresetCatalog:
        return self._presets

    def request_cancel(self) -> None:
        if self._executor is not None:
            self._executor.request_cancel()

    def resolve_preset(self, config: ArborConfig, worktree_path: Path, preset: str = "") -> str:
        return preset or config.preset or self._presets.detect(worktree_path)

    def scaffold_steps(self, config: ArborConfig, preset_name: str) -> list[Step]:
        step_configs: list[StepConfig] = []
        preset = self._presets.get(preset_name) if preset_name else None
        if preset is not None:
            step_configs.extend(preset.default_steps())
        if config.scaffold.override:
            step_configs = list(config.scaffold.steps)
        else:
            step_configs.extend(config.scaffold.steps)
        return [self._registry.create(cfg.name, cfg) for cfg in step_configs]

    def cleanup_steps(self, config: ArborConfig, preset_name: str) -> list[Step]:
        entries: list[CleanupStepConfig] = []
        preset = self._presets.get(preset_name) if preset_name else None
        if preset is not None:
            entries.extend(preset.cleanup_steps())
        entries.extend(config.cleanup.steps)
        return [self._registry.create(entry.name, cleanup_step_config(entry)) for entry in entries]

    def run_scaffold(
        self,
        worktree_path: Path | str,
        *,
        config: ArborConfig | None = None,
        branch: str = "",
        repo_name: str = "",
        site_name: str = "",
        preset: str = "",
        bare_path: Path | str | None = None,
        prompt_mode: PromptMode | None = None,
        dry_run: bool = False,
        verbose: bool = False,
        quiet: bool = False,
    ) -> list[ExecutionResult]:
        config = config or ArborConfig()
        worktree = Path(worktree_path).absolute()
        preset_name = self.resolve_preset(config, worktree, preset)
        context = ScaffoldContext(
            worktree,
            branch=branch,
            repo_name=repo_name,
            site_name=site_name,
            preset=preset_name,
            bare_path=bare_path,
        )

        pre_flight = config.scaffold.pre_flight
        try:
            run_preflight(pre_flight.condition if pre_flight else None, context)
        except PreFlightError as e:
            self._emitter.emit("PreFlightFailed", worktree_path=str(worktree), error=str(e))
            raise

        if not dry_run and migrate_db_suffix_to_local(worktree):
            logger.debug("Moved db_suffix out of the worktree config")

        state = read_local_state(worktree)
        if state.db_suffix:
            context.set_db_suffix(state.db_suffix)
        else:
            suffix = words.generate_suffix()
            context.set_db_suffix(suffix)
            if not dry_run:
                write_local_state(worktree, LocalState(db_suffix=suffix))
            logger.debug("Generated db suffix %s", suffix)

        steps = self.scaffold_steps(config, preset_name)
        options = StepOptions(
            dry_run=dry_run, verbose=verbose, quiet=quiet, prompt_mode=prompt_mode or PromptMode()
        )
        return self._execute("scaffold", steps, context, options, preset_name)

    def run_cleanup(
        self,
        worktree_path: Path | str,
        *,
        config: ArborConfig | None = None,
        branch: str = "",
        repo_name: str = "",
        site_name: str = "",
        preset: str = "",
        bare_path: Path | str | None = None,
        prompt_mode: PromptMode | None = None,
        dry_run: bool = False,
        verbose: bool = False,
        quiet: bool = False,
    ) -> list[ExecutionResult]:
        config = config or ArborConfig()
        worktree = Path(worktree_path).absolute()
        preset_name = self.resolve_preset(config, worktree, preset)
        context = ScaffoldContext(
            worktree,
            branch=branch,
            repo_name=repo_name,
            site_name=site_name,
            preset=preset_name,
            bare_path=bare_path,
        )

        steps = self.cleanup_steps(config, preset_name)
        options = StepOptions(
            dry_run=dry_run, verbose=verbose, quiet=quiet, prompt_mode=prompt_mode or PromptMode()
        )
        return self._execute("cleanup", steps, context, options, preset_name)

    def _execute(
        self,
        operation: str,
        steps: list[Step],
        context: ScaffoldContext,
        options: StepOptions,
        preset_name: str,
    ) -> list[ExecutionResult]:
        worktree = str(context.worktree_path)
        self._emitter.emit(
            "ScaffoldStarted",
            operation=operation,
            worktree_path=worktree,
            preset=preset_name,
            step_count=len(steps),
        )
        executor = StepExecutor(steps, context, options, event_emitter=self._emitter)
        self._executor = executor
        start = time.monotonic()
        try:
            results = executor.execute()
        except Exception as e:
            self._emitter.emit("ScaffoldFailed", operation=operation, worktree_path=worktree, error=str(e))
            raise
        finally:
            self._executor = None

        skipped = sum(1 for r in results if r.skipped)
        self._emitter.emit(
            "ScaffoldCompleted",
            operation=operation,
            worktree_path=worktree,
            executed=len(results) - skipped,
            skipped=skipped,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return results
