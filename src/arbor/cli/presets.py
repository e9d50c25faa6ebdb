from __future__ import annotations

from pathlib import Path

import typer

from arbor.presets.catalog import PresetCatalog


def presets(
    path: Path = typer.Argument(Path("."), help="Directory to run preset detection against"),
    show_steps: bool = typer.Option(False, "--steps", help="Also list each preset's default steps"),
) -> None:
    """List built-in presets and which one matches PATH."""
    catalog = PresetCatalog()
    detected = catalog.detect(path.resolve())
    for name in catalog.available():
        marker = " (detected)" if name == detected else ""
        typer.echo(f"{name}{marker}")
        if not show_steps:
            continue
        preset = catalog.get(name)
        if preset is None:
            continue
        for cfg in preset.default_steps():
            args = " ".join(cfg.args)
            typer.echo(f"  - {cfg.name} {args}".rstrip())
        for entry in preset.cleanup_steps():
            typer.echo(f"  - cleanup: {entry.name}")
