from __future__ import annotations

import typer

from arbor.steps.binary import BINARIES
from arbor.steps.registry import default_registry


def steps() -> None:
    """List the step names usable in arbor.yaml."""
    for name in default_registry().list():
        binary = BINARIES.get(name)
        typer.echo(f"{name}  ({binary})" if binary else name)
