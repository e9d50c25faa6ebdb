import typer

from arbor.cli.cleanup import cleanup as cleanup_command
from arbor.cli.presets import presets as presets_command
from arbor.cli.scaffold import scaffold as scaffold_command
from arbor.cli.steps import steps as steps_command

app = typer.Typer(name="arbor", help="Per-worktree scaffold and cleanup")
app.command(name="scaffold")(scaffold_command)
app.command(name="cleanup")(cleanup_command)
app.command(name="steps")(steps_command)
app.command(name="presets")(presets_command)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


if __name__ == "__main__":
    app()
