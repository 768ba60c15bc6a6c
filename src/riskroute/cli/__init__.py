"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="riskroute",
    help="riskroute - change-risk assessment and coverage-aware task routing",
    add_completion=False,
    rich_markup_mode="rich",
)

route_app = typer.Typer(
    help="Route tasks to agents using coverage gaps and task keywords",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
app.add_typer(route_app, name="route")


@app.callback(invoke_without_command=True, no_args_is_help=True)
def main(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Repository / project root (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Assess change risk and route work using test-coverage gaps.

    [bold cyan]Examples:[/bold cyan]

      riskroute diff

      riskroute diff main..feature --json

      riskroute route coverage "fix login bug"

      riskroute route gaps
    """
    ctx.ensure_object(dict)
    ctx.obj["path"] = Path(path) if path else Path.cwd()
    ctx.obj["config"] = config

    if version:
        console.print(f"[bold cyan]riskroute[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


# Import subcommands to register them
from .diff import diff_cmd as _diff_cmd  # noqa: F401, E402
from .route import route_task_cmd as _route_task_cmd  # noqa: F401, E402

__all__ = ["app", "main", "route_app"]
