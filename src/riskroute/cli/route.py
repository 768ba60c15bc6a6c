"""Route CLI commands: agent routing for tasks and coverage gaps.

Provides:
- ``route task``: route one task (learned router when installed)
- ``route coverage``: coverage-aware routing for a task
- ``route suggest``: coverage gaps under a path
- ``route gaps``: all coverage gaps, grouped by agent
- ``route feedback`` / ``route reset``: learned-router maintenance
"""

from typing import List, Optional

import typer
from rich.table import Table

from ..coverage import CoverageGap, CoverageSummary
from ..exceptions import RiskRouteError
from ..logging_config import get_logger
from ..routing import (
    RoutingFeedback,
    coverage_gaps,
    coverage_route,
    coverage_suggest,
    record_feedback,
    reset_router,
    route_task,
)
from . import route_app
from ._common import console, emit_json, gap_text, project_path, resolve_context

logger = get_logger(__name__)

JSON_OPTION_HELP = "Output in machine-readable JSON format"


def _fail(e: RiskRouteError) -> None:
    logger.error("%s: %s", e.__class__.__name__, e)
    console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(1)


def _gap_table(gaps: List[CoverageGap]) -> Table:
    table = Table(show_header=True, pad_edge=True)
    table.add_column("File", min_width=30)
    table.add_column("Coverage", justify="right")
    table.add_column("Gap")
    table.add_column("Priority", justify="right")
    table.add_column("Agents")
    table.add_column("Reason")
    for gap in gaps:
        table.add_row(
            gap.file_path,
            f"{gap.coverage_percent:.1f}%",
            gap_text(gap.gap_type),
            f"{gap.priority:.0f}",
            ", ".join(gap.suggested_agents),
            gap.reason,
        )
    return table


def _print_summary(summary: CoverageSummary) -> None:
    console.print(
        f"[bold]Coverage:[/bold] {summary.total_files} files, "
        f"line {summary.overall_line_coverage:.1f}%, "
        f"branch {summary.overall_branch_coverage:.1f}%, "
        f"function {summary.overall_function_coverage:.1f}%, "
        f"{summary.files_below_threshold} below {summary.coverage_threshold:.0f}%"
    )


@route_app.command(name="task")
def route_task_cmd(
    ctx: typer.Context,
    task: str = typer.Argument(..., help="Task description"),
    agent: Optional[str] = typer.Option(None, "--agent", "-a", help="Force a specific agent"),
    no_explore: bool = typer.Option(
        False, "--no-explore", help="Ask the learned router not to explore"
    ),
    json_output: bool = typer.Option(False, "--json", help=JSON_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Route a single task to an agent.

    [bold cyan]Examples:[/bold cyan]

      riskroute route task "add input validation to the signup form"

      riskroute route task "fix flaky test" --agent tester
    """
    try:
        context = resolve_context(ctx, verbose=verbose)
    except RiskRouteError as e:
        _fail(e)

    result = route_task(task, context, explore=not no_explore, force_agent=agent)

    if json_output:
        emit_json(result)
        return

    console.print(
        f"[bold]Agent:[/bold] [cyan]{result.agent}[/cyan] "
        f"(confidence {result.confidence:.0%}, {result.method})"
    )
    console.print(f"  [dim]{result.reason}[/dim]")
    if result.exploration_used:
        console.print("  [dim]exploration[/dim]")
    for alt in result.alternatives:
        console.print(f"  alternative: {alt.agent_id} ({alt.confidence:.0%})")


@route_app.command(name="coverage")
def route_coverage_cmd(
    ctx: typer.Context,
    task: str = typer.Argument(..., help="Task description"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", min=0, max=100, help="Coverage threshold (percent)"
    ),
    json_output: bool = typer.Option(False, "--json", help=JSON_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Route a task using the project's coverage report.

    [bold cyan]Examples:[/bold cyan]

      riskroute route coverage "fix login bug"

      riskroute route coverage "refactor billing" --threshold 70 --json
    """
    try:
        context = resolve_context(ctx, verbose=verbose, coverage_threshold=threshold)
    except RiskRouteError as e:
        _fail(e)

    result = coverage_route(task, context, project_path(ctx))

    if json_output:
        emit_json(result)
        return

    routing = result.routing
    console.print(
        f"[bold]Agent:[/bold] [cyan]{routing.primary_agent}[/cyan] "
        f"(confidence {routing.confidence:.0%})"
    )
    console.print(f"  [dim]{routing.reason}[/dim]")
    console.print(f"  [dim]{routing.coverage_impact}[/dim]")
    console.print()
    if result.gaps:
        console.print(_gap_table(result.gaps))
    for suggestion in result.suggestions:
        console.print(f"  - {suggestion}")


@route_app.command(name="suggest")
def route_suggest_cmd(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File or directory to focus on"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Maximum suggestions"),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", min=0, max=100, help="Coverage threshold (percent)"
    ),
    json_output: bool = typer.Option(False, "--json", help=JSON_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Suggest coverage improvements for files under PATH.

    [bold cyan]Examples:[/bold cyan]

      riskroute route suggest src/

      riskroute route suggest src/api --limit 5
    """
    try:
        context = resolve_context(
            ctx, verbose=verbose, coverage_threshold=threshold, suggest_limit=limit
        )
    except RiskRouteError as e:
        _fail(e)

    result = coverage_suggest(path, context, project_path(ctx))

    if json_output:
        emit_json(result)
        return

    _print_summary(result.summary)
    if not result.suggestions:
        console.print("[green]No coverage gaps under this path.[/green]")
        return
    console.print(_gap_table(result.suggestions))


@route_app.command(name="gaps")
def route_gaps_cmd(
    ctx: typer.Context,
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", min=0, max=100, help="Coverage threshold (percent)"
    ),
    json_output: bool = typer.Option(False, "--json", help=JSON_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    List every coverage gap in the project, grouped by agent.

    [bold cyan]Examples:[/bold cyan]

      riskroute route gaps

      riskroute route gaps --json
    """
    try:
        context = resolve_context(ctx, verbose=verbose, coverage_threshold=threshold)
    except RiskRouteError as e:
        _fail(e)

    result = coverage_gaps(context, project_path(ctx))

    if json_output:
        emit_json(result)
        return

    _print_summary(result.summary)
    if not result.gaps:
        console.print("[green]All files meet the coverage threshold.[/green]")
        return
    console.print(_gap_table(result.gaps))
    for agent, files in result.agent_assignments.items():
        console.print(f"[bold]{agent}[/bold]: {len(files)} file(s)")


@route_app.command(name="feedback")
def route_feedback_cmd(
    ctx: typer.Context,
    task_id: str = typer.Option(..., "--task-id", help="Identifier of the routed task"),
    agent: str = typer.Option(..., "--agent", "-a", help="Agent that handled the task"),
    success: bool = typer.Option(True, "--success/--failure", help="Task outcome"),
    quality: float = typer.Option(0.8, "--quality", "-q", help="Result quality, 0-1"),
    time_ms: float = typer.Option(0.0, "--time", help="Execution time in milliseconds"),
    json_output: bool = typer.Option(False, "--json", help=JSON_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Report a task outcome to the learned router.

    [bold cyan]Examples:[/bold cyan]

      riskroute route feedback --task-id t-42 --agent tester --quality 0.9
    """
    try:
        context = resolve_context(ctx, verbose=verbose)
    except RiskRouteError as e:
        _fail(e)

    feedback = RoutingFeedback(
        task_id=task_id,
        agent_id=agent,
        success=success,
        quality=quality,
        execution_time_ms=time_ms,
    )
    recorded = record_feedback(feedback, context)

    if json_output:
        emit_json({"recorded": recorded, "feedback": feedback.clamped()})
        return

    if recorded:
        console.print(f"[green]Feedback recorded for {task_id}[/green]")
    else:
        console.print("[yellow]No learned router available; feedback discarded.[/yellow]")


@route_app.command(name="reset")
def route_reset_cmd(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation"),
    json_output: bool = typer.Option(False, "--json", help=JSON_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """
    Clear all learned routing state.

    [bold cyan]Examples:[/bold cyan]

      riskroute route reset --force
    """
    try:
        context = resolve_context(ctx, verbose=verbose)
    except RiskRouteError as e:
        _fail(e)

    if not force:
        typer.confirm("Reset all learned routing state?", abort=True)

    reset = reset_router(context)

    if json_output:
        emit_json({"reset": reset})
        return

    if reset:
        console.print("[green]Learned router reset.[/green]")
    else:
        console.print("[yellow]No learned router available; nothing to reset.[/yellow]")
