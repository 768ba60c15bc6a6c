"""Diff CLI command: risk, classification and reviewers for a change set."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..diff import DiffAnalysisResult, analyze_diff
from ..exceptions import RiskRouteError
from ..logging_config import get_logger
from . import app
from ._common import console, emit_json, project_path, resolve_context, risk_text

logger = get_logger(__name__)


def _print_risk(result: DiffAnalysisResult, verbose: bool) -> None:
    risk = result.risk
    breakdown = risk.breakdown
    console.print(
        f"[bold]Overall risk:[/bold] {risk_text(risk.overall)} "
        f"(score {risk.score}/100, {breakdown.file_count} files, "
        f"{breakdown.total_changes} lines changed, test coverage {breakdown.test_coverage})"
    )
    for concern in breakdown.security_concerns:
        console.print(f"  [red]![/red] {concern}")
    for change in breakdown.breaking_changes:
        console.print(f"  [yellow]![/yellow] {change}")
    console.print()

    table = Table(show_header=True, pad_edge=True)
    table.add_column("File", min_width=30)
    table.add_column("Risk")
    table.add_column("Score", justify="right")
    table.add_column("+/-", justify="right")
    if verbose:
        table.add_column("Reasons")

    changes = {f.path: f for f in result.files}
    for file_risk in sorted(result.file_risks, key=lambda r: r.score, reverse=True):
        f = changes.get(file_risk.path)
        delta = f"+{f.additions}/-{f.deletions}" if f else ""
        row = [file_risk.path, risk_text(file_risk.risk), str(file_risk.score), delta]
        if verbose:
            row.append("; ".join(file_risk.reasons) or "[dim]-[/dim]")
        table.add_row(*row)
    console.print(table)
    console.print()


def _print_classification(result: DiffAnalysisResult) -> None:
    classification = result.classification
    label = classification.category
    if classification.subcategory:
        label += f" / {classification.subcategory}"
    console.print(
        f"[bold]Classification:[/bold] [cyan]{label}[/cyan] "
        f"(confidence {classification.confidence:.0%})"
    )
    console.print(f"  [dim]{classification.reasoning}[/dim]")
    console.print()


def _print_reviewers(result: DiffAnalysisResult) -> None:
    if not result.recommended_reviewers:
        console.print("[bold]Reviewers:[/bold] [dim]no recommendation[/dim]")
    else:
        console.print(f"[bold]Reviewers:[/bold] {', '.join(result.recommended_reviewers)}")
    console.print()


@app.command(name="diff")
def diff_cmd(
    ctx: typer.Context,
    ref: Optional[str] = typer.Argument(
        None,
        help="Ref or range to analyse (default: HEAD~1)",
    ),
    risk: bool = typer.Option(False, "--risk", help="Show the risk assessment"),
    classify: bool = typer.Option(False, "--classify", help="Show the change classification"),
    reviewers: bool = typer.Option(False, "--reviewers", help="Show recommended reviewers"),
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        help="Repository to analyse (default: the global --path or cwd)",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show per-file risk reasons and debug logging",
    ),
) -> None:
    """
    Assess the risk of a git change set.

    With no section flag, risk, classification and reviewers are all shown.

    [bold cyan]Examples:[/bold cyan]

      riskroute diff

      riskroute diff HEAD~3 --risk -v

      riskroute diff main..feature --json
    """
    try:
        context = resolve_context(ctx, verbose=verbose)
        result = analyze_diff(ref, context, project_path(ctx, path))
    except RiskRouteError as e:
        logger.error("%s: %s", e.__class__.__name__, e)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        emit_json(result)
        return

    show_all = not (risk or classify or reviewers)
    console.print()
    console.print(f"[bold cyan]CHANGE ANALYSIS[/bold cyan] -- {result.ref}")
    console.print(f"{result.summary}")
    console.print()

    if not result.files:
        console.print("[yellow]No changed files.[/yellow]")
        return

    if show_all or risk:
        _print_risk(result, verbose)
    if show_all or classify:
        _print_classification(result)
    if show_all or reviewers:
        _print_reviewers(result)
