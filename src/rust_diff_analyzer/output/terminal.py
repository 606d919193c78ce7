"""Rich terminal reporter — change table, summary, verdict."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from rust_diff_analyzer.analysis.models import AnalysisResult, Change, ChangeKind, CodeType
from rust_diff_analyzer.scoring.models import LimitOutcome, Summary

_KIND_STYLE = {
    ChangeKind.ADDED: "bold green",
    ChangeKind.MODIFIED: "bold yellow",
    ChangeKind.REMOVED: "bold red",
}

_CODE_TYPE_STYLE = {
    CodeType.PRODUCTION: "bold magenta",
    CodeType.TEST: "cyan",
    CodeType.TEST_UTILITY: "cyan",
    CodeType.BENCHMARK: "blue",
    CodeType.EXAMPLE: "blue",
    CodeType.BUILD_SCRIPT: "dim",
}

_LIMIT_LABEL = {
    "max_prod_units": "Production units",
    "max_weighted_score": "Weighted score",
    "max_prod_lines": "Production lines",
}


def _unit_label(change: Change) -> str:
    unit = change.unit
    if unit.kind is None:
        return "(outside any unit)"
    name = unit.name or "<anonymous>"
    return f"{unit.kind.value.replace('_', ' ')} {name}"


def render(
    result: AnalysisResult,
    summary: Summary,
    outcome: LimitOutcome,
    *,
    show_details: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print analysis results to the terminal using Rich."""
    console = console or Console(stderr=True)

    if not result.changes:
        console.print()
        console.print("[bold green]✅ No Rust code changes detected.[/bold green]")
    elif show_details:
        console.print()
        table = Table(
            title="Rust Diff Analysis",
            show_lines=False,
            title_style="bold",
            border_style="dim",
        )
        table.add_column("File", style="magenta")
        table.add_column("Lines", justify="right", style="green")
        table.add_column("Unit", style="cyan", min_width=20)
        table.add_column("Change", justify="center")
        table.add_column("Type", justify="center")
        table.add_column("+", justify="right", style="green")
        table.add_column("-", justify="right", style="red")

        for change in result.changes:
            span = change.unit.span
            table.add_row(
                change.file,
                f"{span.start}-{span.end}",
                _unit_label(change),
                Text(change.kind.value, style=_KIND_STYLE[change.kind]),
                Text(change.unit.code_type.value, style=_CODE_TYPE_STYLE[change.unit.code_type]),
                str(change.added_lines),
                str(change.removed_lines),
            )
        console.print(table)

    _print_summary(console, result, summary)

    for error in result.errors:
        console.print(f"[yellow]⚠[/yellow]  {escape(error)}")

    console.print()
    if outcome.passed:
        console.print("[bold green]✅ PASSED — change is within configured limits.[/bold green]")
        return
    console.print("[bold red]❌ LIMITS EXCEEDED[/bold red]")
    for v in outcome.violations:
        label = _LIMIT_LABEL.get(v.limit, v.limit)
        console.print(f"  [red]•[/red] {label}: {v.actual} > {v.maximum}")


def _print_summary(console: Console, result: AnalysisResult, summary: Summary) -> None:
    console.print()
    console.print(f"[dim]Files analysed:[/dim]   {len(result.analyzed_files)}")
    console.print(f"[dim]Files skipped:[/dim]    {len(result.skipped_files)}")
    console.print(f"[dim]Changes:[/dim]          {len(result.changes)}")
    console.print(f"[dim]Production units:[/dim] {summary.prod_units}")
    console.print(
        f"[dim]Production lines:[/dim] +{summary.prod_lines_added} -{summary.prod_lines_removed}"
    )
    console.print(
        f"[dim]All lines:[/dim]        +{summary.total_added} -{summary.total_removed}"
    )
    console.print(f"[dim]Weighted score:[/dim]   {summary.weighted_score}")
    console.print(f"[dim]Duration:[/dim]         {result.duration_ms:.0f}ms")
