"""Render seed results for humans."""

from __future__ import annotations

from enum import Enum

from rich.console import Console
from rich.table import Table

from .models import SeedResult, SeedSummary

MAX_DISPLAYED_ERRORS = 3


class UnitStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


STATUS_ICONS = {
    UnitStatus.SUCCESS: "[green]✓[/green]",
    UnitStatus.PARTIAL: "[yellow]⚠[/yellow]",
    UnitStatus.FAILED: "[red]✗[/red]",
}


def unit_status(result: SeedResult) -> UnitStatus:
    """Classify a unit by comparing its error count to its record count."""
    if result.error_count == 0 and not result.errors:
        return UnitStatus.SUCCESS
    if result.error_count >= result.total_records:
        return UnitStatus.FAILED
    return UnitStatus.PARTIAL


def visible_errors(errors: list[str], limit: int = MAX_DISPLAYED_ERRORS) -> list[str]:
    """First few errors plus a '+N more' line when some are hidden."""
    shown = list(errors[:limit])
    hidden = len(errors) - limit
    if hidden > 0:
        shown.append(f"... +{hidden} more")
    return shown


def format_success_rate(summary: SeedSummary) -> str:
    return f"{summary.success_rate:.1f}%"


def format_result_line(result: SeedResult) -> str:
    return (
        f"{result.label or result.collection_name} ({result.collection_name}): "
        f"{result.success_count}/{result.total_records} ({result.duration_ms}ms)"
    )


def build_results_table(summary: SeedSummary) -> Table:
    """Per-unit results table."""
    table = Table(title="Seed Results")
    table.add_column("", width=2)
    table.add_column("Unit")
    table.add_column("Collection", style="cyan")
    table.add_column("Written", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Time", justify="right", style="dim")

    for result in summary.collections:
        table.add_row(
            STATUS_ICONS[unit_status(result)],
            result.label or result.collection_name,
            result.collection_name,
            f"{result.success_count}/{result.total_records}",
            str(result.error_count),
            f"{result.duration_ms}ms",
        )
    return table


def render_summary(summary: SeedSummary, console: Console) -> None:
    """Print totals, the per-unit table and the first errors of each unit."""
    console.print("\n[bold]Summary[/bold]")
    console.print(f"  Target: {summary.target.upper() or '-'}")
    console.print(f"  Units processed: {summary.total_collections}")
    console.print(f"  Total documents: {summary.total_records}")
    console.print(f"  [green]Successful:[/green] {summary.successful_records}")
    console.print(f"  [red]Failed:[/red] {summary.failed_records}")
    console.print(f"  Success rate: {format_success_rate(summary)}")
    console.print(f"  [dim]Duration: {summary.total_duration_ms}ms[/dim]")

    if summary.collections:
        console.print()
        console.print(build_results_table(summary))

    for result in summary.collections:
        if not result.errors:
            continue
        console.print(f"\n{STATUS_ICONS[unit_status(result)]} {format_result_line(result)}")
        for line in visible_errors(result.errors):
            console.print(f"    {line}", markup=False)

    for error in summary.load_errors:
        console.print(f"[red]✗ load error:[/red] {error}")
