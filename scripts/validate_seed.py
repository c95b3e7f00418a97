"""Verify seeded Firestore data by counting documents per collection.

Usage:
    python scripts/validate_seed.py
    python scripts/validate_seed.py --target production --include-demo
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import click
from rich.console import Console
from rich.table import Table

from src.seeding.bundle import bundle_entries
from src.seeding.config import EnvironmentSettings, SeedTarget
from src.seeding.errors import SeedError, StoreError
from src.seeding.store import DocumentStore, create_store

console = Console()
logger = logging.getLogger(__name__)

COUNT_FAILED = -1


@dataclass
class ValidationResult:
    """Document count for one collection."""

    collection: str
    actual: int
    message: str = ""

    @property
    def passed(self) -> bool:
        return self.actual > 0


@dataclass
class ValidationReport:
    """Counts for every collection of the bundle."""

    results: list[ValidationResult] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.passed]

    def counts(self) -> dict[str, int]:
        return {r.collection: r.actual for r in self.results}


def bundle_collections(include_demo: bool = False) -> list[str]:
    """Distinct collection names of the bundle, in seeding order."""
    names: list[str] = []
    for entry in bundle_entries(include_demo):
        if entry.collection not in names:
            names.append(entry.collection)
    return names


def count_collections(store: DocumentStore, collections: list[str]) -> ValidationReport:
    """Count documents per collection; a failed count is reported as -1."""
    report = ValidationReport()
    for name in collections:
        try:
            count = store.count_documents(name)
        except StoreError as e:
            logger.error(f"Error checking {name}: {e}")
            report.results.append(ValidationResult(name, COUNT_FAILED, str(e)))
            continue
        message = "" if count else "empty"
        report.results.append(ValidationResult(name, count, message))
    return report


def display_report(report: ValidationReport) -> None:
    table = Table(title="Seeded Collections")
    table.add_column("Collection", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Status")

    for result in report.results:
        status = "[green]✓[/green]" if result.passed else f"[red]✗ {result.message}[/red]"
        table.add_row(result.collection, str(result.actual), status)
    console.print(table)


@click.command()
@click.option(
    "--target",
    type=click.Choice([t.value for t in SeedTarget]),
    default=None,
    help="Target environment (default: SEED_TARGET or emulator)",
)
@click.option("--include-demo", is_flag=True, default=False, help="Also check demo collections")
def main(target: str | None, include_demo: bool) -> None:
    """Count documents in every seeded collection."""
    logging.basicConfig(level=logging.INFO)
    console.print("\n[bold blue]Verifying seeded data...[/bold blue]\n")

    settings = EnvironmentSettings.from_env(target)
    try:
        store = create_store(settings)
    except SeedError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise SystemExit(1) from e

    try:
        report = count_collections(store, bundle_collections(include_demo))
    finally:
        store.close()

    display_report(report)

    if report.all_passed:
        console.print("\n[bold green]✓ All collections populated[/bold green]")
    else:
        console.print(f"\n[bold red]✗ {len(report.failures)} collection(s) empty or unreadable[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
