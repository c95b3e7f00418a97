"""Reseed one named collection.

The collection is always cleared before writing. Production runs ask
for confirmation on the terminal unless --yes is given.

Usage:
    python scripts/seed_single.py mini-games
    SEED_TARGET=production python scripts/seed_single.py heritage-spots
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console

from src.seeding.bundle import SINGLE_COLLECTIONS
from src.seeding.config import EnvironmentSettings, SeedTarget
from src.seeding.confirmation import FlagConfirmation, PromptConfirmation
from src.seeding.errors import SeedError
from src.seeding.orchestrator import SeedRun, build_options
from src.seeding.reporter import render_summary

console = Console()

SINGLE_ID_FIELDS = ("id", "title")


def _list_collections() -> None:
    console.print("Available collections:")
    for name in SINGLE_COLLECTIONS:
        console.print(f"  • {name}")


@click.command()
@click.argument("name", required=False)
@click.option(
    "--target",
    type=click.Choice([t.value for t in SeedTarget]),
    default=None,
    help="Target environment (default: SEED_TARGET or emulator)",
)
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip the production prompt")
@click.option(
    "--data-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory holding the seed JSON files",
)
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Documents per batch")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
def main(
    name: str | None,
    target: str | None,
    yes: bool,
    data_path: Path | None,
    batch_size: int | None,
    verbose: bool,
) -> None:
    """Clear and reseed a single collection."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    if not name:
        console.print("[red]Please specify a collection name[/red]")
        _list_collections()
        raise SystemExit(1)

    entry = SINGLE_COLLECTIONS.get(name)
    if entry is None:
        console.print(f"[red]Unknown collection: {name}[/red]")
        _list_collections()
        raise SystemExit(1)

    settings = EnvironmentSettings.from_env(target)
    if data_path is not None:
        settings.data_path = data_path

    console.print(f"\n[bold blue]Seeding collection: {entry.collection}[/bold blue]")
    console.print(f"  Environment: {settings.target.value.upper()}\n")

    options = build_options(
        settings,
        batch_size=batch_size,
        clear_existing=True,
        id_fields=SINGLE_ID_FIELDS,
    )
    confirmation = FlagConfirmation(True) if yes else PromptConfirmation()
    run = SeedRun(
        settings,
        options,
        confirmation=confirmation,
        reporter=lambda summary: render_summary(summary, console),
    )

    try:
        summary = run.run_bundle([entry])
    except SeedError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        raise SystemExit(1) from e

    if summary.load_errors or summary.fatal_units:
        raise SystemExit(1)
    console.print(
        f"\n[bold green]✓ Seeded {summary.successful_records} documents "
        f"to {entry.collection}[/bold green]"
    )


if __name__ == "__main__":
    main()
