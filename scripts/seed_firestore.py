"""Seed Firestore with the heritage site content bundle.

Loads the JSON content under data/seed/, stamps every document with seed
metadata and writes it in chunked batches to either the local emulator
or the production project.

Usage:
    python scripts/seed_firestore.py                        # emulator
    python scripts/seed_firestore.py --target production --confirm
    python scripts/seed_firestore.py --collection mini-games --batch-size 10
    python scripts/seed_firestore.py --exclude documents --keep-existing
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console

from src.seeding.bundle import bundle_entries
from src.seeding.config import EMULATOR_UI_URL, EnvironmentSettings, SeedTarget
from src.seeding.confirmation import FlagConfirmation
from src.seeding.errors import SeedError
from src.seeding.models import SeedSummary
from src.seeding.orchestrator import SeedRun, build_options
from src.seeding.reporter import render_summary
from src.validators.validate import build_record_validator, load_collection_schemas

console = Console()
logger = logging.getLogger(__name__)

EXIT_ABORTED = 1
EXIT_UNIT_FAILED = 2


def _print_banner(settings: EnvironmentSettings) -> None:
    console.print("\n[bold blue]Heritage Journey - Firestore Seeder[/bold blue]")
    if settings.is_production:
        console.print("[bold red]PRODUCTION MODE[/bold red] - seeding the live Firebase project")
        console.print(f"  Project: {settings.project_id or '<unset>'}")
    else:
        console.print("[bold green]EMULATOR MODE[/bold green] - safe local environment")
        console.print(f"  Emulator: {settings.emulator_host}")
    console.print(f"  Data: {settings.data_path}\n")


def _write_summary(summary: SeedSummary, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary.to_dict(), f, indent=2, ensure_ascii=False)
    console.print(f"[dim]Summary written to {path}[/dim]")


@click.command()
@click.option(
    "--target",
    type=click.Choice([t.value for t in SeedTarget]),
    default=None,
    help="Target environment (default: SEED_TARGET or emulator)",
)
@click.option("--confirm", is_flag=True, default=False, help="Confirm production writes")
@click.option(
    "--data-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory holding the seed JSON files",
)
@click.option(
    "--collection",
    "collections",
    multiple=True,
    help="Only seed this collection or group (repeatable)",
)
@click.option("--exclude", "excluded", multiple=True, help="Skip this collection or group (repeatable)")
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Documents per batch")
@click.option(
    "--clear-existing/--keep-existing",
    default=None,
    help="Delete existing documents before seeding (default depends on target)",
)
@click.option("--validate", is_flag=True, default=False, help="Validate records against schemas")
@click.option(
    "--schemas-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory holding <collection>.schema.json files",
)
@click.option("--include-demo", is_flag=True, default=False, help="Also seed demo user data")
@click.option(
    "--summary-json",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the run summary as JSON",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
def main(
    target: str | None,
    confirm: bool,
    data_path: Path | None,
    collections: tuple[str, ...],
    excluded: tuple[str, ...],
    batch_size: int | None,
    clear_existing: bool | None,
    validate: bool,
    schemas_path: Path | None,
    include_demo: bool,
    summary_json: Path | None,
    verbose: bool,
) -> None:
    """Seed Firestore with the heritage site content bundle."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    settings = EnvironmentSettings.from_env(target)
    if data_path is not None:
        settings.data_path = data_path
    if schemas_path is not None:
        settings.schemas_path = schemas_path

    options = build_options(
        settings,
        batch_size=batch_size,
        clear_existing=clear_existing,
        validate_data=validate,
        include_collections=frozenset(collections),
        exclude_collections=frozenset(excluded),
        include_demo=include_demo,
    )

    validators = {}
    if validate:
        schemas = load_collection_schemas(settings.schemas_path)
        validators = {name: build_record_validator(schema) for name, schema in schemas.items()}
        console.print(f"  Validating with {len(validators)} schema(s)")

    _print_banner(settings)

    run = SeedRun(
        settings,
        options,
        confirmation=FlagConfirmation(confirm),
        validators=validators,
        reporter=lambda summary: render_summary(summary, console),
    )

    try:
        summary = run.run_bundle(bundle_entries(include_demo=options.include_demo))
    except SeedError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if settings.is_production and not confirm:
            console.print("Add --confirm to proceed: seed-firestore --target production --confirm")
        raise SystemExit(EXIT_ABORTED) from e

    if summary_json is not None:
        _write_summary(summary, summary_json)

    if not settings.is_production:
        console.print(f"\n[dim]View data at: {EMULATOR_UI_URL}[/dim]")

    if summary.fatal_units:
        console.print(f"\n[bold red]{len(summary.fatal_units)} unit(s) failed completely[/bold red]")
        raise SystemExit(EXIT_UNIT_FAILED)

    console.print("\n[bold green]Seeding complete![/bold green]")


if __name__ == "__main__":
    main()
