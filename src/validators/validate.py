"""JSON schema validation for seed records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Mapping

import click
import jsonschema
from rich.console import Console

from src.seeding.errors import RecordValidationError

console = Console()

SCHEMA_SUFFIX = ".schema.json"

RecordValidator = Callable[[Mapping[str, Any]], None]


def load_schema(schema_path: Path) -> dict[str, Any]:
    """Load a JSON schema from file."""
    with open(schema_path, encoding="utf-8") as f:
        return json.load(f)


def load_collection_schemas(schemas_dir: Path) -> dict[str, dict[str, Any]]:
    """Load every <collection>.schema.json in a directory, keyed by collection."""
    schemas: dict[str, dict[str, Any]] = {}
    if not schemas_dir.is_dir():
        return schemas

    for schema_path in sorted(schemas_dir.glob(f"*{SCHEMA_SUFFIX}")):
        name = schema_path.name.removesuffix(SCHEMA_SUFFIX)
        schemas[name] = load_schema(schema_path)
    return schemas


def build_record_validator(schema: dict[str, Any]) -> RecordValidator:
    """Return a callable that raises RecordValidationError for bad records."""
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    validator = validator_cls(schema)

    def _validate(record: Mapping[str, Any]) -> None:
        error = jsonschema.exceptions.best_match(validator.iter_errors(dict(record)))
        if error is not None:
            location = "/".join(str(p) for p in error.absolute_path) or "<root>"
            raise RecordValidationError(f"Schema validation error at {location}: {error.message}")

    return _validate


def validate_records(
    records: list[Mapping[str, Any]],
    schema: dict[str, Any],
) -> dict[int, str]:
    """Validate records against a schema.

    Returns:
        Dict mapping record index to its first validation error
    """
    check = build_record_validator(schema)
    failures: dict[int, str] = {}
    for index, record in enumerate(records):
        try:
            check(record)
        except RecordValidationError as e:
            failures[index] = str(e)
    return failures


@click.command()
@click.argument("file_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--schema",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to JSON schema for one record",
)
@click.option("--key", type=str, default=None, help="Top-level key holding the record list")
def main(file_path: Path, schema: Path, key: str | None) -> None:
    """Validate the records of a seed file against a schema."""
    console.print(f"[bold blue]Validating {file_path}...[/bold blue]")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)
    if key and (not isinstance(data, dict) or key not in data):
        console.print(f"[red]✗ Key '{key}' not found in {file_path.name}[/red]")
        raise SystemExit(1)
    records = data[key] if key else data
    if not isinstance(records, list):
        console.print("[red]✗ Expected a list of records[/red]")
        raise SystemExit(1)

    failures = validate_records(records, load_schema(schema))
    if failures:
        for index, error in failures.items():
            console.print(f"[red]✗ record {index}[/red] {error}")
        console.print(f"\n[red]{len(failures)} record(s) failed validation[/red]")
        raise SystemExit(1)
    console.print(f"[green]✓ All {len(records)} records valid[/green]")


if __name__ == "__main__":
    main()
