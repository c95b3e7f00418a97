"""Source loader: turn JSON content files into seed units.

A seed file is either a top-level array of records or an object whose
keys name sub-collections and singletons. A BundleEntry says which part
of which file becomes which unit; build_units() walks a bundle in order
and collects load errors per file instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from .errors import SourceLoadError
from .models import SeedOptions, SeedUnit, UnitKind

logger = logging.getLogger(__name__)

STATIC_COLLECTIONS_KEY = "collections"
STATIC_DATA_KEY = "staticData"

Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class BundleEntry:
    """Declaration of one seed unit inside a content bundle.

    Fields:
        kind: COLLECTION or DOCUMENT
        collection: Target collection name
        file: Source file name relative to the data directory
        document_id: Target document id (DOCUMENT entries)
        key: Top-level key selecting a section of a keyed object
        static_data: Name of an item in the file's "collections" list
            whose staticData becomes the section
        label: Display name
        group: Bundle group shared by related entries (filtering)
        transform: Applied to the selected section before validation
        required: If False, an absent section is skipped silently
        factory: Builds the section in code instead of reading a file
    """

    kind: UnitKind
    collection: str
    file: str | None = None
    document_id: str | None = None
    key: str | None = None
    static_data: str | None = None
    label: str = ""
    group: str = ""
    transform: Transform | None = None
    required: bool = True
    factory: Callable[[], Any] | None = None

    @property
    def source_name(self) -> str:
        if self.file is None:
            return "<generated>"
        if self.key:
            return f"{self.file}:{self.key}"
        if self.static_data:
            return f"{self.file}:{self.static_data}"
        return self.file


@dataclass
class LoadedBundle:
    """Units built from a bundle plus the errors of entries that could not load."""

    units: list[SeedUnit] = field(default_factory=list)
    load_errors: list[str] = field(default_factory=list)


def load_json(path: Path) -> Any:
    """Read and parse a JSON file.

    Raises:
        SourceLoadError: If the file is missing, unreadable or not JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise SourceLoadError(f"File not found: {path.name}") from e
    except json.JSONDecodeError as e:
        raise SourceLoadError(f"Invalid JSON in {path.name}: {e}") from e
    except UnicodeDecodeError as e:
        raise SourceLoadError(f"Invalid UTF-8 in {path.name}: {e}") from e
    except OSError as e:
        raise SourceLoadError(f"Cannot read {path.name}: {e}") from e


def select_section(data: Any, entry: BundleEntry) -> Any:
    """Pick the part of a parsed file an entry refers to.

    Returns None when the section is absent.

    Raises:
        SourceLoadError: If the file shape does not support the selection
    """
    if entry.static_data:
        if not isinstance(data, Mapping) or not isinstance(data.get(STATIC_COLLECTIONS_KEY), list):
            raise SourceLoadError(
                f"{entry.file}: expected an object with a '{STATIC_COLLECTIONS_KEY}' list"
            )
        for item in data[STATIC_COLLECTIONS_KEY]:
            if isinstance(item, Mapping) and item.get("name") == entry.static_data:
                return item.get(STATIC_DATA_KEY)
        return None

    if entry.key:
        # A plain array file is accepted wherever a keyed list is expected
        if isinstance(data, list) and entry.kind is UnitKind.COLLECTION:
            return data
        if not isinstance(data, Mapping):
            raise SourceLoadError(
                f"{entry.file}: expected an object with key '{entry.key}', got {type(data).__name__}"
            )
        return data.get(entry.key)

    return data


def to_unit(entry: BundleEntry, section: Any) -> SeedUnit:
    """Validate a section's shape and wrap it in a SeedUnit.

    Raises:
        SourceLoadError: If a collection section is not a list, or a
            document section is not an object
    """
    if entry.kind is UnitKind.COLLECTION:
        if not isinstance(section, list):
            raise SourceLoadError(
                f"{entry.source_name}: expected a list of records, got {type(section).__name__}"
            )
        return SeedUnit.for_collection(entry.collection, section, entry.label, entry.group)

    if not isinstance(section, Mapping):
        raise SourceLoadError(
            f"{entry.source_name}: expected an object, got {type(section).__name__}"
        )
    if not entry.document_id:
        raise SourceLoadError(f"{entry.source_name}: document entries need a document id")
    return SeedUnit.for_document(
        entry.collection, entry.document_id, section, entry.label, entry.group
    )


def build_units(
    entries: Sequence[BundleEntry],
    data_path: Path,
    options: SeedOptions | None = None,
) -> LoadedBundle:
    """Load every selected entry of a bundle, in declaration order.

    Each file is read once. A file that fails to load is reported once
    and every entry that depends on it is skipped.
    """
    options = options or SeedOptions()
    bundle = LoadedBundle()
    cache: dict[str, Any] = {}
    failed_files: set[str] = set()

    for entry in entries:
        if not options.selects(entry.collection, entry.group):
            logger.debug(f"Skipping {entry.collection} (filtered)")
            continue

        try:
            if entry.factory is not None:
                section = entry.factory()
            elif entry.file is None:
                raise SourceLoadError(f"{entry.collection}: entry has neither file nor factory")
            else:
                if entry.file in failed_files:
                    continue
                if entry.file not in cache:
                    try:
                        cache[entry.file] = load_json(data_path / entry.file)
                    except SourceLoadError:
                        failed_files.add(entry.file)
                        raise
                section = select_section(cache[entry.file], entry)

            if section is None:
                if entry.required:
                    raise SourceLoadError(f"{entry.source_name}: section not found")
                logger.info(f"No data for {entry.label or entry.collection}, skipping")
                continue

            if entry.transform is not None:
                try:
                    section = entry.transform(section)
                except (TypeError, ValueError, AttributeError) as e:
                    raise SourceLoadError(f"{entry.source_name}: {e}") from e
            bundle.units.append(to_unit(entry, section))

        except SourceLoadError as e:
            logger.error(f"Error loading {entry.source_name}: {e}")
            bundle.load_errors.append(str(e))

    return bundle
