"""Data models for the seeding pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

# Persisted metadata fields stamped onto every seeded document
CREATED_AT_FIELD = "createdAt"
UPDATED_AT_FIELD = "updatedAt"
SEED_VERSION_FIELD = "seedVersion"
SEED_TIMESTAMP_FIELD = "seedTimestamp"

DEFAULT_BATCH_SIZE = 25
DEFAULT_SEED_VERSION = "2.0.0"


class UnitKind(str, Enum):
    """What a SeedUnit writes."""

    COLLECTION = "collection"
    DOCUMENT = "document"


@dataclass(frozen=True)
class SeedUnit:
    """One instruction to populate a collection or a single document.

    Fields:
        kind: COLLECTION or DOCUMENT
        collection: Target collection name
        records: Records for a COLLECTION unit
        document_id: Document id for a DOCUMENT unit
        data: Payload for a DOCUMENT unit
        label: Human readable name used in logs and reports
        group: Bundle group the unit belongs to (used by filters)
    """

    kind: UnitKind
    collection: str
    records: tuple[Mapping[str, Any], ...] = ()
    document_id: str | None = None
    data: Mapping[str, Any] | None = None
    label: str = ""
    group: str = ""

    @classmethod
    def for_collection(
        cls,
        name: str,
        records: Sequence[Mapping[str, Any]],
        label: str = "",
        group: str = "",
    ) -> SeedUnit:
        return cls(
            kind=UnitKind.COLLECTION,
            collection=name,
            records=tuple(records),
            label=label or name,
            group=group or name,
        )

    @classmethod
    def for_document(
        cls,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
        label: str = "",
        group: str = "",
    ) -> SeedUnit:
        return cls(
            kind=UnitKind.DOCUMENT,
            collection=collection,
            document_id=document_id,
            data=data,
            label=label or document_id,
            group=group or collection,
        )

    @property
    def record_count(self) -> int:
        """Number of documents this unit will write."""
        if self.kind is UnitKind.DOCUMENT:
            return 1
        return len(self.records)


@dataclass
class SeedOptions:
    """Options for seeding a collection.

    Grouped in a dataclass instead of long parameter lists.
    """

    clear_existing: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    validate_data: bool = False
    exclude_collections: frozenset[str] = frozenset()
    include_collections: frozenset[str] = frozenset()
    id_fields: tuple[str, ...] = ("id",)
    require_id: bool = False
    seed_version: str = DEFAULT_SEED_VERSION
    chunk_delay: float = 0.0
    commit_timeout: float | None = None
    include_demo: bool = False

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        self.exclude_collections = frozenset(self.exclude_collections)
        self.include_collections = frozenset(self.include_collections)

    def selects(self, collection: str, group: str = "") -> bool:
        """Apply the include/exclude filters to a collection and its bundle group."""
        names = {collection, group or collection}
        if names & self.exclude_collections:
            return False
        if self.include_collections:
            return bool(names & self.include_collections)
        return True


@dataclass
class SeedResult:
    """Outcome of one seed unit."""

    collection_name: str
    total_records: int
    success_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0
    label: str = ""
    fatal: bool = False

    @property
    def uncounted(self) -> int:
        """Records that were neither confirmed written nor counted as failed."""
        return self.total_records - self.success_count - self.error_count

    def mark_remaining_failed(self, message: str) -> None:
        """Count every not-yet-counted record as failed and record why."""
        self.fatal = True
        self.error_count += max(self.uncounted, 0)
        self.errors.append(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "collectionName": self.collection_name,
            "label": self.label,
            "totalRecords": self.total_records,
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "errors": list(self.errors),
            "durationMs": self.duration_ms,
            "fatal": self.fatal,
        }


@dataclass
class SeedSummary:
    """Aggregate over one run."""

    total_collections: int = 0
    total_records: int = 0
    successful_records: int = 0
    failed_records: int = 0
    collections: list[SeedResult] = field(default_factory=list)
    total_duration_ms: int = 0
    timestamp: str = ""
    target: str = ""
    load_errors: list[str] = field(default_factory=list)

    def add(self, result: SeedResult) -> None:
        """Fold one unit result into the running totals."""
        self.collections.append(result)
        self.total_collections += 1
        self.total_records += result.total_records
        self.successful_records += result.success_count
        self.failed_records += result.error_count

    @property
    def success_rate(self) -> float:
        """Successful records as a percentage; 100.0 for an empty run."""
        if self.total_records == 0:
            return 100.0
        return self.successful_records / self.total_records * 100

    @property
    def fatal_units(self) -> list[SeedResult]:
        """Units that aborted as a whole (clear failure, unexpected error)."""
        return [c for c in self.collections if c.fatal]

    @property
    def has_failures(self) -> bool:
        return self.failed_records > 0 or bool(self.load_errors)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "totalCollections": self.total_collections,
            "totalRecords": self.total_records,
            "successfulRecords": self.successful_records,
            "failedRecords": self.failed_records,
            "collections": [c.to_dict() for c in self.collections],
            "totalDurationMs": self.total_duration_ms,
            "timestamp": self.timestamp,
            "target": self.target,
            "loadErrors": list(self.load_errors),
        }
