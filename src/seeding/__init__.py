"""Content seeding pipeline for the heritage site's Firestore database."""

from .batch import chunk_records, clear_collection, seed_collection, stamp_record
from .config import EnvironmentSettings, SeedTarget
from .document import seed_document
from .errors import (
    BatchCommitError,
    ClearCollectionError,
    ConfirmationDeniedError,
    RecordStampingError,
    RecordValidationError,
    SeedError,
    SourceLoadError,
    StoreError,
    StoreInitializationError,
)
from .loader import BundleEntry, build_units
from .models import SeedOptions, SeedResult, SeedSummary, SeedUnit, UnitKind
from .orchestrator import RunState, SeedRun, run_seed
from .store import DocumentStore, FirestoreStore, create_store

__all__ = [
    "BatchCommitError",
    "BundleEntry",
    "ClearCollectionError",
    "ConfirmationDeniedError",
    "DocumentStore",
    "EnvironmentSettings",
    "FirestoreStore",
    "RecordStampingError",
    "RecordValidationError",
    "RunState",
    "SeedError",
    "SeedOptions",
    "SeedResult",
    "SeedRun",
    "SeedSummary",
    "SeedTarget",
    "SeedUnit",
    "SourceLoadError",
    "StoreError",
    "StoreInitializationError",
    "UnitKind",
    "build_units",
    "chunk_records",
    "clear_collection",
    "create_store",
    "run_seed",
    "seed_collection",
    "seed_document",
    "stamp_record",
]
