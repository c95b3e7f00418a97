"""Exception hierarchy for the seeding pipeline.

Only ConfirmationDeniedError and StoreInitializationError ever leave a
run; everything else is caught at the unit boundary and folded into a
SeedResult.
"""

from __future__ import annotations


class SeedError(Exception):
    """Base exception for seeding operations."""


class StoreError(SeedError):
    """A document store call failed."""


class StoreInitializationError(SeedError):
    """The store could not be created (credentials, project, network)."""


class ClearCollectionError(SeedError):
    """Existing documents could not be removed before seeding."""


class RecordStampingError(SeedError):
    """A record could not be turned into a document payload."""


class RecordValidationError(RecordStampingError):
    """A record does not satisfy its collection schema."""


class BatchCommitError(SeedError):
    """A batched write was rejected; none of its records were written."""


class ConfirmationDeniedError(SeedError):
    """Production seeding was requested without explicit confirmation."""


class SourceLoadError(SeedError):
    """A seed source file is missing, unreadable or has an unknown shape."""
