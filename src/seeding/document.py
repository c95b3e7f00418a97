"""Seed a single named document, for singleton content such as the hero block."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from .batch import Clock, elapsed_ms, isoformat, stamp_record, utc_now
from .errors import SeedError
from .models import SeedOptions, SeedResult
from .store import DocumentStore

logger = logging.getLogger(__name__)


def seed_document(
    store: DocumentStore,
    collection: str,
    document_id: str,
    data: Mapping[str, Any],
    label: str = "",
    options: SeedOptions | None = None,
    *,
    clock: Clock = utc_now,
) -> SeedResult:
    """Write one stamped document; total_records is always 1."""
    options = options or SeedOptions()
    display_name = label or document_id
    start = time.monotonic()
    result = SeedResult(collection_name=collection, total_records=1, label=display_name)

    try:
        document = stamp_record(data, isoformat(clock()), options.seed_version)
        store.set_document(collection, document_id, document, timeout=options.commit_timeout)
    except SeedError as e:
        result.error_count = 1
        result.errors.append(f"Document {document_id}: {e}")
        logger.error(f"Error seeding document {display_name}: {e}")
    except Exception as e:
        result.error_count = 1
        result.errors.append(f"Document {document_id}: {e}")
        logger.exception(f"Unexpected error seeding document {display_name}")
    else:
        result.success_count = 1

    result.duration_ms = elapsed_ms(start)
    if result.success_count:
        logger.info(f"Seeded document: {display_name} ({result.duration_ms}ms)")
    return result
