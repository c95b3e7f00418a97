"""Batch seeder: clear a collection, then write records in chunked batches.

Each chunk is committed as one batched write, so a commit is
all-or-nothing for the records staged in it. Records that cannot be
stamped are counted as errors and left out of their chunk; a rejected
commit counts every staged record of that chunk as failed. Neither stops
the remaining chunks.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence, TypeVar

from .errors import BatchCommitError, ClearCollectionError, RecordStampingError, StoreError
from .models import (
    CREATED_AT_FIELD,
    SEED_TIMESTAMP_FIELD,
    SEED_VERSION_FIELD,
    UPDATED_AT_FIELD,
    SeedOptions,
    SeedResult,
)
from .store import DocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
Clock = Callable[[], datetime]
Sleep = Callable[[float], None]
RecordValidator = Callable[[Mapping[str, Any]], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def chunk_records(records: Sequence[T], size: int) -> list[list[T]]:
    """Split records into consecutive chunks of at most size items.

    Examples:
        >>> chunk_records(["a", "b", "c"], 2)
        [['a', 'b'], ['c']]
    """
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [list(records[i : i + size]) for i in range(0, len(records), size)]


def resolve_document_id(
    record: Mapping[str, Any],
    id_fields: Sequence[str] = ("id",),
    require_id: bool = False,
) -> str | None:
    """Pick the document id for a record.

    The first id field holding a non-empty value wins. None means the
    store should generate an id.

    Raises:
        RecordStampingError: If the id value is unusable, or missing while
            require_id is set
    """
    for field_name in id_fields:
        value = record.get(field_name)
        if value is None or value == "":
            continue
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise RecordStampingError(
                f"'{field_name}' must be a string or integer, got {type(value).__name__}"
            )
        document_id = str(value).strip()
        if not document_id:
            continue
        if "/" in document_id:
            raise RecordStampingError(f"'{field_name}' value {document_id!r} must not contain '/'")
        return document_id

    if require_id:
        raise RecordStampingError(f"missing identifying key ({' or '.join(id_fields)})")
    return None


def stamp_record(
    record: Mapping[str, Any],
    stamped_at: str,
    seed_version: str,
) -> dict[str, Any]:
    """Copy a record and add the seed metadata fields.

    createdAt is kept when the source already has one; updatedAt and
    seedTimestamp are always the stamping time.
    """
    if not isinstance(record, Mapping):
        raise RecordStampingError(f"record must be an object, got {type(record).__name__}")

    document = dict(record)
    document[CREATED_AT_FIELD] = record.get(CREATED_AT_FIELD) or stamped_at
    document[UPDATED_AT_FIELD] = stamped_at
    document[SEED_VERSION_FIELD] = seed_version
    document[SEED_TIMESTAMP_FIELD] = stamped_at
    return document


def describe_record(record: Any, position: int) -> str:
    """Identifier prefix used in error messages."""
    if isinstance(record, Mapping):
        for key in ("id", "title"):
            value = record.get(key)
            if isinstance(value, (str, int)) and not isinstance(value, bool) and value != "":
                return f"Document {value}"
    return f"Record #{position}"


def clear_collection(
    store: DocumentStore,
    collection: str,
    batch_size: int,
    timeout: float | None = None,
) -> int:
    """Delete every document in a collection using chunked delete batches.

    Returns the number of documents deleted.

    Raises:
        ClearCollectionError: If listing or any delete batch fails. Batches
            committed before the failure stay committed.
    """
    try:
        refs = store.list_documents(collection)
        chunks = chunk_records(refs, batch_size)
        for chunk in chunks:
            batch = store.batch()
            for ref in chunk:
                batch.delete(ref)
            batch.commit(timeout=timeout)
    except StoreError as e:
        raise ClearCollectionError(f"Failed to clear {collection}: {e}") from e

    if refs:
        logger.info(f"Cleared {len(refs)} documents from {collection}")
    else:
        logger.info(f"Collection {collection} is already empty")
    return len(refs)


def _stage_record(
    store: DocumentStore,
    collection: str,
    record: Any,
    options: SeedOptions,
    stamped_at: str,
    validator: RecordValidator | None,
) -> tuple[Any, dict[str, Any]]:
    if not isinstance(record, Mapping):
        raise RecordStampingError(f"record must be an object, got {type(record).__name__}")
    if validator is not None:
        validator(record)

    document_id = resolve_document_id(record, options.id_fields, options.require_id)
    document = stamp_record(record, stamped_at, options.seed_version)
    return store.document(collection, document_id), document


def _seed_chunk(
    store: DocumentStore,
    collection: str,
    chunk: list[Any],
    chunk_number: int,
    chunk_total: int,
    offset: int,
    options: SeedOptions,
    result: SeedResult,
    validator: RecordValidator | None,
    clock: Clock,
) -> None:
    """Stage and commit one chunk, folding its outcome into result."""
    logger.info(f"Batch {chunk_number}/{chunk_total} ({len(chunk)} documents)...")

    batch = store.batch()
    stamped_at = isoformat(clock())
    staged = 0

    for position, record in enumerate(chunk, start=offset):
        try:
            ref, document = _stage_record(store, collection, record, options, stamped_at, validator)
        except RecordStampingError as e:
            result.error_count += 1
            result.errors.append(f"{describe_record(record, position)}: {e}")
            logger.warning(f"Skipping {describe_record(record, position)} in {collection}: {e}")
            continue
        batch.set(ref, document)
        staged += 1

    if staged == 0:
        return

    try:
        batch.commit(timeout=options.commit_timeout)
    except StoreError as e:
        error = BatchCommitError(f"Batch {chunk_number}: {e}")
        result.error_count += staged
        result.errors.append(str(error))
        logger.error(f"Batch {chunk_number}/{chunk_total} of {collection} failed: {e}")
        return

    result.success_count += staged
    logger.debug(f"Batch {chunk_number}/{chunk_total} committed ({staged} documents)")


def seed_collection(
    store: DocumentStore,
    collection: str,
    records: Sequence[Any],
    options: SeedOptions | None = None,
    *,
    label: str = "",
    validator: RecordValidator | None = None,
    clock: Clock = utc_now,
    sleep: Sleep = time.sleep,
) -> SeedResult:
    """Seed a collection from a list of records.

    Steps:
    1. Clear the collection when options.clear_existing is set
    2. Partition records into chunks of options.batch_size
    3. Stamp each record and stage it in the chunk's batch
    4. Commit the chunk; success is only counted after the commit
    5. Pause options.chunk_delay seconds between chunks

    Never raises: every failure ends up in the returned SeedResult.
    """
    options = options or SeedOptions()
    start = time.monotonic()
    result = SeedResult(
        collection_name=collection,
        total_records=len(records),
        label=label or collection,
    )

    logger.info(f"Seeding collection: {collection} ({len(records)} documents)")

    try:
        if options.clear_existing:
            clear_collection(store, collection, options.batch_size, options.commit_timeout)

        chunks = chunk_records(records, options.batch_size)
        for index, chunk in enumerate(chunks):
            _seed_chunk(
                store,
                collection,
                chunk,
                index + 1,
                len(chunks),
                index * options.batch_size,
                options,
                result,
                validator,
                clock,
            )
            if index < len(chunks) - 1 and options.chunk_delay > 0:
                sleep(options.chunk_delay)

    except ClearCollectionError as e:
        result.mark_remaining_failed(f"Clear error: {e}")
        logger.error(str(e))
    except Exception as e:
        result.mark_remaining_failed(f"Collection error: {e}")
        logger.exception(f"Failed to seed collection {collection}")

    result.duration_ms = elapsed_ms(start)

    if result.error_count == 0 and not result.errors:
        logger.info(
            f"Seeded {result.success_count} documents to {collection} ({result.duration_ms}ms)"
        )
    else:
        logger.warning(
            f"Seeded {result.success_count}/{result.total_records} documents to {collection} "
            f"({result.error_count} errors, {result.duration_ms}ms)"
        )
    return result
