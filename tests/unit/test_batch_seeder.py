"""Unit tests for the batch seeder (src/seeding/batch.py).

These tests validate:
1. Records are partitioned into ceil(N/B) chunks, order preserved
2. Success is counted only after a chunk commit succeeds
3. A failed commit fails its whole chunk and later chunks still run
4. Metadata stamping keeps createdAt and overwrites updatedAt
5. Clearing runs before writes, and a failed clear fails the unit
6. The inter-chunk delay is only applied between chunks
"""

from __future__ import annotations

import math
from typing import Any

import pytest

from conftest import FIXED_NOW_ISO, FakeStore


# =============================================================================
# chunk_records
# =============================================================================


class TestChunkRecords:
    """Partitioning of records into batch-sized chunks."""

    @pytest.mark.parametrize(
        "count,size",
        [(0, 3), (1, 1), (3, 2), (10, 10), (11, 10), (25, 25), (7, 3)],
    )
    def test_chunk_count_and_order(self, count: int, size: int) -> None:
        from src.seeding.batch import chunk_records

        records = list(range(count))
        chunks = chunk_records(records, size)

        assert len(chunks) == math.ceil(count / size)
        assert all(1 <= len(c) <= size for c in chunks)
        assert [r for c in chunks for r in c] == records

    def test_rejects_zero_size(self) -> None:
        from src.seeding.batch import chunk_records

        with pytest.raises(ValueError):
            chunk_records([1, 2], 0)


# =============================================================================
# resolve_document_id / stamp_record
# =============================================================================


class TestResolveDocumentId:
    def test_uses_first_non_empty_field(self) -> None:
        from src.seeding.batch import resolve_document_id

        assert resolve_document_id({"id": "", "title": "Hello"}, ("id", "title")) == "Hello"

    def test_integer_id_is_stringified(self) -> None:
        from src.seeding.batch import resolve_document_id

        assert resolve_document_id({"id": 42}) == "42"

    def test_missing_id_means_generated(self) -> None:
        from src.seeding.batch import resolve_document_id

        assert resolve_document_id({"title": "x"}) is None

    def test_missing_id_when_required(self) -> None:
        from src.seeding.batch import resolve_document_id
        from src.seeding.errors import RecordStampingError

        with pytest.raises(RecordStampingError, match="missing identifying key"):
            resolve_document_id({"title": "x"}, ("id",), require_id=True)

    @pytest.mark.parametrize("value", [True, 1.5, {"a": 1}, ["a"], "a/b"])
    def test_unusable_id_values(self, value: Any) -> None:
        from src.seeding.batch import resolve_document_id
        from src.seeding.errors import RecordStampingError

        with pytest.raises(RecordStampingError):
            resolve_document_id({"id": value})


class TestStampRecord:
    def test_adds_metadata(self) -> None:
        from src.seeding.batch import stamp_record

        document = stamp_record({"id": "a", "title": "A"}, FIXED_NOW_ISO, "2.0.0")

        assert document == {
            "id": "a",
            "title": "A",
            "createdAt": FIXED_NOW_ISO,
            "updatedAt": FIXED_NOW_ISO,
            "seedVersion": "2.0.0",
            "seedTimestamp": FIXED_NOW_ISO,
        }

    def test_preserves_created_at_and_overwrites_updated_at(self) -> None:
        from src.seeding.batch import stamp_record

        source = {"id": "a", "createdAt": "2020-01-01T00:00:00.000Z", "updatedAt": "stale"}
        document = stamp_record(source, FIXED_NOW_ISO, "2.0.0")

        assert document["createdAt"] == "2020-01-01T00:00:00.000Z"
        assert document["updatedAt"] == FIXED_NOW_ISO
        assert source["updatedAt"] == "stale"

    def test_isoformat_uses_z_suffix(self) -> None:
        from datetime import datetime, timezone

        from src.seeding.batch import isoformat

        moment = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert isoformat(moment) == FIXED_NOW_ISO


# =============================================================================
# seed_collection
# =============================================================================


class TestSeedCollection:
    """Chunked writes and their accounting."""

    def test_writes_all_records(self, store: FakeStore, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        result = seed_collection(
            store, "spots", abc_records, SeedOptions(batch_size=2), clock=fixed_clock, sleep=no_sleep
        )

        assert (result.total_records, result.success_count, result.error_count) == (3, 3, 0)
        assert result.errors == []
        assert set(store.docs("spots")) == {"a", "b", "c"}
        assert store.docs("spots")["a"]["seedVersion"] == "2.0.0"
        assert store.docs("spots")["a"]["createdAt"] == FIXED_NOW_ISO
        assert store.commit_attempts == 2

    def test_second_chunk_commit_failure(self, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        store = FakeStore(fail_commits={2})
        result = seed_collection(
            store, "spots", abc_records, SeedOptions(batch_size=2), clock=fixed_clock, sleep=no_sleep
        )

        assert (result.total_records, result.success_count, result.error_count) == (3, 2, 1)
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Batch 2:")
        assert set(store.docs("spots")) == {"a", "b"}
        assert not result.fatal

    def test_middle_chunk_failure_does_not_stop_later_chunks(self, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        records = [{"id": f"r{i}"} for i in range(5)]
        store = FakeStore(fail_commits={2})
        result = seed_collection(
            store, "spots", records, SeedOptions(batch_size=2), clock=fixed_clock, sleep=no_sleep
        )

        assert store.commit_attempts == 3
        assert (result.success_count, result.error_count) == (3, 2)
        assert set(store.docs("spots")) == {"r0", "r1", "r4"}
        assert result.success_count + result.error_count == result.total_records

    def test_generated_ids_for_records_without_id(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection

        result = seed_collection(
            store, "notes", [{"text": "x"}, {"text": "y"}], clock=fixed_clock, sleep=no_sleep
        )

        assert result.success_count == 2
        assert set(store.docs("notes")) == {"auto-1", "auto-2"}

    def test_invalid_records_are_counted_and_excluded(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        records = [{"id": "ok"}, {"id": True}, "not-an-object", {"id": "also-ok"}]
        result = seed_collection(
            store, "spots", records, SeedOptions(batch_size=10), clock=fixed_clock, sleep=no_sleep
        )

        assert (result.success_count, result.error_count) == (2, 2)
        assert set(store.docs("spots")) == {"ok", "also-ok"}
        assert result.errors[0].startswith("Record #1:")
        assert result.errors[1].startswith("Record #2:")

    def test_chunk_with_only_invalid_records_skips_commit(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        options = SeedOptions(batch_size=2, require_id=True)
        result = seed_collection(
            store, "spots", [{"title": "A"}, {"title": "B"}], options, clock=fixed_clock, sleep=no_sleep
        )

        assert store.commit_attempts == 0
        assert result.error_count == 2
        assert result.errors[0] == "Document A: missing identifying key (id)"

    def test_validator_rejects_records(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.errors import RecordValidationError

        def validator(record: Any) -> None:
            if "title" not in record:
                raise RecordValidationError("title is required")

        result = seed_collection(
            store,
            "spots",
            [{"id": "a", "title": "A"}, {"id": "b"}],
            validator=validator,
            clock=fixed_clock,
            sleep=no_sleep,
        )

        assert (result.success_count, result.error_count) == (1, 1)
        assert result.errors == ["Document b: title is required"]

    def test_empty_records(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection

        result = seed_collection(store, "spots", [], clock=fixed_clock, sleep=no_sleep)

        assert (result.total_records, result.success_count, result.error_count) == (0, 0, 0)
        assert store.commit_attempts == 0

    def test_label_defaults_to_collection(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection

        assert seed_collection(store, "spots", [], clock=fixed_clock, sleep=no_sleep).label == "spots"
        result = seed_collection(store, "spots", [], label="Spots", clock=fixed_clock, sleep=no_sleep)
        assert result.label == "Spots"

    def test_commit_timeout_is_passed_to_store(self, store: FakeStore, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        options = SeedOptions(batch_size=2, commit_timeout=5.0)
        seed_collection(store, "spots", abc_records, options, clock=fixed_clock, sleep=no_sleep)

        assert store.commit_timeouts == [5.0, 5.0]


class TestChunkDelay:
    def test_delay_only_between_chunks(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        records = [{"id": f"r{i}"} for i in range(5)]
        seed_collection(
            store,
            "spots",
            records,
            SeedOptions(batch_size=2, chunk_delay=0.1),
            clock=fixed_clock,
            sleep=no_sleep,
        )

        assert no_sleep.delays == [0.1, 0.1]

    def test_no_delay_for_single_chunk(self, store: FakeStore, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        seed_collection(
            store,
            "spots",
            abc_records,
            SeedOptions(batch_size=10, chunk_delay=0.2),
            clock=fixed_clock,
            sleep=no_sleep,
        )

        assert no_sleep.delays == []


# =============================================================================
# clear_collection
# =============================================================================


class TestClearExisting:
    def test_clear_removes_stale_documents(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        store.collections["spots"] = {f"old-{i}": {"x": i} for i in range(5)}
        result = seed_collection(
            store,
            "spots",
            [{"id": "new"}],
            SeedOptions(batch_size=2, clear_existing=True),
            clock=fixed_clock,
            sleep=no_sleep,
        )

        assert result.success_count == 1
        assert set(store.docs("spots")) == {"new"}
        # three delete batches of at most 2, then one write batch
        assert [len(b) for b in store.committed_batches] == [2, 2, 1, 1]

    def test_clear_collection_returns_count(self, store: FakeStore) -> None:
        from src.seeding.batch import clear_collection

        store.collections["spots"] = {"a": {}, "b": {}, "c": {}}

        assert clear_collection(store, "spots", batch_size=2) == 3
        assert store.docs("spots") == {}
        assert clear_collection(store, "spots", batch_size=2) == 0

    def test_clear_failure_fails_whole_unit(self, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        store = FakeStore(fail_list={"spots"})
        result = seed_collection(
            store,
            "spots",
            abc_records,
            SeedOptions(clear_existing=True),
            clock=fixed_clock,
            sleep=no_sleep,
        )

        assert result.fatal
        assert (result.success_count, result.error_count) == (0, 3)
        assert result.errors[0].startswith("Clear error:")
        assert store.docs("spots") == {}

    def test_clear_raises_clear_collection_error(self) -> None:
        from src.seeding.batch import clear_collection
        from src.seeding.errors import ClearCollectionError

        store = FakeStore(fail_commits={1})
        store.collections["spots"] = {"a": {}}

        with pytest.raises(ClearCollectionError, match="Failed to clear spots"):
            clear_collection(store, "spots", batch_size=10)

    def test_reseed_with_clear_is_idempotent(self, store: FakeStore, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        options = SeedOptions(batch_size=2, clear_existing=True)
        seed_collection(store, "spots", abc_records, options, clock=fixed_clock, sleep=no_sleep)
        first = {k: dict(v) for k, v in store.docs("spots").items()}
        seed_collection(store, "spots", abc_records, options, clock=fixed_clock, sleep=no_sleep)

        assert store.docs("spots") == first

    def test_duplicate_ids_overwrite(self, store: FakeStore, fixed_clock, no_sleep) -> None:
        from src.seeding.batch import seed_collection
        from src.seeding.models import SeedOptions

        records = [{"id": "a"}, {"id": "a", "v": 2}, {"id": "b"}]
        options = SeedOptions(batch_size=2, clear_existing=True)

        for _ in range(2):
            seed_collection(store, "spots", records, options, clock=fixed_clock, sleep=no_sleep)

        docs = store.docs("spots")
        assert len(docs) == 2
        assert docs["a"]["v"] == 2

    def test_unexpected_error_marks_unit_failed(self, store: FakeStore, fixed_clock, no_sleep, abc_records) -> None:
        from src.seeding.batch import seed_collection

        def broken_clock():
            raise RuntimeError("clock broke")

        result = seed_collection(store, "spots", abc_records, clock=broken_clock, sleep=no_sleep)

        assert result.fatal
        assert result.error_count == 3
        assert result.errors == ["Collection error: clock broke"]
