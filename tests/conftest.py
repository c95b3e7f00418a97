"""Pytest configuration and fixtures for the seeding pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest

from src.seeding.config import EnvironmentSettings, SeedTarget
from src.seeding.errors import StoreError
from src.seeding.store import DocumentStore

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
FIXED_NOW_ISO = "2025-01-02T03:04:05.678Z"


# ============================================================================
# In-memory document store
# ============================================================================


@dataclass(frozen=True)
class FakeRef:
    """Reference to a document in FakeStore."""

    collection: str
    id: str


class FakeBatch:
    """Batched write that applies all operations or none."""

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.operations: list[tuple[str, FakeRef, dict[str, Any] | None]] = []

    def set(self, ref: FakeRef, data: Mapping[str, Any]) -> None:
        self.operations.append(("set", ref, dict(data)))

    def delete(self, ref: FakeRef) -> None:
        self.operations.append(("delete", ref, None))

    def commit(self, timeout: float | None = None) -> None:
        self._store.commit_attempts += 1
        self._store.commit_timeouts.append(timeout)
        if self._store.commit_attempts in self._store.fail_commits:
            raise StoreError(f"simulated failure of commit {self._store.commit_attempts}")

        for op, ref, data in self.operations:
            docs = self._store.collections.setdefault(ref.collection, {})
            if op == "set":
                docs[ref.id] = data
            else:
                docs.pop(ref.id, None)
            self._store.writes += 1
        self._store.committed_batches.append(list(self.operations))


class FakeStore(DocumentStore):
    """DocumentStore kept in memory, with injectable failures.

    Args:
        fail_commits: 1-based commit attempt numbers that raise StoreError
        fail_list: Collections whose listing raises StoreError
        fail_documents: Document ids whose single-document write fails
        document_error: Exception raised as-is by every single-document write
    """

    def __init__(
        self,
        fail_commits: set[int] | None = None,
        fail_list: set[str] | None = None,
        fail_documents: set[str] | None = None,
        document_error: Exception | None = None,
    ) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.fail_commits = fail_commits or set()
        self.fail_list = fail_list or set()
        self.fail_documents = fail_documents or set()
        self.document_error = document_error
        self.commit_attempts = 0
        self.commit_timeouts: list[float | None] = []
        self.committed_batches: list[list[tuple[str, FakeRef, dict[str, Any] | None]]] = []
        self.writes = 0
        self.closed = False
        self._generated = 0

    def list_documents(self, collection: str) -> list[FakeRef]:
        if collection in self.fail_list:
            raise StoreError(f"simulated listing failure for {collection}")
        return [FakeRef(collection, doc_id) for doc_id in self.collections.get(collection, {})]

    def document(self, collection: str, document_id: str | None = None) -> FakeRef:
        if document_id is None:
            self._generated += 1
            document_id = f"auto-{self._generated}"
        return FakeRef(collection, document_id)

    def batch(self) -> FakeBatch:
        return FakeBatch(self)

    def set_document(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
        timeout: float | None = None,
    ) -> None:
        if self.document_error is not None:
            raise self.document_error
        if document_id in self.fail_documents:
            raise StoreError(f"simulated write failure for {document_id}")
        self.collections.setdefault(collection, {})[document_id] = dict(data)
        self.writes += 1

    def close(self) -> None:
        self.closed = True

    def docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self.collections.get(collection, {})


# ============================================================================
# Store and settings fixtures
# ============================================================================


@pytest.fixture
def store() -> FakeStore:
    """Empty in-memory store."""
    return FakeStore()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    """Sleep replacement that records requested delays without waiting."""
    delays: list[float] = []

    def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep


@pytest.fixture
def emulator_settings(seed_data_dir: Path) -> EnvironmentSettings:
    return EnvironmentSettings(target=SeedTarget.EMULATOR, data_path=seed_data_dir)


@pytest.fixture
def production_settings(seed_data_dir: Path) -> EnvironmentSettings:
    return EnvironmentSettings(
        target=SeedTarget.PRODUCTION,
        project_id="heritage-prod",
        data_path=seed_data_dir,
    )


@pytest.fixture(autouse=True)
def clean_seed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of the developer's seed environment."""
    for name in (
        "SEED_TARGET",
        "FIREBASE_PROJECT_ID",
        "VITE_FIREBASE_PROJECT_ID",
        "SEED_DATA_PATH",
        "SEED_VERSION",
        "GOOGLE_APPLICATION_CREDENTIALS",
        "FIRESTORE_EMULATOR_HOST",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("src.seeding.config.load_dotenv", lambda *args, **kwargs: False)


# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def bundled_data_dir(project_root: Path) -> Path:
    """Return the shipped data/seed directory."""
    return project_root / "data" / "seed"


@pytest.fixture
def schemas_dir(project_root: Path) -> Path:
    """Return the schemas directory."""
    return project_root / "schemas"


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Factory fixture writing JSON files into a temporary data directory."""
    data_dir = tmp_path / "seed"
    data_dir.mkdir(exist_ok=True)

    def _write(name: str, data: Any) -> Path:
        path = data_dir / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def seed_data_dir(tmp_path: Path, write_json: Callable[[str, Any], Path]) -> Path:
    """A small but complete content bundle."""
    write_json(
        "seed-configuration-refined.json",
        {
            "collections": [
                {"name": "siteConfig", "staticData": {"siteName": "Test Site"}},
                {"name": "navigationContent", "staticData": {"items": []}},
                {"name": "footerContent", "staticData": {"copyright": "test"}},
            ]
        },
    )
    write_json(
        "landing-page-content.json",
        {
            "heroSection": {"title": "Hero"},
            "introductionSection": {"title": "Intro", "highlights": ["a"]},
        },
    )
    write_json(
        "heritage-spots-refined.json",
        [{"id": "spot-1", "title": "Spot 1"}, {"id": "spot-2", "title": "Spot 2"}],
    )
    write_json(
        "documents-refined.json",
        {
            "categories": [{"id": "cat-1", "title": "Category"}],
            "documents": [{"id": "doc-1", "title": "Doc"}],
        },
    )
    write_json(
        "mini-games-refined.json",
        {"games": [{"id": "game-1", "title": "Game", "gameType": "timeline_quiz"}]},
    )
    write_json(
        "vr-content-refined.json",
        {
            "vrExperiences": [{"id": "vr-1", "title": "VR"}],
            "vrSettings": {"autoRotate": False},
        },
    )
    return tmp_path / "seed"


@pytest.fixture
def abc_records() -> list[dict[str, Any]]:
    return [{"id": "a"}, {"id": "b"}, {"id": "c"}]


# ============================================================================
# Markers
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )
    config.addinivalue_line(
        "markers",
        "requires_firestore: marks tests requiring the Firestore emulator",
    )
