"""Document store adapter.

The pipeline only needs five primitives from a store: list the documents
of a collection, build a document reference, open a batched write, write
one document, and close. DocumentStore captures that contract;
FirestoreStore implements it on google-cloud-firestore.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, Protocol

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

from .errors import StoreError, StoreInitializationError

if TYPE_CHECKING:
    from google.cloud.firestore import Client, WriteBatch as FirestoreWriteBatch

    from .config import EnvironmentSettings

logger = logging.getLogger(__name__)


class WriteBatch(Protocol):
    """An atomic multi-document write."""

    def set(self, ref: Any, data: Mapping[str, Any]) -> None: ...

    def delete(self, ref: Any) -> None: ...

    def commit(self, timeout: float | None = None) -> None: ...


class DocumentStore(ABC):
    """Minimal document database contract used by the seeders."""

    @abstractmethod
    def list_documents(self, collection: str) -> list[Any]:
        """Return references to every document in a collection."""

    @abstractmethod
    def document(self, collection: str, document_id: str | None = None) -> Any:
        """Return a document reference; a None id gets a store-generated one."""

    @abstractmethod
    def batch(self) -> WriteBatch:
        """Open a new batched write."""

    @abstractmethod
    def set_document(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
        timeout: float | None = None,
    ) -> None:
        """Write a single document, replacing any existing content."""

    def count_documents(self, collection: str) -> int:
        return len(self.list_documents(collection))

    def close(self) -> None:
        """Release client resources."""


class _FirestoreBatch:
    """Wraps a Firestore WriteBatch so commit failures surface as StoreError."""

    def __init__(self, batch: FirestoreWriteBatch) -> None:
        self._batch = batch

    def set(self, ref: Any, data: Mapping[str, Any]) -> None:
        self._batch.set(ref, dict(data))

    def delete(self, ref: Any) -> None:
        self._batch.delete(ref)

    def commit(self, timeout: float | None = None) -> None:
        try:
            self._batch.commit(timeout=timeout)
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StoreError(str(e)) from e


class FirestoreStore(DocumentStore):
    """DocumentStore backed by a google-cloud-firestore Client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        return self._client

    def list_documents(self, collection: str) -> list[Any]:
        try:
            return list(self._client.collection(collection).list_documents())
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StoreError(f"Failed to list {collection}: {e}") from e

    def document(self, collection: str, document_id: str | None = None) -> Any:
        if document_id is None:
            return self._client.collection(collection).document()
        return self._client.collection(collection).document(document_id)

    def batch(self) -> WriteBatch:
        return _FirestoreBatch(self._client.batch())

    def set_document(
        self,
        collection: str,
        document_id: str,
        data: Mapping[str, Any],
        timeout: float | None = None,
    ) -> None:
        try:
            self._client.collection(collection).document(document_id).set(
                dict(data), timeout=timeout
            )
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StoreError(str(e)) from e

    def close(self) -> None:
        self._client.close()


def _load_credentials(settings: EnvironmentSettings) -> Any:
    if settings.credentials_path is None:
        logger.warning("No service account file found, using Application Default Credentials")
        return None

    from google.oauth2 import service_account

    logger.info(f"Using service account: {settings.credentials_path.name}")
    return service_account.Credentials.from_service_account_file(str(settings.credentials_path))


def create_store(settings: EnvironmentSettings) -> FirestoreStore:
    """Create a Firestore-backed store for the configured target.

    Raises:
        StoreInitializationError: If no client can be built
    """
    from google.cloud import firestore

    if not settings.project_id:
        raise StoreInitializationError(
            "FIREBASE_PROJECT_ID (or VITE_FIREBASE_PROJECT_ID) must be set"
        )

    try:
        if settings.is_production:
            client = firestore.Client(
                project=settings.project_id,
                credentials=_load_credentials(settings),
            )
        else:
            os.environ["FIRESTORE_EMULATOR_HOST"] = settings.emulator_host
            client = firestore.Client(project=settings.project_id)
    except (GoogleAuthError, GoogleAPIError, OSError, ValueError) as e:
        raise StoreInitializationError(
            f"Could not initialize Firestore for {settings.target.value}: {e}"
        ) from e

    logger.info(f"Connected to Firestore project {settings.project_id} ({settings.target.value})")
    return FirestoreStore(client)
