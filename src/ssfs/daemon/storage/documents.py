"""Keyed document store backing account records.

Two backends share one narrow interface: Firestore for deployments and an
in-memory store for local runs and tests. Both offer `run_transaction`, the
primitive the quota ledger uses for its read-decide-write.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Protocol, TypeVar

from google.cloud import firestore

from ..errors import StoreFailureError
from ..utils.logging_config import StructuredLogger

logger = StructuredLogger(__name__)

T = TypeVar("T")

# Receives the current document (None when absent) and returns
# (fields to update or None, value handed back to the caller).
Mutator = Callable[[dict[str, Any] | None], tuple[dict[str, Any] | None, T]]


class DocumentStore(Protocol):
    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None: ...

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None: ...

    def run_transaction(self, collection: str, doc_id: str, mutator: Mutator[T]) -> T: ...


class InMemoryDocumentStore:
    """Thread-safe dict-backed store with one lock per existing document.

    Meant for local runs and tests. Locks are only allocated for documents
    that exist, so lookups of unknown ids do not grow the lock table.
    Documents are never deleted, so a document that exists keeps its lock.
    """

    def __init__(self, seed: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(seed or {})
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, collection: str, doc_id: str) -> threading.Lock | None:
        key = (collection, doc_id)
        with self._locks_guard:
            if doc_id not in self._collections.get(collection, {}):
                return None
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def put(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._locks_guard:
            docs = self._collections.setdefault(collection, {})
            if doc_id not in docs:
                docs[doc_id] = dict(data)
                return
        with self._lock_for(collection, doc_id):
            self._collections[collection][doc_id] = dict(data)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        lock = self._lock_for(collection, doc_id)
        if lock is None:
            return None
        with lock:
            return dict(self._collections[collection][doc_id])

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        lock = self._lock_for(collection, doc_id)
        if lock is None:
            raise StoreFailureError(
                "Document not found", {"collection": collection, "doc_id": doc_id}
            )
        with lock:
            self._collections[collection][doc_id].update(fields)

    def run_transaction(self, collection: str, doc_id: str, mutator: Mutator[T]) -> T:
        lock = self._lock_for(collection, doc_id)
        if lock is None:
            patch, result = mutator(None)
            if patch:
                raise StoreFailureError(
                    "Cannot update missing document",
                    {"collection": collection, "doc_id": doc_id},
                )
            return result
        with lock:
            doc = self._collections[collection][doc_id]
            patch, result = mutator(dict(doc))
            if patch:
                doc.update(patch)
            return result


class FirestoreDocumentStore:
    def __init__(self, client: Any = None, *, project: str | None = None, database: str | None = None) -> None:
        self._client = client or firestore.Client(project=project, database=database)

    def _ref(self, collection: str, doc_id: str):
        return self._client.collection(collection).document(doc_id)

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        snap = self._ref(collection, doc_id).get()
        if not snap or not snap.exists:
            return None
        return snap.to_dict() or {}

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        self._ref(collection, doc_id).update(fields)

    def run_transaction(self, collection: str, doc_id: str, mutator: Mutator[T]) -> T:
        ref = self._ref(collection, doc_id)
        transaction = self._client.transaction()

        # Firestore re-runs the function when the document changed underneath it,
        # so the mutator must stay free of side effects.
        @firestore.transactional
        def _apply(txn):
            snapshot = ref.get(transaction=txn)
            current = (snapshot.to_dict() or {}) if snapshot.exists else None
            patch, result = mutator(current)
            if patch:
                txn.update(ref, patch)
            return result

        return _apply(transaction)
