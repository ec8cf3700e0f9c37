"""In-process document store with live queries and optimistic transactions.

Implements the DocumentStore protocol without a network: documents live in
a dict keyed by path, each with a version number. Transactions record the
versions they read and fail with a conflict at commit if any changed; the
commit applies its writes to a staged copy and swaps it in, so a failing
write leaves nothing behind. Live queries re-run after every commit and
receive compute_changes() batches on the committing thread.

Used for DATABASE_BACKEND=memory and as the deterministic fake in tests
(inject_conflicts, fail_writes_to, fail_listeners).
"""

from __future__ import annotations

import copy
import functools
import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fireeats.application.dtos.documents import (
    DocumentSnapshot,
    ListenerRegistration,
    SnapshotCallback,
    compute_changes,
)
from fireeats.application.interfaces.store import TransactionFunction
from fireeats.domain.exceptions import (
    ResourceNotFoundException,
    TransactionConflictException,
    TransactionFailedException,
    ValidationException,
)
from fireeats.infrastructure.exceptions import StoreWriteError
from fireeats.shared.utils.generators import generate_document_id

logger = logging.getLogger(__name__)

_ASCENDING = "ASCENDING"
_DESCENDING = "DESCENDING"


def _type_rank(value: Any) -> int:
    """Firestore cross-type ordering: null < bool < number < timestamp < string < bytes < array < map."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1
    if isinstance(value, (int, float)):
        return 2
    if isinstance(value, datetime):
        return 3
    if isinstance(value, str):
        return 4
    if isinstance(value, bytes):
        return 5
    if isinstance(value, list):
        return 6
    return 7


def _compare_values(a: Any, b: Any) -> int:
    rank_a, rank_b = _type_rank(a), _type_rank(b)
    if rank_a != rank_b:
        return -1 if rank_a < rank_b else 1
    if rank_a in (0, 7):
        return 0
    if a == b:
        return 0
    return -1 if a < b else 1


def _values_equal(a: Any, b: Any) -> bool:
    return _type_rank(a) == _type_rank(b) and a == b


def _split_path(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise ValidationException("Document path must not be empty", field="path")
    return parts


@dataclass(frozen=True)
class _Filter:
    field: str
    value: Any


@dataclass(frozen=True)
class _Order:
    field: str
    direction: str


class MemoryDocumentReference:
    """Reference to a document in a MemoryDocumentStore."""

    def __init__(self, store: MemoryDocumentStore, path: str) -> None:
        parts = _split_path(path)
        if len(parts) % 2 != 0:
            raise ValidationException(f"Not a document path: {path!r}", field="path")
        self._store = store
        self._path = "/".join(parts)

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> MemoryCollectionReference:
        return MemoryCollectionReference(self._store, self._path.rsplit("/", 1)[0])

    def collection(self, collection_id: str) -> MemoryCollectionReference:
        return MemoryCollectionReference(self._store, f"{self._path}/{collection_id}")

    async def get(self) -> DocumentSnapshot:
        snapshot, _ = self._store._read(self)
        return snapshot

    async def set(self, data: dict[str, Any]) -> None:
        self._store._commit({}, [("set", self, data)])

    async def update(self, data: dict[str, Any]) -> None:
        self._store._commit({}, [("update", self, data)])

    async def delete(self) -> None:
        self._store._commit({}, [("delete", self, None)])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MemoryDocumentReference):
            return NotImplemented
        return self._store is other._store and self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"MemoryDocumentReference({self._path!r})"


class MemoryQuery:
    """Immutable query over one collection; builder methods return new queries."""

    def __init__(
        self,
        store: MemoryDocumentStore,
        collection_path: str,
        filters: tuple[_Filter, ...] = (),
        orders: tuple[_Order, ...] = (),
        limit: int | None = None,
    ) -> None:
        self._store = store
        self._collection_path = collection_path
        self._filters = filters
        self._orders = orders
        self._limit = limit

    def where(self, field: str, op: str, value: Any) -> MemoryQuery:
        if op not in ("==", "EQUAL"):
            raise ValidationException(f"Unsupported filter operator: {op!r}", field="op")
        return MemoryQuery(
            self._store,
            self._collection_path,
            self._filters + (_Filter(field, value),),
            self._orders,
            self._limit,
        )

    def order_by(self, field: str, direction: str = _ASCENDING) -> MemoryQuery:
        direction = direction.upper()
        if direction not in (_ASCENDING, _DESCENDING):
            raise ValidationException(f"Unsupported direction: {direction!r}", field="direction")
        return MemoryQuery(
            self._store,
            self._collection_path,
            self._filters,
            self._orders + (_Order(field, direction),),
            self._limit,
        )

    def limit(self, count: int) -> MemoryQuery:
        if count < 1:
            raise ValidationException("Query limit must be at least 1", field="limit")
        return MemoryQuery(
            self._store,
            self._collection_path,
            self._filters,
            self._orders,
            count,
        )

    async def get(self) -> list[DocumentSnapshot]:
        with self._store._lock:
            return self._store._evaluate(self)

    def on_snapshot(self, callback: SnapshotCallback) -> ListenerRegistration:
        return self._store._add_listener(self, callback)

    def _matches(self, path: str, data: dict[str, Any]) -> bool:
        if path.rsplit("/", 1)[0] != self._collection_path:
            return False
        for f in self._filters:
            if f.field not in data or not _values_equal(data[f.field], f.value):
                return False
        # Documents without an ordered field are excluded, as in Firestore.
        return all(o.field in data for o in self._orders)

    def _compare(self, a: DocumentSnapshot, b: DocumentSnapshot) -> int:
        for order in self._orders:
            result = _compare_values(a.data[order.field], b.data[order.field])
            if result:
                return -result if order.direction == _DESCENDING else result
        if a.id == b.id:
            return 0
        return -1 if a.id < b.id else 1


class MemoryCollectionReference(MemoryQuery):
    """A collection in a MemoryDocumentStore; also the unfiltered query over it."""

    def __init__(self, store: MemoryDocumentStore, path: str) -> None:
        parts = _split_path(path)
        if len(parts) % 2 != 1:
            raise ValidationException(f"Not a collection path: {path!r}", field="path")
        super().__init__(store, "/".join(parts))

    @property
    def id(self) -> str:
        return self._collection_path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        return self._collection_path

    def document(self, document_id: str | None = None) -> MemoryDocumentReference:
        doc_id = document_id or generate_document_id()
        return MemoryDocumentReference(self._store, f"{self._collection_path}/{doc_id}")

    async def add(self, data: dict[str, Any]) -> MemoryDocumentReference:
        """Create a document with a generated ID and return its reference."""
        ref = self.document()
        await ref.set(data)
        return ref


class MemoryTransaction:
    """One transaction attempt: versioned reads, buffered writes."""

    def __init__(self, store: MemoryDocumentStore) -> None:
        self._store = store
        self._reads: dict[str, int] = {}
        self._writes: list[tuple[str, MemoryDocumentReference, dict[str, Any] | None]] = []

    async def get(self, reference: MemoryDocumentReference) -> DocumentSnapshot:
        if self._writes:
            raise ValidationException("Transactions require all reads before writes")
        snapshot, version = self._store._read(reference)
        self._reads[reference.path] = version
        return snapshot

    def set(self, reference: MemoryDocumentReference, data: dict[str, Any]) -> None:
        self._writes.append(("set", reference, data))

    def update(self, reference: MemoryDocumentReference, data: dict[str, Any]) -> None:
        self._writes.append(("update", reference, data))

    def delete(self, reference: MemoryDocumentReference) -> None:
        self._writes.append(("delete", reference, None))


class _Listener:
    def __init__(self, query: MemoryQuery, callback: SnapshotCallback) -> None:
        self.query = query
        self.callback = callback
        self.results: list[DocumentSnapshot] = []


class MemoryDocumentStore:
    """Thread-safe in-memory DocumentStore."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._versions: dict[str, int] = {}
        self._listeners: dict[int, _Listener] = {}
        self._listener_ids = itertools.count(1)
        self._lock = threading.RLock()
        # Serializes listener delivery so batches reach a callback in commit order.
        self._delivery_lock = threading.RLock()
        self._pending_conflicts = 0
        self._failing_paths: set[str] = set()
        self.commit_count = 0

    # ---- DocumentStore API ----

    def collection(self, collection_id: str) -> MemoryCollectionReference:
        return MemoryCollectionReference(self, collection_id)

    def document(self, path: str) -> MemoryDocumentReference:
        return MemoryDocumentReference(self, path)

    async def run_transaction(self, fn: TransactionFunction[Any], max_attempts: int = 5) -> Any:
        for attempt in range(1, max_attempts + 1):
            transaction = MemoryTransaction(self)
            result = await fn(transaction)
            try:
                self._commit(transaction._reads, transaction._writes)
            except TransactionConflictException as exc:
                logger.info(
                    "Transaction conflict on attempt %d/%d: %s",
                    attempt,
                    max_attempts,
                    exc.details.get("path"),
                )
                continue
            except StoreWriteError as exc:
                raise TransactionFailedException(
                    f"Transaction commit failed: {exc.message}", attempts=attempt
                ) from exc
            return result
        raise TransactionFailedException(
            f"Transaction failed after {max_attempts} attempts (concurrent updates)",
            attempts=max_attempts,
        )

    async def aclose(self) -> None:
        with self._lock:
            self._listeners.clear()

    # ---- Test controls ----

    def inject_conflicts(self, count: int = 1) -> None:
        """Make the next `count` transactional commits lose a race with another writer."""
        with self._lock:
            self._pending_conflicts += count

    def fail_writes_to(self, path: str) -> None:
        """Reject any commit that writes the document at path."""
        with self._lock:
            self._failing_paths.add("/".join(_split_path(path)))

    def clear_failures(self) -> None:
        with self._lock:
            self._pending_conflicts = 0
            self._failing_paths.clear()

    def fail_listeners(self, error: Exception) -> None:
        """Deliver error to every live query and end them (e.g. permission revoked)."""
        with self._delivery_lock:
            with self._lock:
                listeners = list(self._listeners.values())
                self._listeners.clear()
            for listener in listeners:
                listener.callback([], error)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    # ---- Internals ----

    def _read(self, reference: MemoryDocumentReference) -> tuple[DocumentSnapshot, int]:
        with self._lock:
            version = self._versions.get(reference.path, 0)
            data = self._documents.get(reference.path)
            if data is None:
                return DocumentSnapshot(reference, {}, exists=False), version
            return DocumentSnapshot(reference, copy.deepcopy(data)), version

    def _evaluate(self, query: MemoryQuery) -> list[DocumentSnapshot]:
        snapshots = [
            DocumentSnapshot(MemoryDocumentReference(self, path), copy.deepcopy(data))
            for path, data in self._documents.items()
            if query._matches(path, data)
        ]
        snapshots.sort(key=functools.cmp_to_key(query._compare))
        if query._limit is not None:
            snapshots = snapshots[: query._limit]
        return snapshots

    def _commit(
        self,
        reads: dict[str, int],
        writes: list[tuple[str, MemoryDocumentReference, dict[str, Any] | None]],
    ) -> None:
        with self._delivery_lock:
            for callback, changes in self._apply_writes(reads, writes):
                callback(changes, None)

    def _apply_writes(
        self,
        reads: dict[str, int],
        writes: list[tuple[str, MemoryDocumentReference, dict[str, Any] | None]],
    ) -> list[tuple[SnapshotCallback, list]]:
        with self._lock:
            if reads and self._pending_conflicts > 0:
                self._pending_conflicts -= 1
                # Simulate another client committing to what this attempt read.
                for path in reads:
                    self._versions[path] = self._versions.get(path, 0) + 1
            for path, version in reads.items():
                if self._versions.get(path, 0) != version:
                    raise TransactionConflictException(path)

            staged = dict(self._documents)
            touched: list[str] = []
            for kind, reference, data in writes:
                path = reference.path
                if path in self._failing_paths:
                    raise StoreWriteError(path, "write rejected by store")
                if kind == "set":
                    staged[path] = copy.deepcopy(data or {})
                elif kind == "update":
                    if path not in staged:
                        raise ResourceNotFoundException("document", path)
                    merged = dict(staged[path])
                    merged.update(copy.deepcopy(data or {}))
                    staged[path] = merged
                else:
                    staged.pop(path, None)
                touched.append(path)

            self._documents = staged
            for path in touched:
                self._versions[path] = self._versions.get(path, 0) + 1
            self.commit_count += 1
            return self._collect_changes()

    def _collect_changes(self) -> list[tuple[SnapshotCallback, list]]:
        pending = []
        for listener in self._listeners.values():
            results = self._evaluate(listener.query)
            changes = compute_changes(listener.results, results)
            listener.results = results
            if changes:
                pending.append((listener.callback, changes))
        return pending

    def _add_listener(self, query: MemoryQuery, callback: SnapshotCallback) -> ListenerRegistration:
        listener = _Listener(query, callback)
        with self._delivery_lock:
            with self._lock:
                listener_id = next(self._listener_ids)
                listener.results = self._evaluate(query)
                self._listeners[listener_id] = listener
                initial = compute_changes([], listener.results)
            # A commit racing this call waits here until the initial batch is out.
            callback(initial, None)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return ListenerRegistration(unsubscribe)
