"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps the install small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

The REST API has no streaming listen endpoint, so live queries are served
by polling runQuery and diffing successive results (see _QueryWatch).
Transactions use beginTransaction / commit / rollback and are retried when
the commit is ABORTED by a concurrent writer.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from fireeats.application.dtos.documents import (
    DocumentSnapshot,
    ListenerRegistration,
    SnapshotCallback,
    compute_changes,
)
from fireeats.application.interfaces.store import TransactionFunction
from fireeats.domain.exceptions import (
    FireEatsException,
    ResourceNotFoundException,
    TransactionConflictException,
    TransactionFailedException,
    ValidationException,
)
from fireeats.infrastructure.exceptions import StoreUnavailableError
from fireeats.infrastructure.firebase._rest_encoding import (
    decode_fields,
    encode_fields,
    encode_value,
)
from fireeats.shared.utils.generators import generate_document_id

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"

_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "EQUAL": "EQUAL",
}


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    *,
    params: dict[str, str] | None = None,
    missing_ok: bool = False,
) -> Any:
    """Perform async HTTP request to the Firestore REST API.

    404 returns None when missing_ok, otherwise raises ResourceNotFoundException.
    409 (ABORTED) raises TransactionConflictException.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method in ("GET", "DELETE"):
        resp = await client.request(method, url, headers=headers, params=params)
    elif method in ("PATCH", "POST"):
        resp = await client.request(method, url, headers=headers, params=params, json=body)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        if missing_ok:
            return None
        raise ResourceNotFoundException("document", url.split("/documents/", 1)[-1])
    if resp.status_code == 409:
        raise TransactionConflictException(url.split("/documents/", 1)[-1])
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


def _mask_params(field_paths: list[str]) -> list[tuple[str, str]]:
    return [("updateMask.fieldPaths", f) for f in field_paths]


class FirestoreDocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str) -> None:
        parts = [p for p in path.strip("/").split("/") if p]
        if not parts or len(parts) % 2 != 0:
            raise ValidationException(f"Not a document path: {path!r}", field="path")
        self._client = client
        self._path = "/".join(parts)

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        """Full resource name (projects/.../documents/{path})."""
        return f"{self._client.prefix}/{self._path}"

    def collection(self, collection_id: str) -> FirestoreCollectionReference:
        return FirestoreCollectionReference(self._client, f"{self._path}/{collection_id}")

    async def get(self) -> DocumentSnapshot:
        """Fetch the document; snapshot.exists is False if not found."""
        return await self._client._get_document(self, transaction_id=None)

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document."""
        await self._client._commit([self._client._set_write(self, data)], None)

    async def update(self, data: dict[str, Any]) -> None:
        """Merge fields into the existing document (fails if missing)."""
        await self._client._commit([self._client._update_write(self, data)], None)

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing."""
        await self._client._commit([{"delete": self.name}], None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FirestoreDocumentReference):
            return NotImplemented
        return self._client is other._client and self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"FirestoreDocumentReference({self._path!r})"


class FirestoreQuery:
    """Immutable query; runs via runQuery (filter/order/limit on server)."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        collection_path: str,
        *,
        filters: tuple[tuple[str, str, Any], ...] = (),
        orders: tuple[tuple[str, str], ...] = (),
        limit: int | None = None,
    ) -> None:
        self._client = client
        self._collection_path = collection_path
        self._filters = filters
        self._orders = orders
        self._limit = limit

    def _copy(self, **changes: Any) -> FirestoreQuery:
        values = {
            "filters": self._filters,
            "orders": self._orders,
            "limit": self._limit,
        }
        values.update(changes)
        return FirestoreQuery(self._client, self._collection_path, **values)

    def where(self, field: str, op: str, value: Any) -> FirestoreQuery:
        if op not in _OP_MAP:
            raise ValidationException(f"Unsupported filter operator: {op!r}", field="op")
        return self._copy(filters=self._filters + ((field, _OP_MAP[op], value),))

    def order_by(self, field: str, direction: str = "ASCENDING") -> FirestoreQuery:
        direction = direction.upper()
        if direction not in ("ASCENDING", "DESCENDING"):
            raise ValidationException(f"Unsupported direction: {direction!r}", field="direction")
        return self._copy(orders=self._orders + ((field, direction),))

    def limit(self, count: int) -> FirestoreQuery:
        if count < 1:
            raise ValidationException("Query limit must be at least 1", field="limit")
        return self._copy(limit=count)

    def _structured_query(self) -> dict[str, Any]:
        collection_id = self._collection_path.rsplit("/", 1)[-1]
        structured: dict[str, Any] = {"from": [{"collectionId": collection_id}]}
        field_filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": encode_value(value),
                }
            }
            for field, op, value in self._filters
        ]
        if len(field_filters) == 1:
            structured["where"] = field_filters[0]
        elif field_filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": field_filters}
            }
        if self._orders:
            structured["orderBy"] = [
                {"field": {"fieldPath": field}, "direction": direction}
                for field, direction in self._orders
            ]
        if self._limit:
            structured["limit"] = self._limit
        return structured

    async def get(self) -> list[DocumentSnapshot]:
        """Execute the query and return document snapshots in order."""
        parent = self._collection_path.rsplit("/", 1)[0] if "/" in self._collection_path else ""
        parent_name = f"{self._client.prefix}/{parent}" if parent else self._client.prefix
        resp = await _request_async(
            self._client.http,
            f"{self._client.base_url}/{parent_name}:runQuery",
            method="POST",
            body={"structuredQuery": self._structured_query()},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        snapshots: list[DocumentSnapshot] = []
        for item in items:
            if "document" not in item:
                continue
            snapshots.append(self._client._snapshot_from_document(item["document"]))
        return snapshots

    def on_snapshot(self, callback: SnapshotCallback) -> ListenerRegistration:
        """Start a polling live query. Must be called inside a running event loop."""
        watch = _QueryWatch(self, callback, self._client.watch_interval)
        self._client._watches.add(watch)
        watch.start()
        return ListenerRegistration(watch.stop)


class FirestoreCollectionReference(FirestoreQuery):
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str) -> None:
        parts = [p for p in path.strip("/").split("/") if p]
        if not parts or len(parts) % 2 != 1:
            raise ValidationException(f"Not a collection path: {path!r}", field="path")
        super().__init__(client, "/".join(parts))

    @property
    def id(self) -> str:
        return self._collection_path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        return self._collection_path

    def document(self, document_id: str | None = None) -> FirestoreDocumentReference:
        doc_id = document_id or generate_document_id()
        return FirestoreDocumentReference(self._client, f"{self._collection_path}/{doc_id}")

    async def add(self, data: dict[str, Any]) -> FirestoreDocumentReference:
        """Create a document with a generated ID and return its reference."""
        ref = self.document()
        await ref.set(data)
        return ref


class FirestoreTransaction:
    """One transaction attempt: reads carry the transaction ID, writes are buffered."""

    def __init__(self, client: FirestoreRESTClient, transaction_id: str) -> None:
        self._client = client
        self.transaction_id = transaction_id
        self._writes: list[dict[str, Any]] = []

    async def get(self, reference: FirestoreDocumentReference) -> DocumentSnapshot:
        if self._writes:
            raise ValidationException("Transactions require all reads before writes")
        return await self._client._get_document(reference, transaction_id=self.transaction_id)

    def set(self, reference: FirestoreDocumentReference, data: dict[str, Any]) -> None:
        self._writes.append(self._client._set_write(reference, data))

    def update(self, reference: FirestoreDocumentReference, data: dict[str, Any]) -> None:
        self._writes.append(self._client._update_write(reference, data))

    def delete(self, reference: FirestoreDocumentReference) -> None:
        self._writes.append({"delete": reference.name})


class _QueryWatch:
    """Polls a query and reports result-set changes to a snapshot callback.

    The first poll always produces a batch (possibly empty). A failed poll
    is reported once as callback([], error) and ends the watch.
    """

    def __init__(self, query: FirestoreQuery, callback: SnapshotCallback, interval: float) -> None:
        self._query = query
        self._callback = callback
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stopped = False

    def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._task = self._loop.create_task(self._run(), name="firestore-query-watch")

    def stop(self) -> None:
        self._stopped = True
        self._query._client._watches.discard(self)
        task, loop = self._task, self._loop
        if task is None or task.done() or loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            task.cancel()
        else:
            loop.call_soon_threadsafe(task.cancel)

    async def _run(self) -> None:
        previous: list[DocumentSnapshot] = []
        first = True
        while not self._stopped:
            try:
                current = await self._query.get()
            except (httpx.HTTPError, FireEatsException) as exc:
                if self._stopped:
                    return
                logger.warning("Firestore watch poll failed: %s", exc)
                self._stopped = True
                self._query._client._watches.discard(self)
                error = exc if isinstance(exc, FireEatsException) else StoreUnavailableError("watch", str(exc))
                self._callback([], error)
                return
            if self._stopped:
                return
            changes = compute_changes(previous, current)
            if first or changes:
                self._callback(changes, None)
            previous = current
            first = False
            await asyncio.sleep(self._interval)


class FirestoreRESTClient:
    """Lightweight Firestore client using the REST API (no firebase-admin).

    credentials may be None when talking to the Firestore emulator
    (base_url pointing at http://{FIRESTORE_EMULATOR_HOST}/v1).
    """

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = _BASE,
        watch_interval: float = 2.0,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self.prefix = f"projects/{project_id}/databases/(default)/documents"
        self.base_url = base_url.rstrip("/")
        self.watch_interval = watch_interval
        self.http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None
        self._watches: set[_QueryWatch] = set()

    async def aclose(self) -> None:
        """Stop live queries and close the HTTP client if we created it."""
        for watch in list(self._watches):
            watch.stop()
        if self._owns_http:
            await self.http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> FirestoreCollectionReference:
        return FirestoreCollectionReference(self, collection_id)

    def document(self, path: str) -> FirestoreDocumentReference:
        return FirestoreDocumentReference(self, path)

    async def run_transaction(self, fn: TransactionFunction[Any], max_attempts: int = 5) -> Any:
        """Run fn in a read-write transaction, retrying when Firestore aborts it."""
        retry_id: str | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                transaction_id = await self._begin_transaction(retry_id)
            except httpx.HTTPError as exc:
                raise TransactionFailedException(
                    f"Transaction begin failed: {exc}", attempts=attempt
                ) from exc
            transaction = FirestoreTransaction(self, transaction_id)
            try:
                result = await fn(transaction)
                await self._commit(transaction._writes, transaction_id)
            except TransactionConflictException:
                logger.info("Transaction aborted on attempt %d/%d", attempt, max_attempts)
                retry_id = transaction_id
                continue
            except httpx.HTTPError as exc:
                await self._rollback(transaction_id)
                raise TransactionFailedException(
                    f"Transaction commit failed: {exc}", attempts=attempt
                ) from exc
            except Exception:
                await self._rollback(transaction_id)
                raise
            return result
        raise TransactionFailedException(
            f"Transaction failed after {max_attempts} attempts (concurrent updates)",
            attempts=max_attempts,
        )

    # ---- REST helpers ----

    def _snapshot_from_document(self, doc: dict[str, Any]) -> DocumentSnapshot:
        name = doc.get("name", "")
        path = name.split("/documents/", 1)[-1]
        return DocumentSnapshot(
            FirestoreDocumentReference(self, path), decode_fields(doc.get("fields"))
        )

    def _set_write(self, reference: FirestoreDocumentReference, data: dict[str, Any]) -> dict[str, Any]:
        return {"update": {"name": reference.name, "fields": encode_fields(data)}}

    def _update_write(self, reference: FirestoreDocumentReference, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "update": {"name": reference.name, "fields": encode_fields(data)},
            "updateMask": {"fieldPaths": list(data.keys())},
            "currentDocument": {"exists": True},
        }

    async def _get_document(
        self, reference: FirestoreDocumentReference, transaction_id: str | None
    ) -> DocumentSnapshot:
        params = {"transaction": transaction_id} if transaction_id else None
        out = await _request_async(
            self.http,
            f"{self.base_url}/{reference.name}",
            access_token=await self.get_token(),
            params=params,
            missing_ok=True,
        )
        if not out:
            return DocumentSnapshot(reference, {}, exists=False)
        return DocumentSnapshot(reference, decode_fields(out.get("fields")))

    async def _begin_transaction(self, retry_id: str | None) -> str:
        body: dict[str, Any] = {}
        if retry_id:
            body["options"] = {"readWrite": {"retryTransaction": retry_id}}
        out = await _request_async(
            self.http,
            f"{self.base_url}/{self.prefix}:beginTransaction",
            method="POST",
            body=body,
            access_token=await self.get_token(),
        )
        transaction_id = (out or {}).get("transaction")
        if not transaction_id:
            raise StoreUnavailableError("beginTransaction", "response has no transaction id")
        return transaction_id

    async def _commit(self, writes: list[dict[str, Any]], transaction_id: str | None) -> None:
        body: dict[str, Any] = {"writes": writes}
        if transaction_id:
            body["transaction"] = transaction_id
        await _request_async(
            self.http,
            f"{self.base_url}/{self.prefix}:commit",
            method="POST",
            body=body,
            access_token=await self.get_token(),
        )

    async def _rollback(self, transaction_id: str) -> None:
        try:
            await _request_async(
                self.http,
                f"{self.base_url}/{self.prefix}:rollback",
                method="POST",
                body={"transaction": transaction_id},
                access_token=await self.get_token(),
                missing_ok=True,
            )
        except (httpx.HTTPError, FireEatsException):
            logger.warning("Transaction rollback failed", exc_info=True)
