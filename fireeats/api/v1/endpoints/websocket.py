"""WebSocket live queries: each connection mirrors one query with a LocalCollection.

Every change batch is sent as {"changes": [...], "count": n}. A subscription
error is sent once as {"error": ..., "message": ...} and the socket is closed.
The collection is closed on every exit path (client disconnect, error, shutdown).
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, WebSocket

from fireeats.api.v1.dependencies import FiltersDep, SettingsDep, StoreDep
from fireeats.application.dtos.documents import (
    ChangeType,
    DocumentChange,
    DocumentSnapshot,
)
from fireeats.application.interfaces.store import Query
from fireeats.application.local_collection import LocalCollection
from fireeats.application.services import build_query
from fireeats.core.constants import COLLECTION_RESTAURANTS, SUBCOLLECTION_RATINGS
from fireeats.domain.entities import Restaurant, Review
from fireeats.domain.exceptions import FireEatsException, ValidationException
from fireeats.schemas.restaurant import RestaurantResponse, ReviewResponse
from fireeats.schemas.websocket import ChangeMessage, ErrorMessage, SnapshotMessage

logger = logging.getLogger(__name__)

router = APIRouter()

# Close code for "server error" (RFC 6455 section 7.4.1).
_CLOSE_INTERNAL_ERROR = 1011

Serializer = Callable[[DocumentSnapshot], Any]


async def _reject_websocket(websocket: WebSocket, exc: FireEatsException, code: int = 1008) -> None:
    """Accept then report the error and close, so the client gets a proper close frame."""
    await websocket.accept()
    await websocket.send_json(ErrorMessage(error=exc.error_code, message=exc.message).model_dump())
    await websocket.close(code=code)


def _change_message(change: DocumentChange, serialize: Serializer) -> ChangeMessage:
    data = None
    if change.type is not ChangeType.REMOVED:
        item = serialize(change.document)
        data = item.model_dump(mode="json") if item is not None else None
    return ChangeMessage(
        type=change.type.value,
        id=change.document.id,
        old_index=change.old_index,
        new_index=change.new_index,
        data=data,
    )


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Consume client frames until the client goes away. Client messages are ignored."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _stream_query(
    websocket: WebSocket,
    feed: str,
    query: Query,
    record_type: Any,
    serialize: Serializer,
) -> None:
    manager = websocket.app.state.ws_manager
    outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
    collection: LocalCollection[Any]

    def on_change(changes: list[DocumentChange]) -> None:
        message = SnapshotMessage(
            changes=[_change_message(c, serialize) for c in changes],
            count=collection.count,
        )
        outbox.put_nowait(message.model_dump(mode="json"))

    def on_error(error: Exception) -> None:
        if isinstance(error, FireEatsException):
            message = ErrorMessage(error=error.error_code, message=error.message)
        else:
            message = ErrorMessage(error="LIVE_QUERY_FAILED", message=str(error))
        outbox.put_nowait(message.model_dump())

    collection = LocalCollection(query, record_type, on_change, on_error)
    await manager.connect(websocket, feed)
    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        collection.listen()
        while True:
            next_message = asyncio.create_task(outbox.get())
            done, _ = await asyncio.wait(
                {next_message, disconnected}, return_when=asyncio.FIRST_COMPLETED
            )
            if next_message not in done:
                next_message.cancel()
                logger.debug("Live query client left %s", feed)
                return
            message = next_message.result()
            await websocket.send_json(message)
            if "error" in message:
                logger.warning("Live query %s failed: %s", feed, message["message"])
                await websocket.close(code=_CLOSE_INTERNAL_ERROR)
                return
    finally:
        collection.close()
        disconnected.cancel()
        await manager.disconnect(websocket)


@router.websocket("/ws/restaurants")
async def restaurants_feed(
    websocket: WebSocket,
    store: StoreDep,
    filters: FiltersDep,
    settings: SettingsDep,
):
    """Live restaurant listing with the same filters as GET /restaurants."""
    try:
        query = build_query(store, filters, limit=settings.query_result_limit)
    except ValidationException as exc:
        await _reject_websocket(websocket, exc)
        return
    await _stream_query(
        websocket,
        COLLECTION_RESTAURANTS,
        query,
        Restaurant,
        RestaurantResponse.from_snapshot,
    )


@router.websocket("/ws/restaurants/{restaurant_id}/ratings")
async def ratings_feed(websocket: WebSocket, restaurant_id: str, store: StoreDep):
    """Live list of one restaurant's reviews."""
    ref = store.collection(COLLECTION_RESTAURANTS).document(restaurant_id)
    await _stream_query(
        websocket,
        f"{ref.path}/{SUBCOLLECTION_RATINGS}",
        ref.collection(SUBCOLLECTION_RATINGS),
        Review,
        ReviewResponse.from_snapshot,
    )
