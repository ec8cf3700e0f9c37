"""WebSocket connection manager.

Holds active live-query connections grouped by feed (e.g. 'restaurants' or
'restaurants/{id}/ratings'). Use via app.state.ws_manager (set in lifespan).
"""

from __future__ import annotations

import asyncio

from fastapi import WebSocket


class ConnectionManager:
    """Tracks live-query WebSocket connections per feed.

    - connect accepts the socket and records which feed it follows.
    - Counts are lock-protected for concurrent access.
    """

    def __init__(self) -> None:
        """Initialize with empty per-feed connection sets."""
        self._connections_by_feed: dict[str, set[WebSocket]] = {}
        self._websocket_to_feed: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, feed: str) -> None:
        """Accept and register a new connection for the given feed.

        Args:
            websocket: The WebSocket instance to accept and track.
            feed: Path of the query the connection mirrors.
        """
        await websocket.accept()
        async with self._lock:
            self._connections_by_feed.setdefault(feed, set()).add(websocket)
            self._websocket_to_feed[websocket] = feed

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection (call on disconnect). Unknown sockets are ignored."""
        async with self._lock:
            feed = self._websocket_to_feed.pop(websocket, None)
            if feed and feed in self._connections_by_feed:
                conns = self._connections_by_feed[feed]
                conns.discard(websocket)
                if not conns:
                    del self._connections_by_feed[feed]

    async def get_connection_count(self, feed: str | None = None) -> int:
        """Return the number of active connections, optionally for one feed (lock-safe)."""
        async with self._lock:
            if feed is not None:
                return len(self._connections_by_feed.get(feed, ()))
            return sum(len(c) for c in self._connections_by_feed.values())
