"""WebSocket connection manager.

Used by the live-query WebSocket endpoints to track connections.
"""

from fireeats.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
