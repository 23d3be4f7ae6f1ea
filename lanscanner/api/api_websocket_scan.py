"""Websocket that pushes scan notifications to connected clients"""
import asyncio
from typing import Any, Set

from fastapi import FastAPI, WebSocket

from lanscanner.lanscanner_logger.lanscanner_logger import get_logger

_logger = get_logger(__name__)


class APIWebsocketScan():
    """Broadcasts `new-device`, `scan-tick` and `scan-stopped` to websocket clients"""
    def __init__(self, app: FastAPI):
        """Initialize the scan websocket

        Args:
            app (FastAPI): The FastAPI application instance
        """
        self._active_connections: Set[WebSocket] = set()
        """Set of active websocket connections"""
        self._pending_broadcasts: Set[asyncio.Task] = set()
        """Broadcasts that haven't finished sending"""

        app.websocket("/ws/scan")(self._scan_websocket)
        _logger.info("[WebSocket Scan] Scan WebSocket endpoint registered")

    async def _connect(self, websocket: WebSocket) -> None:
        """Accept a new websocket connection

        Args:
            websocket (WebSocket): The websocket connection to accept
        """
        await websocket.accept()
        self._active_connections.add(websocket)
        _logger.debug(f"[WebSocket Scan] New client connected: {websocket.client.host if websocket.client else 'Unknown'}")

    def _disconnect(self, websocket: WebSocket) -> None:
        """Remove a websocket connection

        Args:
            websocket (WebSocket): The websocket connection to remove
        """
        self._active_connections.discard(websocket)
        _logger.debug(f"[WebSocket Scan] Client disconnected: {websocket.client.host if websocket.client else 'Unknown'}")

    def emit(self, event: str, payload: Any) -> None:
        """Queue a notification for every connected client

        Must be called from the event loop the websockets are served on.

        Args:
            event (str): Event name
            payload (Any): JSON serializable payload
        """
        task = asyncio.ensure_future(self.broadcast({"event": event, "payload": payload}))
        self._pending_broadcasts.add(task)
        task.add_done_callback(self._pending_broadcasts.discard)

    async def broadcast(self, message: dict) -> None:
        """Send a message to every client, clients that fail are dropped

        Args:
            message (dict): The message to send
        """
        disconnected: Set[WebSocket] = set()
        for connection in list(self._active_connections):
            try:
                await connection.send_json(message)
            except Exception as exc:
                _logger.error("[WebSocket Scan] Failed to send %s: %s", message.get("event"), str(exc))
                disconnected.add(connection)

        for connection in disconnected:
            self._disconnect(connection)

    async def _scan_websocket(self, websocket: WebSocket) -> None:
        """Handle websocket connection lifecycle

        Args:
            websocket (WebSocket): The websocket connection to handle
        """
        await self._connect(websocket)
        try:
            while True:
                # Keep connection alive
                await websocket.receive_text()
        except Exception as exc:
            _logger.debug("[WebSocket Scan] Client disconnected: %s", str(exc))
        finally:
            self._disconnect(websocket)
