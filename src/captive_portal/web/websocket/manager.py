"""WebSocket client registry and event broadcasting."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Set

from fastapi import WebSocket

from .events import WebSocketEvent

logger = logging.getLogger(__name__)


class BroadcastManager:
    """Keeps the open portal pages and pushes events to all of them."""

    def __init__(self) -> None:
        """Initialize broadcast manager."""
        self.active_connections: List[WebSocket] = []
        self._pending: Set["asyncio.Task[None]"] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection.

        Args:
            websocket: WebSocket connection to register
        """
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info("Portal client connected. Total connections: %d", len(self.active_connections))

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection.

        Args:
            websocket: WebSocket connection to remove
        """
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(
            "Portal client disconnected. Total connections: %d", len(self.active_connections)
        )

    async def send(self, event: WebSocketEvent, websocket: WebSocket) -> None:
        """Send an event to one connection.

        Args:
            event: Event to send
            websocket: Target WebSocket connection
        """
        try:
            await websocket.send_text(event.model_dump_json())
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Failed to send to portal client: %s", e)
            self.disconnect(websocket)

    async def broadcast(self, event: WebSocketEvent) -> None:
        """Broadcast an event to all connected clients.

        Args:
            event: Event to broadcast
        """
        if not self.active_connections:
            return

        message = event.model_dump_json()
        logger.debug(
            "Broadcasting event: %s to %d clients", event.type.value, len(self.active_connections)
        )

        disconnected = []
        for connection in list(self.active_connections):
            try:
                await connection.send_text(message)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Failed to send to portal client: %s", e)
                disconnected.append(connection)

        for connection in disconnected:
            self.disconnect(connection)

    def publish(self, event: WebSocketEvent) -> None:
        """Schedule a broadcast from synchronous code running on the event loop.

        Args:
            event: Event to broadcast
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Cannot broadcast %s: no running event loop", event.type.value)
            return

        task = loop.create_task(self.broadcast(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def connection_count(self) -> int:
        """Get the number of active connections.

        Returns:
            Number of active WebSocket connections
        """
        return len(self.active_connections)
