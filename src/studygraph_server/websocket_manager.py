"""
Position push channel for diagram renderers.

Every open view subscribes over /ws. Drags only change server-side state,
so views learn about them from two events:

- positions_updated: ids of instances whose node positions moved; the view
  re-fetches GET /api/diagrams/{id} and redraws
- instance_closed: the instance was discarded and its view should go away
"""
import asyncio
import json
import logging
from typing import Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


POSITIONS_UPDATED = "positions_updated"
INSTANCE_CLOSED = "instance_closed"


class WebSocketManager:
    """Subscribed renderer sockets, pruned whenever a push to one fails."""

    def __init__(self):
        self._subscribers: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._subscribers)

    async def connect(self, websocket: WebSocket):
        """Accept a renderer and subscribe it to position events."""
        await websocket.accept()
        async with self._lock:
            self._subscribers.add(websocket)
        logger.info("Renderer subscribed (%d open)", len(self._subscribers))

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self._subscribers.discard(websocket)
        logger.info("Renderer unsubscribed (%d open)", len(self._subscribers))

    async def push(self, event_type: str, **payload) -> int:
        """
        Send one event to every subscriber.

        Args:
            event_type: POSITIONS_UPDATED or INSTANCE_CLOSED
            **payload: Event fields, serialized next to "type"

        Returns:
            Number of subscribers that received the event
        """
        if not self._subscribers:
            return 0

        text = json.dumps({"type": event_type, **payload})
        dead: Set[WebSocket] = set()

        async with self._lock:
            for websocket in self._subscribers:
                try:
                    await websocket.send_text(text)
                except Exception:
                    logger.debug("Dropping renderer after failed push", exc_info=True)
                    dead.add(websocket)
            self._subscribers -= dead

        return len(self._subscribers)

    async def notify_positions_updated(self, instance_ids: list[str]) -> int:
        return await self.push(POSITIONS_UPDATED, instance_ids=instance_ids)

    async def notify_instance_closed(self, instance_id: str) -> int:
        return await self.push(INSTANCE_CLOSED, instance_id=instance_id)


# Global instance
ws_manager = WebSocketManager()
