"""
Per-vendor WebSocket fan-out for order lifecycle events.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List
from uuid import uuid4

from fastapi import WebSocket

from orderdesk.config import settings

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ConnectionHandle:
    vendor_id: str
    websocket: WebSocket
    id: str = field(default_factory=lambda: str(uuid4()))


class Notifier:
    """
    Groups live connections by vendor id and broadcasts events to a group.

    Staff accounts subscribe with their owning vendor's id, so owner, waiter
    and kitchen screens all see one stream. Delivery is best effort: a
    connection whose send fails or stalls past the send timeout is dropped,
    and a viewer that reconnects is expected to re-fetch the order list.
    """

    def __init__(self, send_timeout: float | None = None):
        self.send_timeout = send_timeout
        self.active_connections: Dict[str, List[ConnectionHandle]] = {}

    def subscribe(self, vendor_id: str, websocket: WebSocket) -> ConnectionHandle:
        handle = ConnectionHandle(vendor_id=vendor_id, websocket=websocket)
        self.active_connections.setdefault(vendor_id, []).append(handle)
        logger.info(
            f"WebSocket subscribed to vendor {vendor_id}. "
            f"Total connections: {self.connection_count(vendor_id)}"
        )
        return handle

    def unsubscribe(self, handle: ConnectionHandle):
        connections = self.active_connections.get(handle.vendor_id)
        if not connections or handle not in connections:
            return
        connections.remove(handle)
        if not connections:
            del self.active_connections[handle.vendor_id]
        logger.info(f"WebSocket unsubscribed from vendor {handle.vendor_id}")

    async def broadcast(self, vendor_id: str, event: dict):
        connections = list(self.active_connections.get(vendor_id, []))
        if not connections:
            return

        message_text = json.dumps(event, default=str)
        timeout = self.send_timeout if self.send_timeout is not None else settings.WS_SEND_TIMEOUT_SECONDS
        results = await asyncio.gather(
            *(asyncio.wait_for(h.websocket.send_text(message_text), timeout) for h in connections),
            return_exceptions=True,
        )

        for handle, result in zip(connections, results):
            if isinstance(result, asyncio.TimeoutError):
                logger.warning(f"Dropping connection {handle.id} of vendor {vendor_id}: send timed out")
                self.unsubscribe(handle)
            elif isinstance(result, Exception):
                logger.warning(f"Dropping connection {handle.id} of vendor {vendor_id}: {result}")
                self.unsubscribe(handle)

    def connection_count(self, vendor_id: str) -> int:
        return len(self.active_connections.get(vendor_id, []))

    async def close_all(self):
        handles = [h for group in self.active_connections.values() for h in group]
        self.active_connections.clear()
        if handles:
            await asyncio.gather(*(h.websocket.close() for h in handles), return_exceptions=True)
        logger.info("All WebSocket connections closed")


notifier = Notifier()
