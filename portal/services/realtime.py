# Hippies Portal - Realtime Hub
# In-process WebSocket fan-out for message, announcement and task events

import asyncio
import logging
from typing import Any, Iterable, Optional

from fastapi import WebSocket, WebSocketDisconnect


logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Tracks open sockets per employee and pushes JSON events to them.

    Every event is an envelope:

        {"event": "message.new", "data": {...}}

    Delivery is best effort: a socket that fails to receive is dropped
    and nothing is replayed when the client reconnects. Clients refetch
    (and de-duplicate by id) after reconnecting.

    Services run in FastAPI's threadpool, so they call publish(), which
    hands the coroutine to the event loop the sockets live on.
    """

    def __init__(self):
        self.connections: dict[int, set[WebSocket]] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        # Deliveries in flight; held so they are not collected before running
        self._pending: set = set()

    async def connect(self, websocket: WebSocket, employee_id: int) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        self.connections.setdefault(employee_id, set()).add(websocket)
        logger.info("Realtime connected: employee %s (%s sockets)", employee_id, len(self.connections[employee_id]))

    def disconnect(self, websocket: WebSocket, employee_id: int) -> None:
        sockets = self.connections.get(employee_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.connections[employee_id]
        logger.info("Realtime disconnected: employee %s", employee_id)

    def is_online(self, employee_id: int) -> bool:
        return bool(self.connections.get(employee_id))

    async def send_to_employee(self, employee_id: int, message: dict[str, Any]) -> None:
        for websocket in list(self.connections.get(employee_id, ())):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, ConnectionError) as e:
                logger.debug("Dropping socket for employee %s: %s", employee_id, e)
                self.disconnect(websocket, employee_id)

    async def broadcast(self, message: dict[str, Any]) -> None:
        for employee_id in list(self.connections):
            await self.send_to_employee(employee_id, message)

    def publish(self, employee_ids: Optional[Iterable[int]], event: str, data: dict[str, Any]) -> None:
        """
        Queue an event from synchronous code.

        employee_ids=None broadcasts to everyone connected.
        """
        if not self.connections or self._loop is None or self._loop.is_closed():
            return

        message = {"event": event, "data": data}
        if employee_ids is None:
            coro = self.broadcast(message)
        else:
            coro = self._send_many(set(employee_ids), message)

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            delivery = running.create_task(coro)
        else:
            delivery = asyncio.run_coroutine_threadsafe(coro, self._loop)

        self._pending.add(delivery)
        delivery.add_done_callback(self._delivery_done)

    def _delivery_done(self, delivery) -> None:
        self._pending.discard(delivery)
        if delivery.cancelled():
            return
        error = delivery.exception()
        if error is not None:
            logger.error("Realtime delivery failed: %s", error, exc_info=error)

    async def _send_many(self, employee_ids: set[int], message: dict[str, Any]) -> None:
        for employee_id in employee_ids:
            await self.send_to_employee(employee_id, message)


class NullNotifier:
    """Notifier used by scripts and anywhere no sockets exist."""

    def publish(self, employee_ids: Optional[Iterable[int]], event: str, data: dict[str, Any]) -> None:
        return None
