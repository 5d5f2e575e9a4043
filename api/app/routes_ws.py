"""WebSocket fan-out of order events.

Every session listens to the broadcast topic from the moment it connects.
Clients add and drop order or restaurant topics with JSON frames::

    {"type": "join_order", "id": "<order id>"}
    {"type": "leave_restaurant", "id": "<restaurant id>"}

Each frame is acknowledged with ``{"event": "joined"|"left", "data":
{"channel": ...}}``. Events published while a client is disconnected are lost;
clients re-fetch the order over HTTP after reconnecting. A session whose
event stream fails is closed with 1011 and reason ``RETRY``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from .middlewares import realtime_guard
from .realtime import BROADCAST_CHANNEL, order_channel, restaurant_channel
from .routes_metrics import ws_clients_gauge

router = APIRouter()

logger = logging.getLogger("api.ws")

POLL_TIMEOUT = 1.0

_CHANNELS = {
    "order": order_channel,
    "restaurant": restaurant_channel,
}

_DROP = object()


def _channel_for(frame: Any) -> tuple[str, str] | None:
    """Return ``(action, channel)`` for a valid join/leave frame."""

    if not isinstance(frame, dict):
        return None
    action, _, kind = str(frame.get("type", "")).partition("_")
    target = frame.get("id")
    if action not in {"join", "leave"} or kind not in _CHANNELS:
        return None
    if not isinstance(target, str) or not target:
        return None
    return action, _CHANNELS[kind](target)


@router.websocket("/ws")
async def events_ws(websocket: WebSocket) -> None:
    """Stream order events to one dashboard or tracking screen."""

    ip = websocket.client.host if websocket.client else "?"
    try:
        realtime_guard.register(ip)
    except realtime_guard.TooManyConnections:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    pubsub = websocket.app.state.redis.pubsub()
    await pubsub.subscribe(BROADCAST_CHANNEL)
    await websocket.accept()
    ws_clients_gauge.inc()

    queue: asyncio.Queue[Any] = realtime_guard.queue()

    def offer(item: Any) -> bool:
        try:
            queue.put_nowait(item)
        except asyncio.QueueFull:
            return False
        return True

    async def reader() -> None:
        while True:
            message = await pubsub.get_message(
                ignore_subscribe_messages=True, timeout=POLL_TIMEOUT
            )
            if message is None:
                continue
            try:
                data = json.loads(message["data"])
            except (TypeError, ValueError):
                logger.warning("dropping malformed event on %s", message.get("channel"))
                continue
            if not offer(data):
                # Slow consumer: clear the backlog and ask the client to resync.
                while not queue.empty():
                    queue.get_nowait()
                queue.put_nowait(_DROP)
                return

    async def receiver() -> None:
        while True:
            try:
                frame = await websocket.receive_json()
            except WebSocketDisconnect:
                return
            except ValueError:
                offer({"event": "error", "data": {"message": "invalid JSON"}})
                continue
            parsed = _channel_for(frame)
            if parsed is None:
                offer({"event": "error", "data": {"message": "unknown frame"}})
                continue
            action, channel = parsed
            if action == "join":
                await pubsub.subscribe(channel)
                event = "joined"
            else:
                await pubsub.unsubscribe(channel)
                event = "left"
            offer({"event": event, "data": {"channel": channel}})

    reader_task = asyncio.create_task(reader())
    receiver_task = asyncio.create_task(receiver())
    hb_task = realtime_guard.heartbeat_task(websocket)
    watched = {reader_task, receiver_task}

    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {getter, *watched}, return_when=asyncio.FIRST_COMPLETED
            )
            if getter in done:
                item = getter.result()
                if item is _DROP:
                    await websocket.close(
                        code=status.WS_1013_TRY_AGAIN_LATER, reason="RETRY"
                    )
                    break
                await websocket.send_json(item)
                continue
            getter.cancel()
            if receiver_task in done:
                break
            # The reader stopped; after an overflow the queue still holds _DROP.
            watched.discard(reader_task)
            exc = reader_task.exception()
            if exc is not None:
                logger.warning("event stream lost: %s", exc)
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR, reason="RETRY")
                break
    except WebSocketDisconnect:  # pragma: no cover - network disconnect
        pass
    finally:
        reader_task.cancel()
        receiver_task.cancel()
        hb_task.cancel()
        await pubsub.unsubscribe()
        await pubsub.aclose()
        ws_clients_gauge.dec()
        realtime_guard.unregister(ip)
