"""Utilities to guard real-time WebSocket sessions.

This module centralises per-IP connection limits, the heartbeat interval and
the bounded per-session queue. Environment variables provide tunables:
- ``MAX_CONN_PER_IP`` (default ``20``)
- ``HEARTBEAT_INTERVAL_SEC`` (default ``25``)
- ``QUEUE_MAX`` (default ``100``)
"""

from __future__ import annotations

import asyncio
import os
from collections import defaultdict
from typing import Any

from starlette.websockets import WebSocket

MAX_CONN_PER_IP = int(os.getenv("MAX_CONN_PER_IP", "20"))
HEARTBEAT_INTERVAL_SEC = int(os.getenv("HEARTBEAT_INTERVAL_SEC", "25"))
QUEUE_MAX = int(os.getenv("QUEUE_MAX", "100"))

connections: dict[str, int] = defaultdict(int)


class TooManyConnections(Exception):
    """Raised when an IP already holds ``MAX_CONN_PER_IP`` sessions."""


def register(ip: str) -> None:
    """Increment connection count for ``ip`` or raise :class:`TooManyConnections`."""
    if connections[ip] >= MAX_CONN_PER_IP:
        raise TooManyConnections(ip)
    connections[ip] += 1


def unregister(ip: str) -> None:
    """Decrement connection count for ``ip``."""
    if connections[ip] > 0:
        connections[ip] -= 1
    if connections[ip] == 0:
        connections.pop(ip, None)


def queue(maxsize: int | None = None) -> asyncio.Queue[Any]:
    """Return an ``asyncio.Queue`` enforcing ``QUEUE_MAX`` by default."""
    return asyncio.Queue(maxsize=maxsize or QUEUE_MAX)


def heartbeat_task(websocket: WebSocket) -> asyncio.Task:
    """Return a task sending periodic pings to ``websocket``.

    The task stops silently when the connection drops. Consumers need not
    await the returned task but should cancel it on cleanup.
    """

    async def _hb() -> None:  # pragma: no cover - network timing
        try:
            while True:
                await asyncio.sleep(HEARTBEAT_INTERVAL_SEC)
                await websocket.send_json({"event": "ping", "data": None})
        except Exception:
            pass

    return asyncio.create_task(_hb())
