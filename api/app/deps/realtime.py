"""Dependency helpers for real-time publishing."""

from fastapi import Request

from config import get_settings

from ..realtime import Notifier


def get_notifier(request: Request) -> Notifier:
    """Return a :class:`Notifier` bound to the application's Redis client."""
    return Notifier(
        request.app.state.redis,
        include_pending=get_settings().available_includes_pending,
    )
