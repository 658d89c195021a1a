"""
snitch.engine.notifications — Last-sent roster message per channel
===================================================================
"""

from __future__ import annotations

import threading


class NotificationCache:
    """Thread-safe mapping of voice channel id → Telegram message id.

    Holds at most one handle per channel: the roster message that should
    be deleted before the next one is sent.  A handle may be stale (the
    message was already deleted upstream); callers treat deletion as
    best-effort.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: dict[int, int] = {}

    def get(self, channel_id: int) -> int | None:
        with self._lock:
            return self._handles.get(channel_id)

    def set(self, channel_id: int, handle: int) -> None:
        with self._lock:
            self._handles[channel_id] = handle

    def snapshot(self) -> dict[int, int]:
        with self._lock:
            return dict(self._handles)
