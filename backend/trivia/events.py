from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Deque, List

from .utils import now_ts


class EventStore:
    """Keep a bounded, sequence-numbered feed of viewer events so clients can poll via HTTP."""

    def __init__(self, max_events: int = 500):
        self._events: Deque[dict[str, Any]] = deque(maxlen=max_events)
        self._seq = 0
        self._lock = asyncio.Lock()

    async def append(self, payload: dict[str, Any]) -> int:
        """Store a new event and return its sequence number."""

        async with self._lock:
            self._seq += 1
            self._events.append({"seq": self._seq, "timestamp": now_ts(), "payload": payload})
            return self._seq

    async def publish_state(self, state: dict[str, Any]) -> int:
        return await self.append({"type": "state", **state})

    async def publish_shout(self, channel: Any, text: str) -> int:
        return await self.append({"type": "shout", "channel": channel, "text": text})

    async def list(self, after: int | None = None, limit: int = 200) -> List[dict[str, Any]]:
        """Return events that occur after the given sequence."""

        if limit < 1:
            raise ValueError("limit must be positive")
        async with self._lock:
            events = [e for e in self._events if after is None or e["seq"] > after]
        return events[:limit]

    async def reset(self) -> None:
        """Clear stored events and emit a reset marker."""

        async with self._lock:
            self._events.clear()

        # Long-polling clients drop any derived state when they see this.
        await self.append({"type": "feed_reset"})
