"""SessionChannel — fans one radio session's events out to its WebSocket listeners."""
import asyncio
import logging
from typing import Any, Hashable

logger = logging.getLogger(__name__)

# A listener joining mid-session gets the latest of these right away
STICKY_EVENTS = ("station", "now_playing")


class SessionChannel:
    def __init__(self, maxsize: int = 50):
        self.maxsize = maxsize
        self.dropped = 0
        self._listeners: dict[Hashable, asyncio.Queue] = {}
        self._latest: dict[str, Any] = {}

    def subscribe(self, listener_id: Hashable) -> asyncio.Queue:
        """Queue of (event, data) tuples, primed with the latest sticky events."""
        q: asyncio.Queue = asyncio.Queue(maxsize=self.maxsize)
        for event in STICKY_EVENTS:
            if event in self._latest:
                q.put_nowait((event, self._latest[event]))
        self._listeners[listener_id] = q
        return q

    def unsubscribe(self, listener_id: Hashable):
        self._listeners.pop(listener_id, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def broadcast(self, event: str, data: Any):
        if event in STICKY_EVENTS:
            self._latest[event] = data
        for listener_id, q in self._listeners.items():
            if q.full():
                # Slow listener loses its oldest event, never the newest
                q.get_nowait()
                self.dropped += 1
                logger.debug("Listener %s lagging, dropped one event", listener_id)
            q.put_nowait((event, data))
