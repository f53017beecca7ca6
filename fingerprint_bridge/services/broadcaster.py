# =======================================================================================
# fingerprint_bridge/services/broadcaster.py - Push Channel Fan-out
# =======================================================================================
import asyncio
import logging
from typing import AsyncIterator, List, Optional
from fastapi import Request
from ..models.enums import EventType, SensorMode
from ..models.schemas import BroadcastEvent

logger = logging.getLogger(__name__)

KEEPALIVE_FRAME = ": keep-alive\n\n"


def frame(event: BroadcastEvent) -> str:
    """Frame an event for the Server-Sent-Events wire format."""
    return f"data: {event.to_json()}\n\n"


class Subscriber:
    """One open push-channel connection."""

    def __init__(self, queue_size: int):
        self.queue: "asyncio.Queue[str]" = asyncio.Queue(maxsize=queue_size)
        self.closed = False

    def offer(self, data: str) -> bool:
        """Queue a frame; False means the subscriber can no longer be written to."""
        if self.closed:
            return False
        try:
            self.queue.put_nowait(data)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        # wake a reader blocked on get(); an empty frame ends the stream
        try:
            self.queue.put_nowait("")
        except asyncio.QueueFull:
            pass


class EventBroadcaster:
    """Keeps the set of open subscribers and copies every event to each of them."""

    def __init__(self, queue_size: int = 100, keepalive_seconds: float = 15.0):
        self.queue_size = queue_size
        self.keepalive_seconds = keepalive_seconds
        self._subscribers: List[Subscriber] = []

    @property
    def client_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def subscribe(self, mode: SensorMode) -> Subscriber:
        """Register a subscriber and greet it with the current mode."""
        subscriber = Subscriber(self.queue_size)
        self._subscribers.append(subscriber)
        subscriber.offer(
            frame(
                BroadcastEvent(
                    message="Connected to bridge",
                    type=EventType.CONNECTED.value,
                    mode=mode,
                )
            )
        )
        logger.debug("Subscriber added (%d open)", self.client_count)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        subscriber.close()
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)
            logger.debug("Subscriber removed (%d open)", self.client_count)

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------
    def broadcast(self, event: BroadcastEvent) -> int:
        """Send event to every open subscriber; returns how many received it."""
        data = frame(event)
        delivered = 0
        for subscriber in list(self._subscribers):
            if subscriber.offer(data):
                delivered += 1
            else:
                logger.warning("Dropping subscriber that stopped reading")
                self.unsubscribe(subscriber)
        return delivered

    def emit(self, message: str, type: str = "info", **fields) -> BroadcastEvent:
        """Build and broadcast an event in one call."""
        event = BroadcastEvent(message=message, type=type, **fields)
        self.broadcast(event)
        return event

    # ------------------------------------------------------------------
    # SSE body
    # ------------------------------------------------------------------
    async def stream(
        self, subscriber: Subscriber, request: Optional[Request] = None
    ) -> AsyncIterator[str]:
        """Yield framed events for one connection until it goes away."""
        # frames queued before close() are still delivered; the sentinel ends the stream
        try:
            while True:
                if request is not None and await request.is_disconnected():
                    break
                try:
                    data = await asyncio.wait_for(
                        subscriber.queue.get(), timeout=self.keepalive_seconds
                    )
                except asyncio.TimeoutError:
                    if subscriber.closed:
                        break
                    yield KEEPALIVE_FRAME
                    continue
                if not data:
                    break
                yield data
        finally:
            self.unsubscribe(subscriber)

    def close_all(self) -> None:
        for subscriber in list(self._subscribers):
            self.unsubscribe(subscriber)
