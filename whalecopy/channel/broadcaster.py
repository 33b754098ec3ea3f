"""Publish/subscribe fan-out for outbound events, independent of transport."""

import asyncio
import json
import logging

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, maxsize: int):
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0


class Broadcaster:
    """Fire-and-forget broadcast to every subscriber.

    Each subscriber owns a bounded queue. A full queue drops the message for
    that subscriber only; delivery is never retried or acknowledged.
    """

    def __init__(self, queue_size: int = 1000):
        self.queue_size = queue_size
        self._subs: set[Subscription] = set()

    def __len__(self) -> int:
        return len(self._subs)

    def subscribe(self) -> Subscription:
        sub = Subscription(self.queue_size)
        self._subs.add(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        self._subs.discard(sub)

    def publish(self, message: dict) -> int:
        """Queue `message` for every subscriber. Returns how many received it."""
        payload = json.dumps(message)
        delivered = 0
        for sub in list(self._subs):
            try:
                sub.queue.put_nowait(payload)
                delivered += 1
            except asyncio.QueueFull:
                sub.dropped += 1
                if sub.dropped == 1 or sub.dropped % 100 == 0:
                    logger.warning("Observer queue full, %d messages dropped", sub.dropped)
        return delivered
