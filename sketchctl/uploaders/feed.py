"""Progress event channel.

Fans ``ProgressEvent``s out to any number of subscribers. Each subscriber owns
an ``asyncio.Queue`` and reads events in publish order with ``async for``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from sketchctl.models.progress import ProgressEvent


class Subscription:
    """An ordered stream of events for one consumer."""

    def __init__(self, feed: ProgressFeed, maxsize: int = 0) -> None:
        self._feed = feed
        self._queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue(maxsize)
        self._closed = False

    def _put(self, event: ProgressEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # Slow consumer: drop the oldest update, keep the newest
            self._queue.get_nowait()
            self._queue.put_nowait(event)

    def close(self) -> None:
        """Stop receiving events; already-queued events are still delivered."""
        self._feed._unsubscribe(self)
        self._closed = True
        if not self._queue.full():
            # Wakes a consumer blocked on an empty queue
            self._queue.put_nowait(None)

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ProgressEvent]:
        while True:
            if self._closed and self._queue.empty():
                return
            event = await self._queue.get()
            if event is None:
                return
            yield event


class ProgressFeed:
    """Publish/subscribe channel for upload progress."""

    def __init__(self) -> None:
        self._subscribers: list[Subscription] = []
        self._closed = False

    def subscribe(self, maxsize: int = 0) -> Subscription:
        """Open a new subscription.

        Args:
            maxsize: Queue bound; 0 means unbounded. When bounded, the
                oldest pending event is dropped for a new one.
        """
        sub = Subscription(self, maxsize)
        if self._closed:
            sub.close()
        else:
            self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        if sub in self._subscribers:
            self._subscribers.remove(sub)

    def publish(self, event: ProgressEvent) -> None:
        for sub in list(self._subscribers):
            sub._put(event)

    def close(self) -> None:
        """End every subscription's stream."""
        self._closed = True
        for sub in list(self._subscribers):
            sub.close()

    @property
    def closed(self) -> bool:
        return self._closed
