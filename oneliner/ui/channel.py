"""
Bounded notification channel between a worker task and the UI loop.

Sends never wait: when the buffer is full the newest notification is
dropped. Closing wakes a waiting receiver, which then gets ``None``.
"""

import asyncio
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ProgressChannel(Generic[T]):
    def __init__(self, capacity: int = 2):
        self._queue: "asyncio.Queue[object]" = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def send_nowait(self, item: T) -> bool:
        """Queue ``item`` unless the channel is full or closed."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # The receiver is not waiting; it sees the flag once drained.
            pass

    async def receive(self) -> Optional[T]:
        """Wait for the next item; ``None`` once closed and drained."""
        if self._closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]
