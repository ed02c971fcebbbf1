"""Notification stream for one subscribed characteristic."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 64

_CLOSED = object()


@dataclass(frozen=True, slots=True)
class RawFrame:
    """One notification payload as delivered by the transport."""

    data: bytes
    characteristic: str
    timestamp: float


class NotificationStream:
    """Asynchronous sequence of RawFrames from one characteristic.

    The transport pushes payloads with feed() from its notification
    callback; consumers iterate with ``async for``. Iteration ends after
    stop() or close() (link lost). Pending frames are held in a bounded
    queue; when it is full the oldest frame is dropped.
    """

    def __init__(
            self,
            characteristic: str,
            start: Callable[[NotificationStream], Awaitable[None]],
            stop: Callable[[], Awaitable[None]],
            max_pending: int = DEFAULT_MAX_PENDING,
    ):
        """Initialize stream.

        Args:
            characteristic: Characteristic UUID this stream belongs to
            start: Coroutine function enabling notifications at the transport
            stop: Coroutine function disabling notifications at the transport
            max_pending: Queue bound before old frames are dropped (default: 64)
        """
        self.characteristic = characteristic
        self._start = start
        self._stop = stop
        self._queue: asyncio.Queue[RawFrame | object] = asyncio.Queue(maxsize=max_pending + 1)
        self._max_pending = max_pending
        self._started = False
        self._closed = False
        self.dropped = 0

    @property
    def is_active(self) -> bool:
        """True between a successful start() and stop()/close()."""
        return self._started and not self._closed

    async def start(self) -> None:
        """Enable notifications.

        Raises:
            TransportError: If the transport cannot subscribe
        """
        if self._closed:
            raise RuntimeError(f"Stream {self.characteristic} already closed")
        if self._started:
            return
        await self._start(self)
        self._started = True

    async def stop(self) -> None:
        """Disable notifications and end iteration.

        Frames arriving after this call are discarded even if the transport
        has not yet acknowledged the unsubscribe.
        """
        was_active = self.is_active
        self.close()
        if was_active:
            await self._stop()

    def close(self) -> None:
        """End iteration without touching the transport (link is gone)."""
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._put(_CLOSED)

    def feed(self, data: bytes | bytearray) -> None:
        """Push one notification payload; called by the transport."""
        if not self.is_active:
            return
        frame = RawFrame(bytes(data), self.characteristic, time.monotonic())
        if self._queue.qsize() >= self._max_pending:
            self._queue.get_nowait()
            self.dropped += 1
            _LOGGER.debug(
                "Stream %s backlog full, dropped oldest frame (%d dropped)",
                self.characteristic,
                self.dropped,
            )
        self._put(frame)

    def _put(self, item: RawFrame | object) -> None:
        self._queue.put_nowait(item)

    def __aiter__(self) -> NotificationStream:
        return self

    async def __anext__(self) -> RawFrame:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item
