from __future__ import annotations

import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


class OverflowPolicy(str, Enum):
    DROP_OLDEST = "DROP_OLDEST"
    DROP_NEWEST = "DROP_NEWEST"


class BoundedQueue(Generic[T]):
    """Playback queue that never grows past ``maxsize``.

    A listener that falls behind loses utterances according to the overflow
    policy instead of buffering without limit.
    """

    def __init__(self, maxsize: int, overflow_policy: OverflowPolicy = OverflowPolicy.DROP_OLDEST):
        if maxsize < 1:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self._items: deque[T] = deque()
        self._maxsize = maxsize
        self._overflow_policy = OverflowPolicy(overflow_policy)
        self._changed = asyncio.Condition()
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._items)

    async def put(self, item: T) -> bool:
        """Enqueue ``item``. Returns False when something was dropped to make room."""
        async with self._changed:
            if len(self._items) < self._maxsize:
                self._items.append(item)
                self._changed.notify()
                return True

            self.dropped += 1
            if self._overflow_policy == OverflowPolicy.DROP_NEWEST:
                logger.warning("playback_queue_overflow policy=%s dropped=newest", self._overflow_policy.value)
                return False

            self._items.popleft()
            self._items.append(item)
            logger.warning("playback_queue_overflow policy=%s dropped=oldest", self._overflow_policy.value)
            self._changed.notify()
            return False

    async def get(self, timeout: Optional[float] = None) -> T:
        """Wait for the next item. Raises asyncio.TimeoutError when ``timeout`` elapses first."""

        async def _wait() -> T:
            async with self._changed:
                while not self._items:
                    await self._changed.wait()
                return self._items.popleft()

        if timeout is None:
            return await _wait()
        return await asyncio.wait_for(_wait(), timeout)

    async def clear(self) -> int:
        """Remove all queued items and return how many were removed."""
        async with self._changed:
            n = len(self._items)
            self._items.clear()
        return n


__all__ = ["BoundedQueue", "OverflowPolicy"]
