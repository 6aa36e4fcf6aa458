"""
Live-region announcements for assistive technology.

The grid publishes short messages describing state transitions (sort, filter,
page, selection). Each message expires on its own deadline, so a burst of
actions is announced message by message instead of only the last one.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class Announcer(Protocol):
    """Sink for screen-reader text."""

    def announce(self, message: str) -> None: ...

    def messages(self) -> list[str]: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class Announcement:
    message: str
    expires_at: float


class QueueAnnouncer:
    """
    FIFO of self-expiring messages.

    Reading is side-effect free, so a renderer refreshing on another thread
    never mutates the queue; expired entries are dropped on the next
    `announce` or `expire` call.

    Args:
        delay: Seconds each message stays live
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(self, delay: float = 1.0, clock: Clock = time.monotonic) -> None:
        self.delay = delay
        self._clock = clock
        self._queue: deque[Announcement] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def announce(self, message: str) -> None:
        if self._closed:
            logger.debug("Dropped announcement after close: %s", message)
            return
        self.expire()
        self._queue.append(Announcement(message, self._clock() + self.delay))
        logger.debug("Announce: %s", message)

    def messages(self) -> list[str]:
        """Messages still live, oldest first."""
        now = self._clock()
        return [item.message for item in self._queue if item.expires_at > now]

    def expire(self) -> int:
        """Drop expired messages. Returns how many were dropped."""
        now = self._clock()
        dropped = 0
        # Deadlines are monotonic in insertion order
        while self._queue and self._queue[0].expires_at <= now:
            self._queue.popleft()
            dropped += 1
        return dropped

    def close(self) -> None:
        """Cancel everything pending; later announcements are ignored."""
        self._queue.clear()
        self._closed = True


class NullAnnouncer:
    """Announcer for non-interactive contexts: discards everything."""

    def announce(self, message: str) -> None:
        pass

    def messages(self) -> list[str]:
        return []

    def close(self) -> None:
        pass
