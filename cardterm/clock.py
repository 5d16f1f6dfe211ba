"""Schedulers for delayed terminal output.

A scheduler only knows how to run a callback later. There is no way to
cancel a callback once scheduled; callers that need cancellation check a
validity token when the callback fires.
"""

from __future__ import annotations

import asyncio
import heapq
from collections.abc import Callable
from typing import Protocol


class Scheduler(Protocol):
    """Fire-and-forget delayed callbacks."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None: ...


class VirtualClock:
    """Deterministic clock that only moves when told to.

    Callbacks due at the same time fire in the order they were scheduled.
    Callbacks scheduled while advancing fire in the same pass if they fall
    inside the advanced window.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._seq = 0
        self._queue: list[tuple[int, int, Callable[[], None]]] = []

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
        self._seq += 1
        heapq.heappush(self._queue, (self.now_ms + delay_ms, self._seq, callback))

    def advance(self, ms: int) -> int:
        """Move the clock forward by ``ms`` and fire everything due.

        Returns the number of callbacks fired.
        """
        if ms < 0:
            raise ValueError(f"cannot move the clock backwards ({ms}ms)")
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self.now_ms = due
            callback()
            fired += 1
        self.now_ms = target
        return fired

    def run_until_idle(self) -> int:
        """Fire callbacks until none remain, advancing to each due time."""
        fired = 0
        while self._queue:
            fired += self.advance(self._queue[0][0] - self.now_ms)
        return fired


class AsyncioScheduler:
    """Scheduler backed by a running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(delay_ms / 1000, callback)
