"""Scheduler — one-shot delayed callbacks on a virtual clock.

Zone development fires a while after a zone is placed.  The simulation
only needs ``schedule(delay, callback)`` and ``cancel(handle)``; the
``VirtualScheduler`` here provides both against a clock the host
advances explicitly, so tests and headless drivers stay deterministic.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable


class Scheduler(Protocol):
    """Minimal timer capability required by the simulation core."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> int:
        """Run ``callback`` once after ``delay`` seconds; return a handle."""
        ...

    def cancel(self, handle: int) -> bool:
        """Cancel a pending callback; return True if it was pending."""
        ...


@dataclass
class VirtualScheduler:
    """A deterministic task queue driven by ``advance``.

    Callbacks fire in due-time order; callbacks due at the same instant
    fire in the order they were scheduled.

    Attributes:
        now: Current virtual time in seconds.
    """

    now: float = 0.0
    _queue: list[tuple[float, int]] = field(default_factory=list, repr=False)
    _callbacks: dict[int, Callable[[], None]] = field(
        default_factory=dict,
        repr=False,
    )
    _next_handle: int = 1

    def schedule(self, delay: float, callback: Callable[[], None]) -> int:
        """Queue ``callback`` to run ``delay`` seconds from now.

        Args:
            delay: Seconds until the callback fires (must be >= 0).
            callback: Zero-argument callable.

        Returns:
            A handle usable with ``cancel``.

        Raises:
            ValueError: If ``delay`` is negative.
        """
        if delay < 0:
            msg = f"delay must be non-negative, got {delay}"
            raise ValueError(msg)
        handle = self._next_handle
        self._next_handle += 1
        self._callbacks[handle] = callback
        heapq.heappush(self._queue, (self.now + delay, handle))
        return handle

    def cancel(self, handle: int) -> bool:
        """Drop a pending callback.

        Returns:
            True if the handle was pending, False if it already fired,
            was cancelled, or never existed.
        """
        # Heap entry is discarded lazily when it reaches the front
        return self._callbacks.pop(handle, None) is not None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every callback that falls due.

        A callback may schedule further callbacks; those also fire if they
        fall due within the advanced window.

        Args:
            seconds: Amount of virtual time to advance.

        Returns:
            Number of callbacks fired.
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, handle = heapq.heappop(self._queue)
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue
            self.now = max(self.now, due)
            callback()
            fired += 1
        self.now = max(self.now, target)
        return fired

    def pending(self) -> list[int]:
        """Return handles that have not fired or been cancelled."""
        return sorted(self._callbacks)

    def clear(self) -> None:
        """Cancel everything without touching the clock."""
        self._queue.clear()
        self._callbacks.clear()
