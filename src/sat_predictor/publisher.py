"""
Latest-value broadcast channel.

A single producer overwrites the held value; any number of asyncio
subscribers observe it. New subscribers see the current value immediately,
and slow subscribers skip straight to the newest value.
"""

import asyncio
from typing import AsyncIterator, Generic, Optional, Set, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReplayChannel(Generic[T]):
    """
    Holds at most one published value and wakes waiting subscribers.

    ``publish`` and ``subscribe`` must be used from the event loop thread.
    """

    def __init__(self) -> None:
        self._value: Optional[T] = None
        self._version = 0
        self._waiters: Set[asyncio.Event] = set()

    @property
    def has_value(self) -> bool:
        return self._version > 0

    @property
    def value(self) -> Optional[T]:
        """Most recently published value, or None before the first publication."""
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._waiters)

    def publish(self, value: T) -> None:
        """Replace the held value and notify subscribers without waiting on them."""
        self._value = value
        self._version += 1
        for waiter in self._waiters:
            waiter.set()

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the current value (if any), then every newer one."""
        seen = 0
        while True:
            if self._version > seen:
                seen = self._version
                yield self._value  # type: ignore[misc]
                continue
            waiter = asyncio.Event()
            self._waiters.add(waiter)
            try:
                await waiter.wait()
            finally:
                self._waiters.discard(waiter)
