"""Periodic countdown re-evaluation for live displays.

A ticker re-runs ``compute_remaining`` once per interval on the event loop.
Stopping is just ending the iteration: call ``stop()`` or let the consumer
go away (the SSE route's generator is cancelled on disconnect).
"""
import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from typing import Optional

from countdown.services.time_calculator import RemainingTime, compute_remaining, utcnow

logger = logging.getLogger(__name__)


class CountdownTicker:
    """Yields the remaining time to ``target`` every ``interval`` seconds."""

    def __init__(
        self,
        target: datetime,
        interval: float = 1.0,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.target = target
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._stopped = False
        self.last_checked_at: Optional[datetime] = None

    def stop(self) -> None:
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def current(self) -> RemainingTime:
        self.last_checked_at = self._clock()
        return compute_remaining(self.target, self.last_checked_at)

    async def ticks(self) -> AsyncIterator[RemainingTime]:
        """Emit immediately, then once per interval until the event passes."""
        while not self._stopped:
            remaining = self.current()
            yield remaining
            if remaining.is_past:
                logger.debug("Countdown to %s reached zero", self.target)
                self._stopped = True
                break
            if self._stopped:
                break
            await self._sleep(self.interval)
