"""Countdown timer and the tickers that drive it.

The countdown itself does not know where its one-second cadence comes from:
a :class:`Ticker` is injected, which lets the Textual app use
``set_interval``, the console runner convert elapsed wall time into ticks,
and tests advance time by hand.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional, Protocol

__all__ = [
    "AsyncioTicker",
    "CountdownTimer",
    "PollingTicker",
    "Ticker",
    "TickCallback",
    "format_time",
]

TickCallback = Callable[[], None]


class Ticker(Protocol):
    """A source of periodic callbacks that can be started and stopped."""

    def start(self, callback: TickCallback) -> None:
        ...

    def stop(self) -> None:
        ...


class CountdownTimer:
    """One-shot countdown that fires ``on_expire`` exactly once.

    Each tick lowers the remaining time by one second (never below zero) and
    reports it through ``on_tick``. Reaching zero stops the timer before
    ``on_expire`` runs. ``is_active`` lets the owner veto ticks; when it
    returns ``False`` the timer stops itself without expiring. A stopped or
    expired timer ignores further ticks, so an instance is never reused.
    """

    def __init__(
        self,
        duration: int,
        *,
        ticker: Ticker,
        on_expire: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
        is_active: Optional[Callable[[], bool]] = None,
    ) -> None:
        if duration < 0:
            raise ValueError("duration must be >= 0")
        self._duration = duration
        self._remaining = duration
        self._ticker = ticker
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._is_active = is_active
        self._running = False
        self._started = False
        self._expired = False

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def expired(self) -> bool:
        return self._expired

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._running = True
        if self._remaining == 0:
            self._expire()
            return
        self._ticker.start(self.tick)

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._ticker.stop()

    def tick(self) -> None:
        if not self._running:
            return
        if self._is_active is not None and not self._is_active():
            self.stop()
            return
        self._remaining = max(0, self._remaining - 1)
        if self._on_tick is not None:
            self._on_tick(self._remaining)
        if self._remaining == 0:
            self._expire()

    def _expire(self) -> None:
        if self._expired:
            return
        self._expired = True
        self.stop()
        self._on_expire()


class AsyncioTicker:
    """Ticker scheduled on a running asyncio event loop."""

    def __init__(
        self,
        interval: float = 1.0,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._interval = interval
        self._loop = loop
        self._callback: Optional[TickCallback] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._deadline = 0.0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self.stop()
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._callback = callback
        self._deadline = self._loop.time()
        self._schedule()

    def stop(self) -> None:
        self._callback = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        if self._loop is None:
            raise RuntimeError("AsyncioTicker has not been started.")
        # Each deadline builds on the previous one, not on the current time.
        self._deadline += self._interval
        self._handle = self._loop.call_at(self._deadline, self._fire)

    def _fire(self) -> None:
        self._handle = None
        callback = self._callback
        if callback is None:
            return
        self._schedule()
        callback()


class PollingTicker:
    """Ticker for blocking loops that cannot be interrupted by a timer.

    Elapsed time since the previous poll is converted into whole ticks each
    time :meth:`poll` is called; fractional seconds carry over.
    """

    def __init__(
        self,
        interval: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._interval = interval
        self._clock = clock
        self._callback: Optional[TickCallback] = None
        self._last = 0.0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self._callback = callback
        self._last = self._clock()

    def stop(self) -> None:
        self._callback = None

    def poll(self) -> int:
        """Deliver the ticks owed since the last poll and return the count."""

        if self._callback is None:
            return 0
        elapsed = self._clock() - self._last
        owed = int(elapsed // self._interval)
        self._last += owed * self._interval
        fired = 0
        for _ in range(owed):
            callback = self._callback
            if callback is None:
                break
            callback()
            fired += 1
        return fired


def format_time(seconds: int) -> str:
    """Render ``seconds`` as ``MM:SS``."""

    seconds = max(0, int(seconds))
    minutes, remainder = divmod(seconds, 60)
    return f"{minutes:02d}:{remainder:02d}"
