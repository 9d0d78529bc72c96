"""Deterministic time sources for countdown tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


class ManualTicker:
    """Ticker that only fires when a test calls :meth:`fire`."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[], None]] = None
        self.starts = 0
        self.stops = 0

    @property
    def running(self) -> bool:
        return self.callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.starts += 1

    def stop(self) -> None:
        self.callback = None
        self.stops += 1

    def fire(self, times: int = 1) -> int:
        fired = 0
        for _ in range(times):
            if self.callback is None:
                break
            self.callback()
            fired += 1
        return fired


@dataclass
class FakeClock:
    """Monotonic clock advanced by hand."""

    now: float = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
