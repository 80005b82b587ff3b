"""Wall-clock ticker that drives window recomputation."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .models import Window

logger = logging.getLogger(__name__)

ClockFn = Callable[[], float]


def window_for(now_ms: int, retention_ms: int) -> Window:
    """Return the sliding window ``[now - retention, now]``."""
    return Window(start=int(now_ms) - int(retention_ms), end=int(now_ms))


class MonotonicNow:
    """Millisecond "now" that never moves backwards.

    ``clock`` returns seconds since the epoch (``time.time`` by default); if
    it steps back (NTP adjustment, test clock) the previous value is kept.
    """

    def __init__(self, clock: ClockFn = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        now = int(round(self._clock() * 1000))
        with self._lock:
            if now > self._last:
                self._last = now
            return self._last


@dataclass
class TickerHandle:
    thread: threading.Thread
    stop_event: threading.Event

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if join:
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


class NowTicker:
    """Calls ``callback(now_ms)`` every ``interval_s`` seconds on a daemon thread."""

    def __init__(
        self,
        interval_s: float,
        callback: Callable[[int], None],
        *,
        now: Optional[MonotonicNow] = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.interval_s = float(interval_s)
        self._callback = callback
        self.now_ms = now or MonotonicNow()
        self._handle: Optional[TickerHandle] = None

    def tick(self) -> int:
        """Emit one tick immediately and return the timestamp used."""
        now_ms = self.now_ms()
        try:
            self._callback(now_ms)
        except Exception:
            logger.exception("Tick callback failed at %d", now_ms)
        return now_ms

    def start(self, *, thread_name: str = "ScrubMonTicker") -> TickerHandle:
        if self._handle is not None and self._handle.is_alive():
            return self._handle
        stop_event = threading.Event()

        def _target() -> None:
            while not stop_event.wait(self.interval_s):
                self.tick()

        thread = threading.Thread(target=_target, name=thread_name, daemon=True)
        thread.start()
        self._handle = TickerHandle(thread=thread, stop_event=stop_event)
        return self._handle

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        if self._handle is not None:
            self._handle.stop(join=join, timeout=timeout)
            self._handle = None


__all__ = ["ClockFn", "window_for", "MonotonicNow", "TickerHandle", "NowTicker"]
