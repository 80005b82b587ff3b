"""Background thread that polls the telemetry API and hands batches back."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..core.models import FetchRequest, Reading
from ..tools.debug import debug_enabled, time_block

logger = logging.getLogger(__name__)

RequestFactory = Callable[[], Optional[FetchRequest]]
FetchFn = Callable[[FetchRequest], List[Reading]]
ResultCallback = Callable[[FetchRequest, Sequence[Reading]], None]
ErrorCallback = Callable[[FetchRequest, Exception], None]


@dataclass
class FetchWorkerHandle:
    thread: threading.Thread
    stop_event: threading.Event

    def is_alive(self) -> bool:
        return self.thread.is_alive()


class FetchWorker:
    """Polls ``fetch_fn`` every ``interval_s`` seconds on a daemon thread.

    The request is built by ``request_factory`` right before each fetch so it
    reflects the current retention. Results and failures are only reported
    through the callbacks; the worker never touches the reading store, the
    single consumer applies them in order.
    """

    def __init__(
        self,
        request_factory: RequestFactory,
        fetch_fn: FetchFn,
        on_result: ResultCallback,
        on_error: ErrorCallback,
        *,
        interval_s: float = 100.0,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self._request_factory = request_factory
        self._fetch_fn = fetch_fn
        self._on_result = on_result
        self._on_error = on_error
        self.interval_s = float(interval_s)
        self._wake = threading.Event()
        self._handle: Optional[FetchWorkerHandle] = None

    def fetch_once(self) -> bool:
        """Run one request/fetch/report cycle. Returns False if nothing was requested."""
        request = self._request_factory()
        if request is None:
            return False
        try:
            with time_block("fetch", generation=request.generation, full=request.full) as timing:
                readings = self._fetch_fn(request)
                timing["rows"] = len(readings)
        except Exception as exc:
            if debug_enabled():
                logger.exception("Fetch failed for %r", request)
            else:
                logger.warning("Fetch failed: %s", exc)
            self._on_error(request, exc)
            return True
        self._on_result(request, readings)
        return True

    def trigger(self) -> None:
        """Wake the polling thread for an immediate fetch."""
        self._wake.set()

    def start(self, *, thread_name: str = "ScrubMonFetchWorker") -> FetchWorkerHandle:
        if self._handle is not None and self._handle.is_alive():
            return self._handle
        stop_event = threading.Event()

        def _target() -> None:
            while not stop_event.is_set():
                try:
                    self.fetch_once()
                except Exception:  # pragma: no cover - callback bugs must not kill polling
                    logger.exception("Fetch cycle crashed")
                self._wake.wait(self.interval_s)
                self._wake.clear()

        thread = threading.Thread(target=_target, name=thread_name, daemon=True)
        thread.start()
        self._handle = FetchWorkerHandle(thread=thread, stop_event=stop_event)
        return self._handle

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        handle = self._handle
        if handle is None:
            return
        handle.stop_event.set()
        self._wake.set()
        if join:
            handle.thread.join(timeout)
        self._handle = None


__all__ = [
    "FetchWorker",
    "FetchWorkerHandle",
    "RequestFactory",
    "FetchFn",
    "ResultCallback",
    "ErrorCallback",
]
