from __future__ import annotations

"""
Coordinator that funnels clock ticks and fetch results into one writer.

Ticker and fetch threads only post events; :meth:`MonitorSession.run_pending`
(or the consumer thread started by :meth:`MonitorSession.start`) applies them
in arrival order, so merges never interleave and every publish sees a store
that is the result of all earlier merges.
"""

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, List, Optional, Sequence, Union

from ..config.channels import ChannelCatalog
from ..config.retention import RetentionPreset, resolve_retention
from .clock import MonotonicNow, NowTicker
from .models import FetchRequest, Reading
from .pipeline import DashboardViews, ViewPipeline
from .reading_store import ReadingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickEvent:
    now_ms: int


@dataclass(frozen=True)
class BatchEvent:
    request: FetchRequest
    readings: Sequence[Reading]


@dataclass(frozen=True)
class FailureEvent:
    request: FetchRequest
    error: str


@dataclass(frozen=True)
class RetentionEvent:
    preset: RetentionPreset


SessionEvent = Union[TickEvent, BatchEvent, FailureEvent, RetentionEvent]


class MonitorSession:
    def __init__(
        self,
        *,
        retention: Any = "30m",
        catalog: Optional[ChannelCatalog] = None,
        pipeline: Optional[ViewPipeline] = None,
        store: Optional[ReadingStore] = None,
        now: Optional[MonotonicNow] = None,
        queue_size: int = 256,
    ) -> None:
        self.store = store or ReadingStore()
        self.pipeline = pipeline or ViewPipeline(catalog=catalog or ChannelCatalog())
        self.now_ms = now or MonotonicNow()
        self.last_error: Optional[str] = None

        self._retention = resolve_retention(retention)
        self._generation = 0
        self._full_pending = True
        self._latest_ms = 0
        self._state_lock = threading.Lock()

        self._events: Queue[SessionEvent] = Queue(maxsize=max(1, int(queue_size)))
        self._consumer: Optional[threading.Thread] = None
        self._consumer_stop = threading.Event()
        self._ticker: Optional[NowTicker] = None
        self._fetch_worker = None
        self._on_retention_change: List[Callable[[RetentionPreset], None]] = []

    # ---------------------------------------------------------------- state
    @property
    def retention(self) -> RetentionPreset:
        with self._state_lock:
            return self._retention

    @property
    def generation(self) -> int:
        with self._state_lock:
            return self._generation

    def latest_views(self) -> Optional[DashboardViews]:
        return self.pipeline.latest_views()

    # ------------------------------------------------------ fetch callbacks
    def next_request(self) -> FetchRequest:
        """Build the next fetch request from the current retention.

        The first request after start-up or a retention change is a full
        fetch; later ones ask only for rows newer than the last batch.
        """
        with self._state_lock:
            now = self.now_ms()
            retention_ms = self._retention.duration_ms
            full = self._full_pending
            self._full_pending = False
            return FetchRequest(
                generation=self._generation,
                start_ms=now - retention_ms,
                latest_ms=0 if full else self._latest_ms,
                range_ms=retention_ms,
                full=full,
            )

    def submit_batch(self, request: FetchRequest, readings: Sequence[Reading]) -> None:
        """Queue a fetched batch (callable from any thread)."""
        with self._state_lock:
            if request.generation == self._generation and readings:
                self._latest_ms = readings[-1].timestamp
        self._events.put(BatchEvent(request=request, readings=tuple(readings)))

    def submit_failure(self, request: FetchRequest, error: Exception | str) -> None:
        """Queue a fetch failure (callable from any thread)."""
        with self._state_lock:
            if request.full and request.generation == self._generation:
                self._full_pending = True
        self._events.put(FailureEvent(request=request, error=str(error)))

    # ------------------------------------------------------- other events
    def tick(self, now_ms: Optional[int] = None) -> None:
        self._events.put(TickEvent(now_ms=self.now_ms() if now_ms is None else int(now_ms)))

    def set_retention(self, value: Any) -> RetentionPreset:
        """Switch the retention window and request a fresh full fetch."""
        preset = resolve_retention(value)
        with self._state_lock:
            self._retention = preset
            self._generation += 1
            self._full_pending = True
            self._latest_ms = 0
        logger.info("Retention set to %s (generation %d)", preset.label, self.generation)
        self._events.put(RetentionEvent(preset=preset))
        for callback in list(self._on_retention_change):
            callback(preset)
        return preset

    def on_retention_change(self, callback: Callable[[RetentionPreset], None]) -> None:
        self._on_retention_change.append(callback)

    # ------------------------------------------------------------ consumer
    def run_pending(self) -> int:
        """Apply every queued event in order on the calling thread."""
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except Empty:
                break
            self._apply(event)
            handled += 1
        return handled

    def _apply(self, event: SessionEvent) -> None:
        try:
            if isinstance(event, BatchEvent):
                self._apply_batch(event)
            elif isinstance(event, FailureEvent):
                self.last_error = event.error
                logger.warning("Fetch failed, keeping %d retained readings: %s", len(self.store), event.error)
            elif isinstance(event, TickEvent):
                self._publish(event.now_ms)
            elif isinstance(event, RetentionEvent):
                self._publish(self.now_ms())
        except Exception:
            logger.exception("Failed to apply %s", type(event).__name__)

    def _apply_batch(self, event: BatchEvent) -> None:
        with self._state_lock:
            generation = self._generation
            retention_ms = self._retention.duration_ms
        if event.request.generation != generation:
            logger.info(
                "Dropping %d readings from superseded fetch (generation %d, current %d)",
                len(event.readings),
                event.request.generation,
                generation,
            )
            return

        # Cutoff comes from the clock at apply time, not at request time.
        now = self.now_ms()
        cutoff = now - retention_ms
        if not event.readings:
            # Nothing new, not even after a full fetch: keep what is still in range.
            self.store.prune(cutoff)
        elif event.request.full:
            self.store.replace(event.readings, cutoff)
        else:
            self.store.apply(event.readings, cutoff)
        self.last_error = None
        self._publish(now)

    def _publish(self, now_ms: int) -> DashboardViews:
        with self._state_lock:
            retention_ms = self._retention.duration_ms
        return self.pipeline.publish(self.store.snapshot(), now_ms, retention_ms)

    # ----------------------------------------------------------- threading
    def attach_fetcher(self, fetch_fn: Callable[[FetchRequest], List[Reading]], *, interval_s: float = 100.0):
        """Create the polling worker for ``fetch_fn``; a retention change wakes it."""
        from ..remote.fetch_worker import FetchWorker

        worker = FetchWorker(
            self.next_request,
            fetch_fn,
            self.submit_batch,
            self.submit_failure,
            interval_s=interval_s,
        )
        self._fetch_worker = worker
        self.on_retention_change(lambda _preset: worker.trigger())
        return worker

    def start(self, *, tick_interval_s: float = 10.0) -> None:
        """Start the consumer, the ticker and (if attached) the fetch worker."""
        if self._consumer is not None and self._consumer.is_alive():
            return
        self._consumer_stop.clear()

        def _consume() -> None:
            while not self._consumer_stop.is_set():
                try:
                    event = self._events.get(timeout=0.5)
                except Empty:
                    continue
                self._apply(event)

        self._consumer = threading.Thread(target=_consume, name="ScrubMonSession", daemon=True)
        self._consumer.start()

        self._ticker = NowTicker(tick_interval_s, self.tick, now=self.now_ms)
        self._ticker.start()
        if self._fetch_worker is not None:
            self._fetch_worker.start()

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        if self._fetch_worker is not None:
            self._fetch_worker.stop(join=join, timeout=timeout)
        if self._ticker is not None:
            self._ticker.stop(join=join, timeout=timeout)
            self._ticker = None
        self._consumer_stop.set()
        if join and self._consumer is not None:
            self._consumer.join(timeout)
        self._consumer = None


__all__ = [
    "TickEvent",
    "BatchEvent",
    "FailureEvent",
    "RetentionEvent",
    "MonitorSession",
]
