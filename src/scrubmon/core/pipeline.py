"""Derived-view publishing: retained set in, chart and tile views out."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from ..config.channels import SERIES_FALLBACK_PREFIX, ChannelCatalog
from ..tools.debug import time_block
from .clock import window_for
from .latest import MODE_PLACEHOLDER, current_mode_label, latest_per_channel
from .mode_bands import build_bands
from .models import ChannelSeries, LatestSnapshot, ModeBand, Window
from .reading_store import RetainedSet
from .series import METRICS, build_series, make_label_fn

logger = logging.getLogger(__name__)

__all__ = [
    "DashboardViews",
    "ViewSink",
    "ViewPipeline",
    "build_all_series",
    "derive_views",
]

SeriesByChannel = Dict[str, ChannelSeries]


@dataclass(frozen=True)
class DashboardViews:
    """Everything the rendering and status-tile layers consume for one instant."""

    window: Window
    series: Dict[str, SeriesByChannel]
    bands: Sequence[ModeBand]
    latest: Dict[str, LatestSnapshot]
    mode_label: str = MODE_PLACEHOLDER
    retained_count: int = 0


class ViewSink(Protocol):
    def handle_views(self, views: DashboardViews) -> None:  # pragma: no cover - protocol
        ...


def build_all_series(
    retained: RetainedSet,
    window: Window,
    catalog: ChannelCatalog,
) -> Dict[str, SeriesByChannel]:
    """Build the CO2, temperature and humidity series over the same window."""
    out: Dict[str, SeriesByChannel] = {}
    for key, metric in METRICS.items():
        label_fn = make_label_fn(
            catalog.series_labels.get(key, {}),
            SERIES_FALLBACK_PREFIX.get(key, key),
        )
        out[key] = build_series(retained, window.start, window.end, metric.selector, label_fn)
    return out


def derive_views(
    retained: RetainedSet,
    now_ms: int,
    retention_ms: int,
    catalog: Optional[ChannelCatalog] = None,
) -> DashboardViews:
    """Recompute every derived view from scratch; no state is carried over."""
    catalog = catalog or ChannelCatalog()
    window = window_for(now_ms, retention_ms)
    with time_block("derive_views", readings=len(retained), window_ms=retention_ms):
        series = build_all_series(retained, window, catalog)
        bands = build_bands(
            retained,
            window.start,
            window.end,
            catalog.control_aliases,
            catalog.color_of,
        )
        tiles = [tile.key for tile in catalog.tiles]
        latest = latest_per_channel(
            retained,
            tiles,
            aliases=catalog.alias_groups(),
            labels=catalog.tile_labels(),
        )
        mode_label = current_mode_label(latest.get(catalog.control_key), catalog.mode_labels)
    return DashboardViews(
        window=window,
        series=series,
        bands=tuple(bands),
        latest=latest,
        mode_label=mode_label,
        retained_count=len(retained),
    )


@dataclass
class ViewPipeline:
    """Derive views and fan them out to the registered sinks."""

    catalog: ChannelCatalog = field(default_factory=ChannelCatalog)
    sinks: List[ViewSink] = field(default_factory=list)

    _latest: Optional[DashboardViews] = field(init=False, default=None, repr=False)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def add_sink(self, sink: ViewSink) -> None:
        self.sinks.append(sink)

    def publish(self, retained: RetainedSet, now_ms: int, retention_ms: int) -> DashboardViews:
        views = derive_views(retained, now_ms, retention_ms, self.catalog)
        with self._lock:
            self._latest = views
        for sink in list(self.sinks):
            try:
                sink.handle_views(views)
            except Exception:
                logger.exception("View sink %r failed", sink)
        return views

    def latest_views(self) -> Optional[DashboardViews]:
        with self._lock:
            return self._latest
