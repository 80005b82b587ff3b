"""Telemetry windowing engine: retained readings and the views derived from them.

Readings are merged into an identity-keyed :class:`RetainedSet`; every tick
or merge recomputes chart series, interlock mode bands and latest-value
tiles from scratch through :func:`derive_views`. :class:`MonitorSession`
serializes ticks and fetch results onto a single writer.
"""

from .models import (
    ChannelSeries,
    FetchRequest,
    LatestSnapshot,
    ModeBand,
    Reading,
    SeriesPoint,
    Window,
)
from .reading_store import ReadingStore, RetainedSet, merge
from .series import METRICS, Metric, build_series, make_label_fn
from .mode_bands import build_bands
from .latest import current_mode_label, latest_per_channel
from .clock import MonotonicNow, NowTicker, window_for
from .pipeline import DashboardViews, ViewPipeline, ViewSink, derive_views
from .session import MonitorSession

__all__ = [
    "ChannelSeries",
    "FetchRequest",
    "LatestSnapshot",
    "ModeBand",
    "Reading",
    "SeriesPoint",
    "Window",
    "ReadingStore",
    "RetainedSet",
    "merge",
    "METRICS",
    "Metric",
    "build_series",
    "make_label_fn",
    "build_bands",
    "current_mode_label",
    "latest_per_channel",
    "MonotonicNow",
    "NowTicker",
    "window_for",
    "DashboardViews",
    "ViewPipeline",
    "ViewSink",
    "derive_views",
    "MonitorSession",
]
