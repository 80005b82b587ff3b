"""Per-channel series construction for the CO2 / temperature / humidity charts."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .models import ChannelSeries, Reading, SeriesPoint
from .reading_store import RetainedSet

MetricSelector = Callable[[Reading], Optional[float]]
LabelFn = Callable[[str], str]


@dataclass(frozen=True)
class Metric:
    key: str
    selector: MetricSelector
    unit: str
    axis_title: str


METRICS: Dict[str, Metric] = {
    "co2": Metric(key="co2", selector=lambda r: r.co2, unit="ppm", axis_title="CO₂ (ppm)"),
    "temperature": Metric(
        key="temperature",
        selector=lambda r: r.temperature,
        unit="°C",
        axis_title="Temp (°C)",
    ),
    "humidity": Metric(
        key="humidity",
        selector=lambda r: r.humidity,
        unit="%RH",
        axis_title="Humid (%RH)",
    ),
}


def make_label_fn(table: Mapping[str, str], fallback_prefix: str) -> LabelFn:
    """Return a labeller that never drops an unknown channel."""

    def _label(channel: str) -> str:
        return table.get(channel) or f"{fallback_prefix} {channel}"

    return _label


def _numeric(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def readings_in_window(
    readings: Iterable[Reading],
    window_start: int,
    window_end: int,
) -> List[Reading]:
    """Readings with ``window_start <= timestamp <= window_end``, time ordered."""
    if isinstance(readings, RetainedSet):
        return list(readings.window(window_start, window_end))
    selected = [r for r in readings if window_start <= r.timestamp <= window_end]
    selected.sort(key=lambda r: (r.timestamp, r.identity))
    return selected


def build_series(
    readings: Iterable[Reading],
    window_start: int,
    window_end: int,
    selector: MetricSelector,
    label_fn: LabelFn,
) -> Dict[str, ChannelSeries]:
    """
    Project readings into one ordered point sequence per channel.

    A reading whose selected value is missing, NaN or not numeric contributes
    no point, so the renderer sees a gap rather than a zero. Channels are
    returned in sorted order and each series is ascending by timestamp.
    """
    by_channel: Dict[str, List[SeriesPoint]] = {}
    for reading in readings_in_window(readings, window_start, window_end):
        value = _numeric(selector(reading))
        if value is None:
            continue
        channel = str(reading.channel)
        by_channel.setdefault(channel, []).append(SeriesPoint(x=reading.timestamp, y=value))

    result: Dict[str, ChannelSeries] = {}
    for channel in sorted(by_channel):
        points = by_channel[channel]
        points.sort(key=lambda p: p.x)
        result[channel] = ChannelSeries(channel=channel, name=label_fn(channel), points=tuple(points))
    return result


__all__ = [
    "Metric",
    "METRICS",
    "MetricSelector",
    "LabelFn",
    "make_label_fn",
    "readings_in_window",
    "build_series",
]
