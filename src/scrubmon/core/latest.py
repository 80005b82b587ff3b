"""Latest known reading per logical channel, for the status tiles."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Collection, Dict, Optional, Sequence

from .models import LatestSnapshot, Reading

MODE_PLACEHOLDER = "Mode: -"


def latest_per_channel(
    readings: Iterable[Reading],
    channels: Collection[str],
    aliases: Mapping[str, Sequence[str]] | None = None,
    labels: Mapping[str, str] | None = None,
) -> Dict[str, LatestSnapshot]:
    """
    Return one snapshot per requested logical channel.

    ``aliases`` maps a logical channel to every physical channel id that
    reports for it; readings from all of them share one bucket and the one
    with the greatest timestamp wins. The whole retained set is scanned, not
    just the chart window. Channels with no reading get
    :meth:`LatestSnapshot.fallback` so the result always has every key.
    """
    aliases = aliases or {}
    labels = labels or {}

    physical_to_logical: Dict[str, str] = {}
    for key in channels:
        physical_to_logical.setdefault(str(key), str(key))
        for alias in aliases.get(key, ()):
            physical_to_logical.setdefault(str(alias), str(key))

    newest: Dict[str, Reading] = {}
    for reading in readings:
        logical = physical_to_logical.get(str(reading.channel))
        if logical is None:
            continue
        current = newest.get(logical)
        if current is None or current.timestamp < reading.timestamp:
            newest[logical] = reading

    result: Dict[str, LatestSnapshot] = {}
    for key in channels:
        key = str(key)
        label = labels.get(key) or f"Sensor {key}"
        reading = newest.get(key)
        if reading is None:
            result[key] = LatestSnapshot.fallback(key, label)
            continue
        result[key] = LatestSnapshot(
            key=key,
            label=label,
            channel=str(reading.channel),
            id=reading.identity,
            timestamp=reading.timestamp,
            co2=reading.co2,
            temperature=reading.temperature,
            humidity=reading.humidity,
            mode=reading.mode,
        )
    return result


def current_mode_label(
    snapshot: Optional[LatestSnapshot],
    mode_labels: Mapping[int, str],
) -> str:
    """Format the control channel's mode as ``"Mode: <label>"`` or ``"Mode: -"``."""
    if snapshot is None or snapshot.mode is None or isinstance(snapshot.mode, bool):
        return MODE_PLACEHOLDER
    label = mode_labels.get(snapshot.mode)
    if label is None:
        return MODE_PLACEHOLDER
    return f"Mode: {label}"


__all__ = ["MODE_PLACEHOLDER", "latest_per_channel", "current_mode_label"]
