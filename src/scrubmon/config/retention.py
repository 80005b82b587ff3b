"""Retention-window presets offered by the range selector."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

logger = logging.getLogger(__name__)

MINUTE_MS = 60_000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


@dataclass(frozen=True)
class RetentionPreset:
    key: str
    label: str
    duration_ms: int


RETENTION_PRESETS: Dict[str, RetentionPreset] = {
    "30m": RetentionPreset(key="30m", label="30MIN", duration_ms=30 * MINUTE_MS),
    "1h": RetentionPreset(key="1h", label="1HR", duration_ms=HOUR_MS),
    "4h": RetentionPreset(key="4h", label="4HR", duration_ms=4 * HOUR_MS),
    "12h": RetentionPreset(key="12h", label="12HR", duration_ms=12 * HOUR_MS),
    "1d": RetentionPreset(key="1d", label="1DAY", duration_ms=DAY_MS),
    "7d": RetentionPreset(key="7d", label="7DAYS", duration_ms=7 * DAY_MS),
}

DEFAULT_RETENTION = "30m"

_ALIASES = {
    "30min": "30m",
    "30mins": "30m",
    "30minutes": "30m",
    "1hr": "1h",
    "1hour": "1h",
    "60m": "1h",
    "4hr": "4h",
    "4hours": "4h",
    "12hr": "12h",
    "12hours": "12h",
    "1day": "1d",
    "24h": "1d",
    "7day": "7d",
    "7days": "7d",
    "1w": "7d",
    "1week": "7d",
}

_BY_DURATION = {preset.duration_ms: preset for preset in RETENTION_PRESETS.values()}


def resolve_retention(value: Any, *, default: str = DEFAULT_RETENTION) -> RetentionPreset:
    """
    Map a preset key, a common alias or an exact millisecond duration onto a
    :class:`RetentionPreset`.

    Anything else falls back to ``default`` with a warning; the selector only
    ever offers the fixed set of durations.
    """
    if isinstance(value, RetentionPreset):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        preset = _BY_DURATION.get(int(value))
        if preset is not None:
            return preset
    elif value is not None:
        raw = str(value).strip().lower().replace(" ", "").replace("_", "")
        raw = _ALIASES.get(raw, raw)
        if raw in RETENTION_PRESETS:
            return RETENTION_PRESETS[raw]
        if raw.isdigit() and int(raw) in _BY_DURATION:
            return _BY_DURATION[int(raw)]

    logger.warning("Unknown retention %r; using %s", value, default)
    return RETENTION_PRESETS[default]


__all__ = [
    "RetentionPreset",
    "RETENTION_PRESETS",
    "DEFAULT_RETENTION",
    "resolve_retention",
]
