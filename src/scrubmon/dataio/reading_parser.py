"""
The telemetry API returns JSON rows shaped like::

  {"id": 17, "sensor_id": "before_scrub", "timestamp": 1717000000000,
   "co2": 512.0, "temp": 24.1, "humidity": 48.0, "mode": null}

- ``sensor_id`` (or ``channel``) : str | int  originating channel
- ``timestamp``                  : int        epoch milliseconds
- ``temperature`` / ``temp``     : float      older backends send ``temperature``
- ``mode``                       : int        0..5, interlock channel only

``parse_reading()`` turns a row into a :class:`Reading`; rows without a
channel or a usable timestamp are dropped, bad metric values become gaps.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, List, Optional

from ..core.models import Reading

logger = logging.getLogger(__name__)


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_metric(row: Mapping[str, Any], *names: str) -> Optional[float]:
    for name in names:
        value = _coerce_number(row.get(name))
        if value is not None and not math.isnan(value):
            return value
    return None


def _coerce_timestamp(value: Any) -> Optional[int]:
    number = _coerce_number(value)
    if number is None or not math.isfinite(number):
        return None
    return int(number)


def _coerce_mode(value: Any) -> Optional[int]:
    number = _coerce_number(value)
    if number is None or not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def parse_reading(row: Any) -> Reading | None:
    """Build a :class:`Reading` from one API row, or ``None`` if unusable."""
    if not isinstance(row, Mapping):
        logger.warning("Skipping non-object telemetry row: %r", row)
        return None

    channel = row.get("sensor_id", row.get("channel"))
    if channel is None or channel == "":
        logger.warning("Missing field %s in telemetry row: %r", "sensor_id", row)
        return None

    timestamp = _coerce_timestamp(row.get("timestamp"))
    if timestamp is None:
        logger.warning("Missing or bad timestamp in telemetry row: %r", row)
        return None

    row_id = row.get("id")
    return Reading(
        channel=str(channel),
        timestamp=timestamp,
        id=None if row_id is None else str(row_id),
        co2=_coerce_metric(row, "co2"),
        temperature=_coerce_metric(row, "temperature", "temp"),
        humidity=_coerce_metric(row, "humidity"),
        mode=_coerce_mode(row.get("mode")),
    )


def parse_rows(rows: Iterable[Any]) -> List[Reading]:
    """Parse a fetched batch, keeping arrival order and skipping bad rows."""
    readings: List[Reading] = []
    dropped = 0
    for row in rows:
        reading = parse_reading(row)
        if reading is None:
            dropped += 1
            continue
        readings.append(reading)
    if dropped:
        logger.info("Dropped %d of %d telemetry rows", dropped, dropped + len(readings))
    return readings
