"""Run-length segmentation of the interlock mode channel into chart bands."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Callable, Collection, List, Optional

from .models import ModeBand, Reading
from .series import readings_in_window

ColorFn = Callable[[Any], Optional[str]]


def build_bands(
    readings: Iterable[Reading],
    window_start: int,
    window_end: int,
    control_aliases: Collection[str],
    color_of: ColorFn,
) -> List[ModeBand]:
    """
    Scan control-channel readings inside the window and emit mode bands.

    A band opens on the first classified mode, is closed by a different
    classified mode (which opens the next band at the same instant) or by an
    unclassified reading (no colour for its mode, or no mode at all). A band
    still open after the last reading is extended to ``window_end``.

    Bands come out ordered by start and never overlap.
    """
    aliases = {str(a) for a in control_aliases}
    bands: List[ModeBand] = []
    open_mode: Optional[int] = None
    open_start: Optional[int] = None

    for reading in readings_in_window(readings, window_start, window_end):
        if str(reading.channel) not in aliases:
            continue
        t = reading.timestamp
        mode = reading.mode

        if mode is None or color_of(mode) is None:
            if open_mode is not None and open_start is not None:
                bands.append(ModeBand(open_start, t, open_mode, color_of(open_mode)))
                open_mode = None
                open_start = None
            continue

        if open_mode is None:
            open_mode = mode
            open_start = t
            continue

        if mode != open_mode:
            bands.append(ModeBand(open_start, t, open_mode, color_of(open_mode)))
            open_mode = mode
            open_start = t

    if open_mode is not None and open_start is not None:
        bands.append(ModeBand(open_start, window_end, open_mode, color_of(open_mode)))

    return bands


__all__ = ["ColorFn", "build_bands"]
