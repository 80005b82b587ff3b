from __future__ import annotations

from scrubmon.config.channels import DEFAULT_CONTROL_ALIASES, ChannelCatalog
from scrubmon.core.mode_bands import build_bands
from scrubmon.core.models import ModeBand, Reading

catalog = ChannelCatalog()
color_of = catalog.color_of


def _bands(readings, start=0, end=1000):
    return build_bands(readings, start, end, DEFAULT_CONTROL_ALIASES, color_of)


def test_final_run_is_flushed_to_window_end() -> None:
    readings = [
        Reading("interlock_4c", 100, mode=1),
        Reading("interlock_4c", 200, mode=1),
        Reading("interlock_4c", 300, mode=3),
    ]

    bands = _bands(readings)

    assert [(b.start, b.end, b.mode) for b in bands] == [(100, 300, 1), (300, 1000, 3)]
    assert bands[0].color == catalog.mode_colors[1]


def test_unclassified_reading_closes_band_without_trailing_band() -> None:
    readings = [Reading("interlock_4c", 100, mode=2), Reading("interlock_4c", 200, mode=None)]

    assert _bands(readings) == [ModeBand(100, 200, 2, catalog.mode_colors[2])]


def test_out_of_palette_mode_closes_band() -> None:
    readings = [
        Reading("interlock_4c", 100, mode=0),
        Reading("interlock_4c", 150, mode=9),
        Reading("interlock_4c", 180, mode=9),
        Reading("interlock_4c", 200, mode=5),
    ]

    bands = _bands(readings, end=500)

    assert [(b.start, b.end, b.mode) for b in bands] == [(100, 150, 0), (200, 500, 5)]


def test_legacy_numeric_alias_is_the_same_source() -> None:
    readings = [
        Reading("interlock_4c", 100, mode=2),
        Reading("4", 200, mode=2),
        Reading("4", 300, mode=4),
        Reading("before_scrub", 250, co2=500.0),
    ]

    bands = _bands(readings, end=400)

    assert [(b.start, b.end, b.mode) for b in bands] == [(100, 300, 2), (300, 400, 4)]


def test_readings_outside_window_are_ignored() -> None:
    readings = [Reading("4", 50, mode=1), Reading("4", 150, mode=2), Reading("4", 600, mode=3)]

    bands = _bands(readings, start=100, end=500)

    assert [(b.start, b.end, b.mode) for b in bands] == [(150, 500, 2)]


def test_bands_never_overlap() -> None:
    modes = [1, 1, 2, None, 3, 3, 7, 0, 0, 5, 2, None, None, 4]
    readings = [Reading("interlock_4c", 10 * (i + 1), mode=m) for i, m in enumerate(modes)]

    bands = _bands(readings)

    assert bands
    for prev, nxt in zip(bands, bands[1:]):
        assert prev.end <= nxt.start
    assert all(b.start <= b.end for b in bands)


def test_no_control_readings_no_bands() -> None:
    assert _bands([Reading("before_scrub", 100, co2=1.0)]) == []
    assert _bands([]) == []
