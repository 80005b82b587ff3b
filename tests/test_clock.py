from __future__ import annotations

import pytest

from scrubmon.core.clock import MonotonicNow, NowTicker, window_for


def test_window_for() -> None:
    window = window_for(10_000, 3_000)
    assert (window.start, window.end) == (7_000, 10_000)
    assert window.contains(7_000) and window.contains(10_000)
    assert not window.contains(6_999)


def test_monotonic_now_never_goes_backwards() -> None:
    times = iter([100.0, 99.0, 101.5])
    now = MonotonicNow(clock=lambda: next(times))

    assert [now(), now(), now()] == [100_000, 100_000, 101_500]


def test_ticker_tick_calls_back_and_survives_errors() -> None:
    seen = []
    ticker = NowTicker(1.0, seen.append, now=MonotonicNow(clock=lambda: 5.0))
    assert ticker.tick() == 5_000
    assert seen == [5_000]

    def _boom(now_ms: int) -> None:
        raise RuntimeError("boom")

    assert NowTicker(1.0, _boom, now=MonotonicNow(clock=lambda: 6.0)).tick() == 6_000


def test_ticker_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        NowTicker(0, lambda now_ms: None)
