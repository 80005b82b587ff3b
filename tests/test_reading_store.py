from __future__ import annotations

from scrubmon.core.models import Reading
from scrubmon.core.reading_store import ReadingStore, RetainedSet, merge

T = 1_700_000_000_000


def _r(channel: str, ts: int, rid: str | None = None, **fields) -> Reading:
    return Reading(channel=channel, timestamp=ts, id=rid, **fields)


def test_merge_is_idempotent() -> None:
    existing = RetainedSet([_r("before_scrub", T - 5000, co2=480.0), _r("4", T - 4000, mode=2)])
    batch = [_r("before_scrub", T - 1000, "a", co2=500.0), _r("after_scrub", T - 900, co2=410.0)]

    once = merge(existing, batch, T - 10_000)
    twice = merge(once, batch, T - 10_000)

    assert twice == once
    assert len(once) == 4


def test_merge_prunes_everything_older_than_cutoff() -> None:
    existing = RetainedSet([_r("1", T - 60_000), _r("1", T - 30_000), _r("1", T - 1_000)])
    batch = [_r("2", T - 45_000), _r("2", T - 500)]
    cutoff = T - 30_000

    result = merge(existing, batch, cutoff)

    assert all(r.timestamp >= cutoff for r in result)
    assert [r.timestamp for r in result] == [T - 30_000, T - 1_000, T - 500]


def test_incoming_wins_on_identity_collision_even_if_older() -> None:
    existing = RetainedSet([_r("before_scrub", T - 1000, "a", co2=600.0)])
    batch = [_r("before_scrub", T - 2000, "a", co2=550.0)]

    result = merge(existing, batch, T - 10_000)

    assert len(result) == 1
    assert result.get("a").co2 == 550.0
    assert result.get("a").timestamp == T - 2000


def test_duplicate_id_within_batch_last_one_wins() -> None:
    batch = [
        _r("before_scrub", T - 1000, "a", co2=500.0),
        _r("before_scrub", T - 1000, "a", co2=520.0),
    ]

    result = merge(RetainedSet.empty(), batch, T - 30 * 60_000)

    assert len(result) == 1
    assert result.get("a").co2 == 520.0


def test_composite_identity_dedups_rows_without_id() -> None:
    batch = [_r("2", T - 100, co2=1.0), _r("2", T - 100, co2=2.0), _r("3", T - 100, co2=3.0)]

    result = merge((), batch, 0)

    assert len(result) == 2
    assert result.get("2-%d" % (T - 100)).co2 == 2.0


def test_empty_batch_only_prunes() -> None:
    existing = RetainedSet([_r("1", T - 20_000), _r("1", T - 5_000)])

    result = merge(existing, [], T - 10_000)

    assert [r.timestamp for r in result] == [T - 5_000]


def test_all_existing_stale_keeps_only_surviving_incoming() -> None:
    existing = RetainedSet([_r("1", T - 90_000), _r("2", T - 80_000)])
    batch = [_r("1", T - 70_000), _r("1", T - 100)]

    result = merge(existing, batch, T - 60_000)

    assert [(r.channel, r.timestamp) for r in result] == [("1", T - 100)]


def test_output_ordered_by_timestamp_then_identity() -> None:
    batch = [_r("b", T), _r("a", T), _r("c", T - 1)]

    result = merge((), batch, 0)

    assert [r.identity for r in result] == [f"c-{T - 1}", f"a-{T}", f"b-{T}"]


def test_window_slice_is_inclusive() -> None:
    retained = RetainedSet([_r("1", ts) for ts in (10, 20, 30, 40)])

    assert [r.timestamp for r in retained.window(20, 30)] == [20, 30]
    assert retained.window(41, 50) == ()
    assert retained.window(30, 20) == ()
    assert retained.oldest_timestamp() == 10
    assert retained.latest_timestamp() == 40


def test_reading_store_apply_and_replace() -> None:
    store = ReadingStore()
    store.apply([_r("1", T - 100, "x", co2=1.0)], T - 1000)
    store.apply([_r("1", T - 50, "y", co2=2.0)], T - 1000)
    assert len(store) == 2

    snapshot = store.snapshot()
    store.replace([_r("2", T - 10, "z")], T - 1000)

    assert [r.identity for r in store.snapshot()] == ["z"]
    # earlier snapshots are immutable
    assert [r.identity for r in snapshot] == ["x", "y"]

    store.prune(T)
    assert len(store) == 0
