from __future__ import annotations

from scrubmon.config.channels import ChannelCatalog
from scrubmon.core.models import Reading
from scrubmon.core.pipeline import ViewPipeline, derive_views
from scrubmon.core.reading_store import RetainedSet

T = 1_700_000_000_000
HOUR = 3_600_000


def _retained() -> RetainedSet:
    return RetainedSet(
        [
            Reading("before_scrub", T - 2 * HOUR, co2=700.0),
            Reading("before_scrub", T - 600_000, co2=510.0, temperature=24.0, humidity=45.0),
            Reading("after_scrub", T - 500_000, co2=420.0, temperature=23.5),
            Reading("interlock_4c", T - 400_000, mode=2, co2=480.0),
            Reading("4", T - 100_000, mode=3),
        ]
    )


def test_derive_views_builds_every_metric_and_shared_bands() -> None:
    views = derive_views(_retained(), T, HOUR)

    assert views.window.start == T - HOUR and views.window.end == T
    assert set(views.series) == {"co2", "temperature", "humidity"}
    assert [p.y for p in views.series["co2"]["before_scrub"].points] == [510.0]
    assert "after_scrub" not in views.series["humidity"]
    assert views.series["co2"]["interlock_4c"].name == "CO₂ Interlock 4C"
    assert [(b.start, b.end, b.mode) for b in views.bands] == [
        (T - 400_000, T - 100_000, 2),
        (T - 100_000, T, 3),
    ]
    assert views.mode_label == "Mode: Regen"
    assert views.retained_count == 5


def test_latest_uses_full_retained_set_not_window() -> None:
    retained = RetainedSet([Reading("before_scrub", T - 2 * HOUR, co2=700.0)])

    views = derive_views(retained, T, HOUR)

    assert views.series["co2"] == {}
    assert views.latest["before_scrub"].co2 == 700.0
    assert views.latest["after_scrub"].is_fallback


class _Boom:
    def handle_views(self, views) -> None:
        raise RuntimeError("boom")


class _Collect:
    def __init__(self) -> None:
        self.seen = []

    def handle_views(self, views) -> None:
        self.seen.append(views)


def test_failing_sink_does_not_block_others() -> None:
    collect = _Collect()
    pipeline = ViewPipeline(catalog=ChannelCatalog(), sinks=[_Boom(), collect])

    views = pipeline.publish(_retained(), T, HOUR)

    assert collect.seen == [views]
    assert pipeline.latest_views() is views
