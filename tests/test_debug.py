from __future__ import annotations

import logging

from scrubmon.tools import debug


def test_time_block_is_silent_when_disabled(monkeypatch, caplog) -> None:
    monkeypatch.setattr(debug, "DEBUG_SCRUBMON", False)

    with caplog.at_level(logging.DEBUG, logger="scrubmon.tools.debug"):
        with debug.time_block("derive_views", readings=3) as timing:
            timing["series"] = 2

    assert timing == {"readings": 3, "series": 2}
    assert caplog.records == []


def test_time_block_logs_stage_and_context(monkeypatch, caplog) -> None:
    monkeypatch.setattr(debug, "DEBUG_SCRUBMON", True)

    with caplog.at_level(logging.DEBUG, logger="scrubmon.tools.debug"):
        with debug.time_block("fetch", generation=1, full=True) as timing:
            timing["rows"] = 42

    assert debug.debug_enabled()
    message = caplog.records[-1].getMessage()
    assert message.startswith("fetch took ")
    assert message.endswith("generation=1 full=True rows=42")
