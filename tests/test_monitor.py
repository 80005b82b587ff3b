from __future__ import annotations

import json
import logging
from pathlib import Path

from scrubmon.tools.monitor import main


def test_replay_logs_status_tiles(tmp_path: Path, caplog) -> None:
    t = 1_700_000_000_000
    rows = [
        {"id": 1, "sensor_id": "before_scrub", "timestamp": t - 2000, "co2": 500, "temp": 24.0},
        {"id": 2, "sensor_id": "4", "timestamp": t - 1500, "mode": 2},
        {"id": 1, "sensor_id": "before_scrub", "timestamp": t - 2000, "co2": 520, "temp": 24.0},
        {"id": 3, "sensor_id": "after_scrub", "timestamp": t, "co2": 410},
    ]
    path = tmp_path / "iaq.jsonl"
    path.write_text("\n".join(json.dumps(r) for r in rows), encoding="utf-8")

    with caplog.at_level(logging.INFO, logger="scrubmon.monitor"):
        assert main(["--replay", str(path), "--batch-size", "2"]) == 0

    text = caplog.text
    assert "Mode: Scrubbing" in text
    assert "520.00 ppm" in text
    assert "24.00 °C" in text
    assert "CO₂ (ppm): CO₂ After Scrub (1), CO₂ Before Scrub (1)" in text
    assert "Humid (%RH): -" in text
    assert "Replayed 4 readings in 2 batches" in text


def test_replay_with_no_readings_fails(tmp_path: Path) -> None:
    path = tmp_path / "empty.jsonl"
    path.write_text("not-json\n", encoding="utf-8")

    assert main(["--replay", str(path)]) == 1
