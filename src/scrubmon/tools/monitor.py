"""Headless monitor: poll the telemetry API (or replay a file) and log the tiles.

Examples::

    scrubmon-monitor --url http://localhost:3011 --retention 1h
    scrubmon-monitor --replay recordings/iaq.jsonl --batch-size 200
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..config.retention import RETENTION_PRESETS
from ..config.runtime import load_catalog, load_config
from ..core.clock import MonotonicNow
from ..core.models import Reading
from ..core.pipeline import DashboardViews
from ..core.series import METRICS
from ..core.session import MonitorSession
from ..dataio.log_loader import chunk_readings, load_jsonl
from ..remote.http_client import IaqHttpClient

logger = logging.getLogger("scrubmon.monitor")


def _fmt(value: Optional[float], unit: str) -> str:
    if value is None:
        return "-"
    return f"{value:.2f} {unit}"


def format_views(views: DashboardViews) -> str:
    """Render the status tiles and chart summary as a few log-friendly lines."""
    lines = [
        f"{views.mode_label} | {views.retained_count} readings | "
        f"{len(views.bands)} mode bands | window "
        f"{datetime.fromtimestamp(views.window.start / 1000):%d/%m %H:%M}"
        f" - {datetime.fromtimestamp(views.window.end / 1000):%d/%m %H:%M}"
    ]
    for key, by_channel in views.series.items():
        metric = METRICS[key]
        summary = ", ".join(f"{s.name} ({len(s.points)})" for s in by_channel.values()) or "-"
        lines.append(f"  {metric.axis_title}: {summary}")
    for snapshot in views.latest.values():
        if snapshot.is_fallback:
            lines.append(f"  {snapshot.label}: no data")
            continue
        lines.append(
            f"  {snapshot.label}: CO₂ {_fmt(snapshot.co2, METRICS['co2'].unit)}, "
            f"T {_fmt(snapshot.temperature, METRICS['temperature'].unit)}, "
            f"RH {_fmt(snapshot.humidity, METRICS['humidity'].unit)} "
            f"@ {datetime.fromtimestamp(snapshot.timestamp / 1000):%H:%M:%S}"
        )
    return "\n".join(lines)


class LogSink:
    """View sink that writes every publish to the log."""

    def __init__(self, log: logging.Logger = logger) -> None:
        self._log = log

    def handle_views(self, views: DashboardViews) -> None:
        self._log.info("\n%s", format_views(views))


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="scrubmon headless telemetry monitor")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (monitor settings and channels block)",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Telemetry API base URL (overrides config and SCRUBMON_API_URL)",
    )
    parser.add_argument(
        "--retention",
        choices=sorted(RETENTION_PRESETS),
        default=None,
        help="Retention window preset (default: from config, 30m)",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Replay a JSONL/JSON recording instead of polling the API",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=500,
        help="Readings per replayed batch (default: 500)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Stop polling after this many seconds (default: run until Ctrl-C)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def replay(session: MonitorSession, readings: Sequence[Reading], batch_size: int) -> int:
    """Feed recorded readings through the session batch by batch; returns batches applied."""
    batches = 0
    for batch in chunk_readings(readings, batch_size):
        session.submit_batch(session.next_request(), batch)
        session.run_pending()
        batches += 1
    return batches


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(list(argv) if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    if args.url:
        cfg.api_base_url = args.url
    if args.retention:
        cfg.retention = args.retention
    catalog = load_catalog(args.config)

    if args.replay is not None:
        readings = load_jsonl(args.replay)
        if not readings:
            logger.error("No usable readings in %s", args.replay)
            return 1
        last_ms = max(r.timestamp for r in readings)
        session = MonitorSession(
            retention=cfg.retention,
            catalog=catalog,
            now=MonotonicNow(clock=lambda: last_ms / 1000.0),
        )
        session.pipeline.add_sink(LogSink())
        batches = replay(session, readings, max(1, args.batch_size))
        logger.info("Replayed %d readings in %d batches", len(readings), batches)
        return 0

    session = MonitorSession(
        retention=cfg.retention,
        catalog=catalog,
        queue_size=cfg.event_queue_size,
    )
    session.pipeline.add_sink(LogSink())
    client = IaqHttpClient(cfg.api_base_url, cfg.api_path, timeout_s=cfg.request_timeout_s)
    session.attach_fetcher(client.fetch, interval_s=cfg.fetch_interval_s)
    logger.info("Polling %s every %.0f s (retention %s)", client.url, cfg.fetch_interval_s, cfg.retention)

    session.start(tick_interval_s=cfg.tick_interval_s)
    deadline = time.monotonic() + args.duration if args.duration > 0 else None
    try:
        while deadline is None or time.monotonic() < deadline:
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        session.stop(join=True, timeout=2.0)
        client.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
