"""Utilities for loading recorded telemetry for offline replay."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Sequence

from ..core.models import Reading
from .reading_parser import parse_rows

logger = logging.getLogger(__name__)


def _iter_json_rows(text: str) -> Iterator[Any]:
    stripped = text.lstrip()
    if stripped.startswith("["):
        payload = json.loads(stripped)
        if not isinstance(payload, list):
            raise ValueError("Expected a JSON array of telemetry rows")
        yield from payload
        return

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            yield json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Dropping malformed JSON line %d: %s (%s)", lineno, line, exc)


def load_jsonl(path: Path) -> List[Reading]:
    """
    Load readings from a JSON-lines file (one API row per line).

    A file holding a single JSON array of rows, as saved from the API, is
    accepted too.
    """
    text = Path(path).read_text(encoding="utf-8")
    return parse_rows(_iter_json_rows(text))


def chunk_readings(readings: Sequence[Reading], chunk_size: int) -> Iterable[Sequence[Reading]]:
    """Yield fixed-size batches from ``readings``."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")

    for start in range(0, len(readings), chunk_size):
        yield readings[start : start + chunk_size]
