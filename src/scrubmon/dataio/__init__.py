"""Data input helpers (API rows and JSONL recordings).

- :mod:`reading_parser` turns telemetry API rows into readings.
- :mod:`log_loader` replays recorded JSONL/JSON files for offline review.
"""

from .log_loader import chunk_readings, load_jsonl
from .reading_parser import parse_reading, parse_rows

__all__ = ["chunk_readings", "load_jsonl", "parse_reading", "parse_rows"]
