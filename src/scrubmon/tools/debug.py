"""Timing hooks for the view derivation and API fetch paths.

Set ``SCRUBMON_DEBUG=1`` to log how long each ``derive_views`` pass and each
fetch round trip takes, together with the reading counts involved.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Dict, Iterator

logger = logging.getLogger(__name__)

DEBUG_SCRUBMON = os.getenv("SCRUBMON_DEBUG", "").lower() in {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    return DEBUG_SCRUBMON


@contextmanager
def time_block(stage: str, **context: object) -> Iterator[Dict[str, object]]:
    """
    Time ``stage`` and log it with ``context`` when the block exits.

    The yielded dict may be extended inside the block (for example with the
    number of rows a fetch returned); its items are appended to the log line.
    Nothing is measured unless ``SCRUBMON_DEBUG`` is set.
    """
    details: Dict[str, object] = dict(context)
    if not DEBUG_SCRUBMON:
        yield details
        return

    start = time.perf_counter()
    try:
        yield details
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        extra = " ".join(f"{key}={value}" for key, value in details.items())
        logger.debug("%s took %.1f ms %s", stage, elapsed_ms, extra)
