"""HTTP client for the telemetry API's ``/loop/data/iaq`` endpoint."""

from __future__ import annotations

import logging
from typing import List, Optional

import requests

from ..core.models import FetchRequest, Reading
from ..dataio.reading_parser import parse_rows

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3011"
DEFAULT_PATH = "/loop/data/iaq"


class FetchError(RuntimeError):
    """A fetch failed; the caller keeps its last-known-good data."""


class IaqHttpClient:
    """
    POSTs ``{"start", "latesttime", "rangeSelected"}`` and parses the rows.

    Uses one :class:`requests.Session` so polling reuses the connection.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        path: str = DEFAULT_PATH,
        *,
        timeout_s: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = base_url.rstrip("/") + "/" + path.lstrip("/")
        self.timeout_s = float(timeout_s)
        self._session = session or requests.Session()

    def fetch(self, request: FetchRequest) -> List[Reading]:
        payload = request.to_payload()
        try:
            response = self._session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise FetchError(f"POST {self.url} failed: {exc}") from exc

        if not response.ok:
            raise FetchError(
                f"POST {self.url} returned {response.status_code}: {response.text or 'POST failed'}"
            )

        try:
            rows = response.json()
        except ValueError as exc:
            raise FetchError(f"POST {self.url} returned invalid JSON: {exc}") from exc

        if not isinstance(rows, list):
            raise FetchError(f"POST {self.url} returned {type(rows).__name__}, expected a list")

        readings = parse_rows(rows)
        logger.debug("Fetched %d readings from %s (%r)", len(readings), self.url, payload)
        return readings

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "IaqHttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["DEFAULT_BASE_URL", "DEFAULT_PATH", "FetchError", "IaqHttpClient"]
