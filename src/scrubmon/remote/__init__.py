"""Remote communication with the telemetry API.

:class:`IaqHttpClient` performs the POST fetches and :class:`FetchWorker`
polls it from a background thread, reporting batches and failures back to
the session that owns the reading store.
"""

from .http_client import FetchError, IaqHttpClient
from .fetch_worker import FetchWorker

__all__ = ["FetchError", "IaqHttpClient", "FetchWorker"]
