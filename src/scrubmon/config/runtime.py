"""Runtime configuration for the fetch/tick/publish loop."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from .channels import ChannelCatalog
from .retention import resolve_retention

API_URL_ENV = "SCRUBMON_API_URL"


@dataclass(slots=True)
class ScrubMonConfig:
    """
    Tuning knobs for polling the telemetry API and refreshing the views.

    The defaults match the dashboard: a 30 minute window, a 10 s clock tick
    and a 100 s incremental fetch.
    """

    api_base_url: str = "http://localhost:3011"
    api_path: str = "/loop/data/iaq"
    request_timeout_s: float = 10.0

    retention: str = "30m"
    tick_interval_s: float = 10.0
    fetch_interval_s: float = 100.0

    # Single-writer event queue sizing
    event_queue_size: int = 256

    @property
    def api_url(self) -> str:
        return self.api_base_url.rstrip("/") + "/" + self.api_path.lstrip("/")

    def sanitized(self) -> ScrubMonConfig:
        """Return a copy with derived limits applied."""
        return ScrubMonConfig(
            api_base_url=str(self.api_base_url or "http://localhost:3011").strip(),
            api_path=str(self.api_path or "/loop/data/iaq").strip(),
            request_timeout_s=max(0.5, float(self.request_timeout_s)),
            retention=resolve_retention(self.retention).key,
            tick_interval_s=max(0.1, float(self.tick_interval_s)),
            fetch_interval_s=max(1.0, float(self.fetch_interval_s)),
            event_queue_size=max(1, int(self.event_queue_size)),
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`ScrubMonConfig`."""
    return {f.name for f in fields(ScrubMonConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the optional top-level ``monitor`` block."""
    if "monitor" in data and isinstance(data["monitor"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "monitor":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> ScrubMonConfig:
    """Build :class:`ScrubMonConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return ScrubMonConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return ScrubMonConfig(**payload).sanitized()


def _read_yaml(path: str | Path | None) -> Mapping[str, Any]:
    if path is None:
        return {}
    cfg_path = Path(path)
    if not cfg_path.exists():
        return {}
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return raw


def load_config(path: str | Path | None) -> ScrubMonConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`ScrubMonConfig`.
    ``SCRUBMON_API_URL`` overrides the base URL from the file.
    """
    cfg = config_from_mapping(_read_yaml(path))
    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        cfg.api_base_url = env_url.strip()
    return cfg


def load_catalog(path: str | Path | None) -> ChannelCatalog:
    """Load the ``channels`` block of the same YAML file."""
    return ChannelCatalog.from_mapping(_read_yaml(path))


__all__ = ["ScrubMonConfig", "config_from_mapping", "load_config", "load_catalog"]
