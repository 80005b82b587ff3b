"""Configuration objects and helpers for scrubmon.

A single YAML file describes how the monitor talks to the telemetry API and
what it shows:
- top-level (or ``monitor:``) keys map onto :class:`ScrubMonConfig`
- a ``channels:`` block overrides the :class:`ChannelCatalog` defaults
Retention presets live in :mod:`retention`.
"""

from .channels import ChannelCatalog, TileSpec
from .retention import RETENTION_PRESETS, RetentionPreset, resolve_retention
from .runtime import ScrubMonConfig, config_from_mapping, load_catalog, load_config

__all__ = [
    "ChannelCatalog",
    "TileSpec",
    "RETENTION_PRESETS",
    "RetentionPreset",
    "resolve_retention",
    "ScrubMonConfig",
    "config_from_mapping",
    "load_catalog",
    "load_config",
]
