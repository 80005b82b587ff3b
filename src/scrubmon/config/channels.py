"""Channel catalog: tracked tiles, control-channel aliases, mode palette and labels."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

CONTROL_CHANNEL = "interlock_4c"

# The interlock controller used to report under sensor id 4.
DEFAULT_CONTROL_ALIASES: FrozenSet[str] = frozenset({CONTROL_CHANNEL, "4"})

MODE_COLORS: Dict[int, str] = {
    0: "rgba(148,163,184,0.18)",
    1: "rgba(59,130,246,0.18)",
    2: "rgba(34,197,94,0.20)",
    3: "rgba(250,204,21,0.20)",
    4: "rgba(56,189,248,0.20)",
    5: "rgba(248,113,113,0.22)",
}

MODE_LABELS: Dict[int, str] = {
    0: "Manual",
    1: "Standby",
    2: "Scrubbing",
    3: "Regen",
    4: "Cooldown",
    5: "Alarming",
}


@dataclass(frozen=True)
class TileSpec:
    """One status tile: a logical channel and the physical ids that feed it."""

    key: str
    label: str
    aliases: Tuple[str, ...] = ()

    @property
    def physical_channels(self) -> Tuple[str, ...]:
        return (self.key, *(a for a in self.aliases if a != self.key))


DEFAULT_TILES: Tuple[TileSpec, ...] = (
    TileSpec(key="before_scrub", label="Inlet (Before Scrub)"),
    TileSpec(key="after_scrub", label="Outlet (After Scrub)"),
    TileSpec(key=CONTROL_CHANNEL, label="Interlock 4C", aliases=("4",)),
)

# Per-metric series names; anything missing falls back to "<prefix> <channel>".
SERIES_LABELS: Dict[str, Dict[str, str]] = {
    "co2": {
        "before_scrub": "CO₂ Before Scrub",
        "after_scrub": "CO₂ After Scrub",
        CONTROL_CHANNEL: "CO₂ Interlock 4C",
        "1": "CO₂ Calibrate",
        "2": "CO₂ Outlet",
        "3": "CO₂ Inlet",
        "4": "CO₂ Regen",
    },
    "temperature": {
        "before_scrub": "Temp Before Scrub",
        "after_scrub": "Temp After Scrub",
        CONTROL_CHANNEL: "Temp Interlock 4C",
        "1": "Temp Calibrate",
        "2": "Temp Outlet",
        "3": "Temp Inlet",
        "4": "Temp Regen",
        "51": "Temp TK",
    },
    "humidity": {
        "before_scrub": "Humid Before Scrub",
        "after_scrub": "Humid After Scrub",
        CONTROL_CHANNEL: "Humid Interlock 4C",
        "1": "Humid Calibrate",
        "2": "Humid Outlet",
        "3": "Humid Inlet",
        "4": "Humid Regen",
        "51": "Humid TK",
    },
}

SERIES_FALLBACK_PREFIX: Dict[str, str] = {
    "co2": "CO₂ Sensor",
    "temperature": "Temp",
    "humidity": "Humid",
}


@dataclass(frozen=True)
class ChannelCatalog:
    """Everything the derived views need to know about channels and modes."""

    tiles: Tuple[TileSpec, ...] = DEFAULT_TILES
    control_aliases: FrozenSet[str] = DEFAULT_CONTROL_ALIASES
    mode_colors: Mapping[int, str] = field(default_factory=lambda: dict(MODE_COLORS))
    mode_labels: Mapping[int, str] = field(default_factory=lambda: dict(MODE_LABELS))
    series_labels: Mapping[str, Mapping[str, str]] = field(
        default_factory=lambda: {k: dict(v) for k, v in SERIES_LABELS.items()}
    )

    def color_of(self, mode: Any) -> Optional[str]:
        """Palette colour for ``mode`` or ``None`` when the mode is unclassified."""
        if mode is None or isinstance(mode, bool):
            return None
        try:
            return self.mode_colors.get(mode)
        except TypeError:
            return None

    def alias_groups(self) -> Dict[str, Tuple[str, ...]]:
        return {tile.key: tile.physical_channels for tile in self.tiles}

    def tile_labels(self) -> Dict[str, str]:
        return {tile.key: tile.label for tile in self.tiles}

    @property
    def control_key(self) -> str:
        """Logical key of the tile fed by the control channel."""
        for tile in self.tiles:
            if set(tile.physical_channels) & self.control_aliases:
                return tile.key
        return CONTROL_CHANNEL

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "ChannelCatalog":
        """
        Build a catalog from a ``channels`` block, keeping defaults for
        anything not given::

            channels:
              control_aliases: [interlock_4c, "4"]
              tiles:
                - {key: before_scrub, label: Inlet}
              series_labels:
                co2: {"7": "CO₂ Spare"}
        """
        catalog = cls()
        payload: Mapping[str, Any] = mapping or {}
        block = payload.get("channels") if isinstance(payload, Mapping) else None
        if not isinstance(block, Mapping):
            return catalog

        aliases = block.get("control_aliases")
        if isinstance(aliases, (list, tuple)) and aliases:
            catalog = replace(catalog, control_aliases=frozenset(str(a) for a in aliases))

        tiles_block = block.get("tiles")
        if isinstance(tiles_block, (list, tuple)):
            tiles = []
            for entry in tiles_block:
                if not isinstance(entry, Mapping) or entry.get("key") is None:
                    continue
                key = str(entry["key"])
                tiles.append(
                    TileSpec(
                        key=key,
                        label=str(entry.get("label") or f"Sensor {key}"),
                        aliases=tuple(str(a) for a in entry.get("aliases") or ()),
                    )
                )
            if tiles:
                catalog = replace(catalog, tiles=tuple(tiles))

        labels_block = block.get("series_labels")
        if isinstance(labels_block, Mapping):
            merged = {k: dict(v) for k, v in catalog.series_labels.items()}
            for metric, table in labels_block.items():
                if isinstance(table, Mapping):
                    merged.setdefault(str(metric), {}).update(
                        {str(k): str(v) for k, v in table.items()}
                    )
            catalog = replace(catalog, series_labels=merged)

        return catalog


__all__ = [
    "CONTROL_CHANNEL",
    "DEFAULT_CONTROL_ALIASES",
    "MODE_COLORS",
    "MODE_LABELS",
    "SERIES_LABELS",
    "SERIES_FALLBACK_PREFIX",
    "TileSpec",
    "ChannelCatalog",
]
