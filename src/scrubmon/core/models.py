"""Shared dataclasses for readings and the views derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Reading:
    """One telemetry sample as delivered by the data source.

    Metric fields are ``None`` (or NaN) when the sensor reported no value at
    this instant; that is a gap, not zero.
    """

    channel: str
    timestamp: int
    id: Optional[str] = None
    co2: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    mode: Optional[int] = None

    @property
    def identity(self) -> str:
        """Dedup key: the explicit id, else ``<channel>-<timestamp>``."""
        if self.id is not None:
            return str(self.id)
        return f"{self.channel}-{self.timestamp}"


@dataclass(frozen=True)
class Window:
    start: int
    end: int

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp <= self.end

    @property
    def duration_ms(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class SeriesPoint:
    x: int
    y: float


@dataclass(frozen=True)
class ChannelSeries:
    channel: str
    name: str
    points: Tuple[SeriesPoint, ...]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class ModeBand:
    """Contiguous run of one classified mode on the control channel."""

    start: int
    end: int
    mode: int
    color: str


@dataclass(frozen=True)
class LatestSnapshot:
    key: str
    label: str
    channel: Optional[str]
    id: str
    timestamp: Optional[int]
    co2: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    mode: Optional[int] = None

    @property
    def is_fallback(self) -> bool:
        return self.timestamp is None

    @classmethod
    def fallback(cls, key: str, label: str = "") -> "LatestSnapshot":
        """Fixed-shape placeholder for a channel with no retained reading."""
        return cls(key=key, label=label, channel=None, id="-", timestamp=None)


@dataclass(frozen=True)
class FetchRequest:
    """Parameters of one telemetry fetch.

    ``generation`` identifies the retention setting the request was built
    under; ``full`` requests replace the retained set instead of merging.
    """

    generation: int
    start_ms: int
    latest_ms: int
    range_ms: int
    full: bool = False

    def to_payload(self) -> dict:
        return {
            "start": self.start_ms,
            "latesttime": self.latest_ms,
            "rangeSelected": self.range_ms if self.full else 0,
        }
