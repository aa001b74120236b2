# gpxstats/analyze/models.py
"""
Data model for track statistics.

TrackPoint is what the ingestion layer hands over; it never changes once
created. PointMetadata and AggregateStats are written by the aggregator in
gpxstats.analyze.track and should be treated as read-only everywhere else.

Unset extrema and averages are None, never +/-inf.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Optional

# Timestamp used for points without a (parseable) <time>.
EPOCH = _dt.datetime(1970, 1, 1, tzinfo=_dt.timezone.utc)


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    ele: Optional[float] = None
    time: _dt.datetime = EPOCH
    hr: Optional[int] = None        # bpm
    cad: Optional[int] = None       # rpm
    atemp: Optional[float] = None   # degrees C


@dataclass
class PointMetadata:
    cumdist: float = 0.0                # meters from document start
    cumtime: float = 0.0                # milliseconds from document start
    velocity: float = 0.0               # km/h since previous point
    gradient: Optional[float] = None    # percent, since last elevation reference


@dataclass(frozen=True)
class StampedPoint:
    """A TrackPoint together with the metadata computed for it."""

    point: TrackPoint
    meta: PointMetadata

    @property
    def lat(self) -> float:
        return self.point.lat

    @property
    def lon(self) -> float:
        return self.point.lon


@dataclass
class Extrema:
    max: Optional[float] = None
    min: Optional[float] = None

    def include(self, value: float) -> None:
        if self.max is None or value > self.max:
            self.max = value
        if self.min is None or value < self.min:
            self.min = value

    @property
    def is_set(self) -> bool:
        return self.max is not None


@dataclass
class Duration:
    start: Optional[_dt.datetime] = None
    end: Optional[_dt.datetime] = None
    moving: float = 0.0     # ms, gaps below the max point interval only
    total: float = 0.0      # ms


@dataclass
class RunningAverage:
    total: float = 0.0
    count: int = 0                  # points that carried the field
    avg: Optional[float] = None     # set by finalize()

    def add(self, value: float) -> None:
        self.total += value
        self.count += 1


@dataclass
class AggregateStats:
    distance: float = 0.0           # meters, 3D
    points: int = 0
    waypoints: int = 0
    elevation_gain: float = 0.0
    elevation_loss: float = 0.0
    elevation: Extrema = field(default_factory=Extrema)
    velocity: Extrema = field(default_factory=Extrema)
    gradient: Extrema = field(default_factory=Extrema)
    duration: Duration = field(default_factory=Duration)
    heart_rate: RunningAverage = field(default_factory=RunningAverage)
    cadence: RunningAverage = field(default_factory=RunningAverage)
    temperature: RunningAverage = field(default_factory=RunningAverage)

    def moving_speed(self) -> Optional[float]:
        """Average speed over moving time, km/h."""
        if self.duration.moving <= 0:
            return None
        return (self.distance / 1000.0) / (self.duration.moving / 3_600_000.0)

    def total_speed(self) -> Optional[float]:
        """Average speed over total elapsed time, km/h."""
        if self.duration.total <= 0:
            return None
        return (self.distance / 1000.0) / (self.duration.total / 3_600_000.0)

    def moving_pace(self) -> Optional[float]:
        """Moving time per kilometer, ms."""
        if self.distance <= 0:
            return None
        return self.duration.moving / (self.distance / 1000.0)
