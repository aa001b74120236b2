# gpxstats/analyze/track.py
"""
Track analysis functions for gpxstats

TrackAggregator is a single forward pass over the points of one document.
It is fed one segment at a time; the previous point and the last elevation
reference carry over between segments, so segment boundaries are not breaks
in the statistics (the gap between two segments counts toward distance and
time like any other gap).
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from gpxstats.analyze.geodesy import spatial_distance_3d
from gpxstats.analyze.models import (
    AggregateStats,
    PointMetadata,
    StampedPoint,
    TrackPoint,
)
from gpxstats.analyze.series import DataSeries, closest_point
from gpxstats.errors import AggregatorClosedError
from gpxstats.formats.gpx import GpxDocument, extract_document, read_gpx

if TYPE_CHECKING:
    from gpxstats.config import AnalysisConfig

DEFAULT_MAX_POINT_INTERVAL_MS = 15000
DEFAULT_ELEVATION_THRESHOLD_M = 4.0   # approximate noise level of GPS elevation data


def _as_utc(t: _dt.datetime) -> _dt.datetime:
    if t.tzinfo is None:
        return t.replace(tzinfo=_dt.timezone.utc)
    return t


def elapsed_ms(t0: _dt.datetime, t1: _dt.datetime) -> float:
    """Absolute time between two timestamps, in milliseconds."""
    return abs((_as_utc(t1) - _as_utc(t0)).total_seconds()) * 1000.0


def gradient_percent(rise: float, distance_3d: float) -> Optional[float]:
    """
    Slope in percent from a rise and the 3D distance it was climbed over.

    Returns None when the horizontal run is zero (or rounding pushed it
    negative), i.e. the slope is undefined.
    """
    run_sq = distance_3d * distance_3d - rise * rise
    if run_sq <= 0:
        return None
    return 100.0 * rise / math.sqrt(run_sq)


_OPTIONAL_VALUES = ("ele", "hr", "cad", "atemp")


def _without_non_finite(pt: TrackPoint) -> TrackPoint:
    """Return `pt` with nan / inf optional values replaced by None."""
    bad = {
        name: None for name in _OPTIONAL_VALUES
        if getattr(pt, name) is not None and not math.isfinite(getattr(pt, name))
    }
    return dataclasses.replace(pt, **bad) if bad else pt


class TrackAggregator:
    """
    Accumulate AggregateStats over the segments of one document.

    One instance per document; do not share it between documents.
    """

    def __init__(
            self,
            max_point_interval: float = DEFAULT_MAX_POINT_INTERVAL_MS,
            elevation_threshold: float = DEFAULT_ELEVATION_THRESHOLD_M,
    ) -> None:
        self.max_point_interval = max_point_interval
        self.elevation_threshold = elevation_threshold
        self.stats = AggregateStats()
        self.points: list[StampedPoint] = []
        self._last: Optional[StampedPoint] = None
        self._last_ele: Optional[StampedPoint] = None
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def add_segment(self, points: Iterable[TrackPoint]) -> list[StampedPoint]:
        """Process one segment in order and return its stamped points."""
        if self._finalized:
            raise AggregatorClosedError("aggregator already finalized; start a new one")
        return [self._add_point(p) for p in points]

    def record_waypoint(self) -> None:
        if self._finalized:
            raise AggregatorClosedError("aggregator already finalized; start a new one")
        self.stats.waypoints += 1

    def finalize(self) -> AggregateStats:
        """
        Compute averages and close the aggregator.

        Averages divide by the number of points in the whole document, not
        by the number of points that carried the field. With no points at
        all the averages stay None.
        """
        if self._finalized:
            return self.stats
        self._finalized = True

        n = self.stats.points
        if n == 0:
            return self.stats
        for acc in (self.stats.heart_rate, self.stats.cadence, self.stats.temperature):
            acc.avg = acc.total / n
        return self.stats

    # ------------------------------------------------------------------
    # per-point reduction
    # ------------------------------------------------------------------
    def _add_point(self, pt: TrackPoint) -> StampedPoint:
        pt = _without_non_finite(pt)
        stats = self.stats
        current = StampedPoint(point=pt, meta=PointMetadata(cumdist=stats.distance))
        meta = current.meta

        # every point with an elevation counts here, noisy or not
        if pt.ele is not None:
            stats.elevation.include(pt.ele)

        last = self._last
        if last is not None:
            delta = spatial_distance_3d(last.point, pt)
            stats.distance += delta

            dt_ms = elapsed_ms(last.point.time, pt.time)
            stats.duration.total += dt_ms
            if dt_ms < self.max_point_interval:
                stats.duration.moving += dt_ms
                if dt_ms > 0:
                    meta.velocity = 3600.0 * delta / dt_ms
                    self._update_velocity(meta.velocity)
            meta.cumtime = last.meta.cumtime + dt_ms
        else:
            stats.duration.start = pt.time

        self._filter_elevation(current)

        if pt.hr is not None:
            stats.heart_rate.add(pt.hr)
        if pt.cad is not None:
            stats.cadence.add(pt.cad)
        if pt.atemp is not None:
            stats.temperature.add(pt.atemp)

        stats.duration.end = pt.time
        stats.points += 1
        self.points.append(current)
        self._last = current
        return current

    def _update_velocity(self, v: float) -> None:
        extrema = self.stats.velocity
        if extrema.max is None or v > extrema.max:
            extrema.max = v
        # stopped samples never count as the slowest moving speed
        if v > 0 and (extrema.min is None or v < extrema.min):
            extrema.min = v

    def _filter_elevation(self, current: StampedPoint) -> None:
        """
        Apply the elevation noise threshold against the last reference point.

        Changes within the threshold leave gain/loss untouched and copy the
        reference's gradient. Points without elevation behave the same way.
        See https://www.gpsvisualizer.com/tutorials/elevation_gain.html
        """
        ref = self._last_ele
        ele = current.point.ele

        if ref is None:
            if ele is not None:
                self._last_ele = current
            return

        if ele is None:
            current.meta.gradient = ref.meta.gradient
            return

        rise = ele - ref.point.ele
        if abs(rise) <= self.elevation_threshold:
            current.meta.gradient = ref.meta.gradient
            return

        if rise > 0:
            self.stats.elevation_gain += rise
        else:
            self.stats.elevation_loss += -rise

        grad = gradient_percent(rise, spatial_distance_3d(ref.point, current.point))
        current.meta.gradient = grad
        if grad is not None:
            self.stats.gradient.include(grad)

        self._last_ele = current


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------
@dataclass
class TrackAnalysis:
    """Finalized statistics of one GPX document plus its stamped points."""

    stats: AggregateStats
    points: list[StampedPoint] = field(default_factory=list)
    segments: int = 0
    name: Optional[str] = None
    desc: Optional[str] = None
    author: Optional[str] = None
    copyright: Optional[str] = None

    def series(self, metric: str, x_axis: str = "distance", *, imperial: bool = False) -> DataSeries:
        return DataSeries(self.points, metric, x_axis, imperial=imperial)

    def closest_point(self, lat: float, lon: float, *, fast: bool = False):
        return closest_point(self.points, lat, lon, fast=fast)


def analyze_document(
        doc: GpxDocument, *,
        max_point_interval: float = DEFAULT_MAX_POINT_INTERVAL_MS,
        elevation_threshold: float = DEFAULT_ELEVATION_THRESHOLD_M,
) -> TrackAnalysis:
    agg = TrackAggregator(max_point_interval, elevation_threshold)
    for segment in doc.segments:
        agg.add_segment(segment)
    for _ in doc.waypoints:
        agg.record_waypoint()
    stats = agg.finalize()

    return TrackAnalysis(
        stats=stats,
        points=agg.points,
        segments=len(doc.segments),
        name=doc.name,
        desc=doc.desc,
        author=doc.author,
        copyright=doc.copyright,
    )


def analyze_track(gpx_path: Path, config: Optional["AnalysisConfig"] = None) -> TrackAnalysis:
    """
    Read and analyze a GPX file.

    Raises:
      InvalidGpxError
    """
    if config is None:
        from gpxstats.config import AnalysisConfig
        config = AnalysisConfig()

    tree = read_gpx(gpx_path)
    doc = extract_document(tree.getroot(), parse_elements=config.parse_elements)
    return analyze_document(
        doc,
        max_point_interval=config.max_point_interval_ms,
        elevation_threshold=config.elevation_threshold_m,
    )
