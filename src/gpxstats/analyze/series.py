# gpxstats/analyze/series.py
"""
Chart-ready views over stamped track points.
"""

from __future__ import annotations

from typing import Callable, Iterator, NamedTuple, Optional, Sequence

from gpxstats.analyze.geodesy import surface_distance
from gpxstats.analyze.models import StampedPoint, TrackPoint
from gpxstats.errors import UnknownSeriesError
from gpxstats.util.units import m_to_km, m_to_mi, ms_to_h, to_ft


class SeriesPoint(NamedTuple):
    x: float
    y: Optional[float]
    label: str


# metric -> (TrackPoint attribute, metric unit, imperial unit, imperial conversion)
_METRICS: dict[str, tuple[str, str, str, Optional[Callable[[float], float]]]] = {
    "elevation": ("ele", "m", "ft", to_ft),
    "heart_rate": ("hr", "bpm", "bpm", None),
    "cadence": ("cad", "rpm", "rpm", None),
    "temperature": ("atemp", "degrees", "degrees", None),
}

METRICS = tuple(_METRICS)
X_AXES = ("distance", "time")


class DataSeries:
    """
    One (x, y, label) triple per point, in track order.

    Iterating twice walks the points twice; nothing is cached. x is the
    cumulative distance (km or mi) or cumulative time (h); y is the metric
    value, None where the point does not carry it.
    """

    def __init__(
            self,
            points: Sequence[StampedPoint],
            metric: str,
            x_axis: str = "distance", *,
            imperial: bool = False,
    ) -> None:
        if metric not in _METRICS:
            raise UnknownSeriesError(
                f"unknown metric {metric!r} (expected one of: {', '.join(_METRICS)})")
        if x_axis not in X_AXES:
            raise UnknownSeriesError(
                f"unknown x-axis {x_axis!r} (expected one of: {', '.join(X_AXES)})")

        self.points = points
        self.metric = metric
        self.x_axis = x_axis
        self.imperial = imperial

        attr, unit, imp_unit, imp_conv = _METRICS[metric]
        self._attr = attr
        self.y_unit = imp_unit if imperial else unit
        self._y_conv = imp_conv if imperial else None

        if x_axis == "time":
            self.x_unit = "h"
            self._x_conv = ms_to_h
        else:
            self.x_unit = "mi" if imperial else "km"
            self._x_conv = m_to_mi if imperial else m_to_km

    def __len__(self) -> int:
        return len(self.points)

    def raw(self) -> Iterator[tuple[float, Optional[float]]]:
        """Unconverted (cumdist m | cumtime ms, value) pairs."""
        for p in self.points:
            x = p.meta.cumtime if self.x_axis == "time" else p.meta.cumdist
            yield x, getattr(p.point, self._attr)

    def __iter__(self) -> Iterator[SeriesPoint]:
        for x_raw, y_raw in self.raw():
            x = self._x_conv(x_raw)
            y = y_raw
            if y is not None and self._y_conv is not None:
                y = self._y_conv(y)
            yield SeriesPoint(x, y, self._label(x, y))

    def _label(self, x: float, y: Optional[float]) -> str:
        y_text = "-" if y is None else f"{y:.0f} {self.y_unit}"
        return f"{x:.2f} {self.x_unit}, {y_text}"


def closest_point(points: Sequence[StampedPoint], lat: float, lon: float, *, fast: bool = False):
    """
    Return (index, point) of the stamped point nearest to lat/lon.

    fast=True compares by |dlat| + |dlon| in degrees instead of surface
    distance. Returns None for an empty sequence.
    """
    if not points:
        return None

    target = TrackPoint(lat=lat, lon=lon)

    if fast:
        def dist(p):
            return abs(lat - p.lat) + abs(lon - p.lon)
    else:
        def dist(p):
            return surface_distance(target, p)

    best = min(range(len(points)), key=lambda i: dist(points[i]))
    return best, points[best]
