# gpxstats/analyze/geodesy.py
"""
Distance functions on a spherical Earth.
"""

from __future__ import annotations

import math

from haversine import haversine, Unit

EARTH_RADIUS_M = 6_371_000.0


def _finite(v) -> bool:
    return v is not None and math.isfinite(v)


def surface_distance(a, b) -> float:
    """
    Great-circle distance in meters between two points.

    `a` and `b` only need `lat` / `lon` attributes in degrees. The haversine
    package is asked for the central angle so the radius stays ours.
    """
    angle = haversine((a.lat, a.lon), (b.lat, b.lon), unit=Unit.RADIANS)
    return EARTH_RADIUS_M * angle


def spatial_distance_3d(a, b) -> float:
    """
    Surface distance combined with the elevation difference.

    A missing or non-finite elevation on either side gives a zero vertical
    leg.
    """
    planar = surface_distance(a, b)
    if not (_finite(a.ele) and _finite(b.ele)):
        return planar
    return math.hypot(planar, b.ele - a.ele)
