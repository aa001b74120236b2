import math

import pytest

from gpxstats.analyze.geodesy import EARTH_RADIUS_M, spatial_distance_3d, surface_distance
from gpxstats.analyze.models import TrackPoint

LYON = TrackPoint(lat=45.7597, lon=4.8422)
PARIS = TrackPoint(lat=48.8567, lon=2.3508)


def test_same_point_is_zero():
    assert surface_distance(LYON, LYON) == 0


def test_equator_arc_uses_6371_km_radius():
    a = TrackPoint(lat=0, lon=0)
    b = TrackPoint(lat=0, lon=1)
    assert surface_distance(a, b) == pytest.approx(EARTH_RADIUS_M * math.radians(1))


def test_lyon_paris():
    assert surface_distance(LYON, PARIS) == pytest.approx(392_217, abs=500)


def test_symmetric():
    assert surface_distance(LYON, PARIS) == pytest.approx(surface_distance(PARIS, LYON))


def test_3d_adds_vertical_leg():
    a = TrackPoint(lat=0, lon=0, ele=100)
    b = TrackPoint(lat=0, lon=0.001, ele=130)
    planar = surface_distance(a, b)
    assert spatial_distance_3d(a, b) == pytest.approx(math.sqrt(planar ** 2 + 30 ** 2))


def test_3d_pure_vertical():
    a = TrackPoint(lat=10, lon=10, ele=100)
    b = TrackPoint(lat=10, lon=10, ele=95)
    assert spatial_distance_3d(a, b) == pytest.approx(5.0)


@pytest.mark.parametrize(
    "ele_a, ele_b",
    [(None, 100.0), (100.0, None), (None, None), (math.nan, 100.0), (100.0, math.inf)],
)
def test_3d_without_elevation_is_surface_distance(ele_a, ele_b):
    a = TrackPoint(lat=47.0, lon=8.0, ele=ele_a)
    b = TrackPoint(lat=47.001, lon=8.001, ele=ele_b)
    assert spatial_distance_3d(a, b) == surface_distance(a, b)
