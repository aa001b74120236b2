import datetime as dt
from pathlib import Path

import matplotlib
import pytest

matplotlib.use("Agg")

from gpxstats.analyze.models import TrackPoint  # noqa: E402
from gpxstats.util import logging as gpxlog  # noqa: E402

T0 = dt.datetime(2024, 5, 4, 10, 0, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def make_point():
    """Build a TrackPoint with its time given as ms after T0."""

    def _make(lat=0.0, lon=0.0, ele=None, ms=0, **extra) -> TrackPoint:
        return TrackPoint(lat=lat, lon=lon, ele=ele, time=T0 + dt.timedelta(milliseconds=ms), **extra)

    return _make


@pytest.fixture(autouse=True)
def _no_gpxstats_env(monkeypatch):
    for var in ("GPXSTATS_WORK_ROOT", "GPXSTATS_MAX_POINT_INTERVAL_MS", "GPXSTATS_ELEVATION_THRESHOLD_M"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _default_logging():
    gpxlog.configure()
    yield
    gpxlog.configure()
