from gpxstats.analyze.series import DataSeries
from gpxstats.analyze.track import TrackAggregator
from gpxstats.visualize.plot import plot_series


def test_plot_series_writes_png(tmp_path, make_point):
    agg = TrackAggregator()
    agg.add_segment([
        make_point(lon=0.0, ele=100.0, ms=0),
        make_point(lon=0.001, ele=None, ms=5000),
        make_point(lon=0.002, ele=108.0, ms=10000),
    ])
    agg.finalize()

    out = tmp_path / "charts" / "elevation.png"
    present = plot_series(DataSeries(agg.points, "elevation"), out)

    assert out.is_file()
    assert out.stat().st_size > 0
    assert present == 2
