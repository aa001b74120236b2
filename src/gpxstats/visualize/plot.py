# gpxstats/visualize/plot.py
"""
Plotting routines for gpxstats
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from gpxstats.analyze.series import DataSeries

_TITLES = {
    "elevation": "Elevation",
    "heart_rate": "Heart rate",
    "cadence": "Cadence",
    "temperature": "Temperature",
}


def plot_series(series: DataSeries, out_path: Optional[Path] = None, *, title: Optional[str] = None) -> int:
    """
    Draw a DataSeries as a line chart.

    Points without a value leave a gap in the line. Saves to `out_path`
    when given, otherwise opens a window. Returns the number of points
    that carried a value.
    """
    xs = []
    ys = []
    present = 0
    for pt in series:
        xs.append(pt.x)
        if pt.y is None:
            ys.append(float("nan"))
        else:
            ys.append(pt.y)
            present += 1

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(xs, ys, linewidth=1.2)
    x_name = "Time" if series.x_axis == "time" else "Distance"
    ax.set_xlabel(f"{x_name} ({series.x_unit})")
    ax.set_ylabel(f"{_TITLES[series.metric]} ({series.y_unit})")
    ax.set_title(title or f"{_TITLES[series.metric]} profile")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    if out_path is not None:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path)
        plt.close(fig)
    else:
        plt.show()

    return present
