#!/usr/bin/env python3
"""
gpxstats: print track statistics for GPX file(s).

Usage examples:
  gpxstats ride.gpx hike.gpx
  gpxstats --tsv ~/GPS/_work/**/*.gpx > stats.tsv
  gpxstats --imperial --plot elevation --plot-dir charts/ ride.gpx
  gpxstats                      # pick files under the work root with fzf
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from gpxstats.analyze.series import METRICS, X_AXES
from gpxstats.analyze.track import TrackAnalysis, analyze_track
from gpxstats.config import load_config, override_analysis
from gpxstats.errors import ConfigError, IngestError, InvalidGpxError
from gpxstats.util.fzf import fzf_select_paths
from gpxstats.util.logging import configure as configure_logging, debug, log
from gpxstats.util.units import duration_string, m_to_km, m_to_mi, to_ft, to_miles
from gpxstats.visualize.plot import plot_series

TSV_COLUMNS = (
    "file", "points", "segments", "waypoints", "distance_m", "total_ms", "moving_ms",
    "moving_kmh", "max_kmh", "gain_m", "loss_m", "ele_max_m", "ele_min_m",
    "grad_max_pct", "grad_min_pct", "avg_hr", "avg_cad", "avg_temp",
)


def _fmt(v: Optional[float], spec: str = ".2f") -> str:
    return "-" if v is None else format(v, spec)


def _conv(v: Optional[float], fn) -> Optional[float]:
    if v is None or fn is None:
        return v
    return fn(v)


def print_report(path: Path, analysis: TrackAnalysis, *, tsv: bool, imperial: bool = False) -> None:
    s = analysis.stats
    if tsv:
        row = [
            str(path),
            str(s.points),
            str(analysis.segments),
            str(s.waypoints),
            _fmt(s.distance),
            _fmt(s.duration.total, ".0f"),
            _fmt(s.duration.moving, ".0f"),
            _fmt(s.moving_speed(), ".3f"),
            _fmt(s.velocity.max, ".3f"),
            _fmt(s.elevation_gain, ".1f"),
            _fmt(s.elevation_loss, ".1f"),
            _fmt(s.elevation.max, ".1f"),
            _fmt(s.elevation.min, ".1f"),
            _fmt(s.gradient.max, ".1f"),
            _fmt(s.gradient.min, ".1f"),
            _fmt(s.heart_rate.avg, ".1f"),
            _fmt(s.cadence.avg, ".1f"),
            _fmt(s.temperature.avg, ".1f"),
        ]
        print("\t".join(row))
        return

    if imperial:
        dist, dist_unit = m_to_mi(s.distance), "mi"
        speed_fn, speed_unit = to_miles, "mph"
        height_fn, height_unit = to_ft, "ft"
    else:
        dist, dist_unit = m_to_km(s.distance), "km"
        speed_fn, speed_unit = None, "km/h"
        height_fn, height_unit = None, "m"

    print(f"\n{path}")
    if analysis.name:
        print(f"  name            : {analysis.name}")
    print(f"  points          : {s.points}")
    print(f"  segments        : {analysis.segments}")
    print(f"  waypoints       : {s.waypoints}")
    print(f"  distance ({dist_unit})   : {dist:.2f}")
    print(f"  total time      : {duration_string(s.duration.total, hide_ms=True)}")
    print(f"  moving time     : {duration_string(s.duration.moving, hide_ms=True)}")
    print(f"  moving speed    : {_fmt(_conv(s.moving_speed(), speed_fn))} {speed_unit}")
    print(f"  max speed       : {_fmt(_conv(s.velocity.max, speed_fn))} {speed_unit}")
    print(f"  elevation gain  : {_fmt(_conv(s.elevation_gain, height_fn), '.0f')} {height_unit}")
    print(f"  elevation loss  : {_fmt(_conv(s.elevation_loss, height_fn), '.0f')} {height_unit}")
    print(f"  elevation max   : {_fmt(_conv(s.elevation.max, height_fn), '.0f')} {height_unit}")
    print(f"  elevation min   : {_fmt(_conv(s.elevation.min, height_fn), '.0f')} {height_unit}")
    print(f"  gradient max/min: {_fmt(s.gradient.max, '.1f')} / {_fmt(s.gradient.min, '.1f')} %")
    print(f"  avg heart rate  : {_fmt(s.heart_rate.avg, '.0f')} bpm")
    print(f"  avg cadence     : {_fmt(s.cadence.avg, '.0f')} rpm")
    print(f"  avg temperature : {_fmt(s.temperature.avg, '.1f')} degrees")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="gpxstats", description="gpxstats: Analyze GPX file(s).")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, use fzf selection under the work root.")
    ap.add_argument("--work-root", default=None,
                    help="Search root for fzf selection (default: from config or ~/GPS/_work)")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("--imperial", action="store_true",
                    help="Report miles/feet/mph instead of km/m/km/h.")
    ap.add_argument("--max-point-interval", type=float, default=None, metavar="MS",
                    help="Gaps at or above this many ms are not moving time (default: 15000).")
    ap.add_argument("--elevation-threshold", type=float, default=None, metavar="M",
                    help="Elevation changes at or below this many meters are noise (default: 4).")
    ap.add_argument("--plot", default=None,
                    choices=list(METRICS),
                    help="Chart this metric for every analyzed file.")
    ap.add_argument("--x-axis", default="distance", choices=list(X_AXES),
                    help="X axis for --plot (default: distance).")
    ap.add_argument("--plot-dir", default=None,
                    help="Write charts as PNG files here instead of opening a window.")
    ap.add_argument("-q", "--quiet", action="store_true",
                    help="No status lines on stderr.")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Also print where each setting came from.")
    return ap


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    try:
        cfg = override_analysis(
            load_config(),
            max_point_interval_ms=args.max_point_interval,
            elevation_threshold_m=args.elevation_threshold,
        )
    except ConfigError as e:
        print(f"gpxstats: {e}", file=sys.stderr)
        return 2
    analysis_cfg = cfg.analysis

    for key, origin in sorted(cfg.source.items()):
        debug(f"{key}: {origin}")
    debug(f"analysis settings: {analysis_cfg}")

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        work_root = Path(args.work_root).expanduser() if args.work_root else cfg.work_root
        gpx_files = sorted(work_root.rglob("*.gpx"))
        if not gpx_files:
            raise SystemExit(f"No GPX files found under {work_root}")
        try:
            selected = fzf_select_paths(
                gpx_files,
                header="Select GPX file(s) to analyze:",
                multi=True,
                preview="gpxstats --quiet {2}",
                root=work_root,
            )
        except IngestError as e:
            print(f"gpxstats: {e}", file=sys.stderr)
            return 2

    plot_dir = Path(args.plot_dir).expanduser() if args.plot_dir else None

    if args.tsv:
        print("\t".join(TSV_COLUMNS))

    failures = 0
    for path in selected:
        if not path.is_file():
            log(f"Skipping (not a file): {path}")
            failures += 1
            continue
        try:
            analysis = analyze_track(path, analysis_cfg)
        except (InvalidGpxError, OSError) as e:
            log(f"Skipping {path}: {e}")
            failures += 1
            continue

        log(f"{path.name}: {analysis.stats.points} point(s) in {analysis.segments} segment(s)")
        print_report(path, analysis, tsv=args.tsv, imperial=args.imperial)

        if args.plot:
            series = analysis.series(args.plot, args.x_axis, imperial=args.imperial)
            out_path = plot_dir / f"{path.stem}_{args.plot}.png" if plot_dir else None
            plot_series(series, out_path, title=analysis.name or path.stem)

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
