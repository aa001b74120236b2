"""
gpxstats configuration loader

This module centralizes *all* configuration handling for gpxstats.

Design goals:
- Keep the CLI Unix-friendly: flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/gpxstats/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by gpxstats.analyze.gpx_analyze)
2) Environment variables (GPXSTATS_*)
3) User config: ~/.config/gpxstats/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

Recognized keys:

    [paths]
    work_root = "~/GPS/_work"

    [analysis]
    max_point_interval_ms = 15000
    elevation_threshold_m = 4.0
    parse_elements = ["track", "route", "waypoint"]

This module uses Python's built-in tomllib on Python 3.11+, or `tomli`.
"""

from __future__ import annotations

import math
import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gpxstats.analyze.track import DEFAULT_ELEVATION_THRESHOLD_M, DEFAULT_MAX_POINT_INTERVAL_MS
from gpxstats.errors import ConfigError
from gpxstats.formats.gpx import PARSE_ELEMENTS


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with a clear, user-facing message.
    """
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "analysis.max_point_interval_ms")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_number(v: Any, key: str, origin: str, *, allow_zero: bool = False) -> float:
    """
    Coerce a config value into a float > 0 (or >= 0 with allow_zero).

    Raises ConfigError for anything else; bad numbers are not skipped.
    """
    if isinstance(v, bool):
        raise ConfigError(f"{key} must be a number, got {v!r} ({origin})")
    try:
        f = float(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {v!r} ({origin})") from e
    if f < 0 or (f == 0 and not allow_zero) or not math.isfinite(f):
        bound = "finite and >= 0" if allow_zero else "finite and > 0"
        raise ConfigError(f"{key} must be {bound}, got {v!r} ({origin})")
    return f


def _as_elements(v: Any, origin: str) -> tuple[str, ...]:
    if isinstance(v, str):
        v = [v]
    if not isinstance(v, (list, tuple)):
        raise ConfigError(f"analysis.parse_elements must be a list, got {v!r} ({origin})")
    out = tuple(str(x).strip().lower() for x in v)
    unknown = [x for x in out if x not in PARSE_ELEMENTS]
    if unknown:
        raise ConfigError(
            f"analysis.parse_elements: unknown element(s) {unknown} ({origin}); "
            f"expected any of {list(PARSE_ELEMENTS)}")
    return out


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the gpxstats repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_work_root() -> Path:
    """Where the CLI looks for GPX files when none are given."""
    return Path.home() / "GPS" / "_work"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AnalysisConfig:
    """
    Knobs of the statistics pass.

    - max_point_interval_ms: gaps at or above this are not "moving" time
    - elevation_threshold_m: elevation changes at or below this are noise
    - parse_elements: which GPX groups feed the analysis
    """

    max_point_interval_ms: float = DEFAULT_MAX_POINT_INTERVAL_MS
    elevation_threshold_m: float = DEFAULT_ELEVATION_THRESHOLD_M
    parse_elements: tuple[str, ...] = PARSE_ELEMENTS


@dataclass(frozen=True)
class GPXStatsConfig:
    """
    Fully merged gpxstats configuration.

    Attributes:
    - work_root: default search root for the CLI
    - analysis: statistics settings
    - source: provenance map showing where each value came from
    """

    work_root: Path
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    source: dict[str, str] = field(default_factory=dict)


_ANALYSIS_KEYS = (
    "analysis.max_point_interval_ms",
    "analysis.elevation_threshold_m",
    "analysis.parse_elements",
)

# a zero threshold disables elevation noise filtering
_ZERO_OK = {"analysis.elevation_threshold_m"}

_ENV_MAP = {
    "GPXSTATS_WORK_ROOT": "paths.work_root",
    "GPXSTATS_MAX_POINT_INTERVAL_MS": "analysis.max_point_interval_ms",
    "GPXSTATS_ELEVATION_THRESHOLD_M": "analysis.elevation_threshold_m",
}


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> GPXStatsConfig:
    """
    Load, merge, and normalize all gpxstats configuration.

    This function is the single authoritative entry point
    for configuration access.

    Raises:
      ConfigError
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "gpxstats" / "config.toml"

    # Load raw TOML dicts
    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    defaults = AnalysisConfig()
    values: dict[str, Any] = {
        "paths.work_root": default_work_root(),
        "analysis.max_point_interval_ms": defaults.max_point_interval_ms,
        "analysis.elevation_threshold_m": defaults.elevation_threshold_m,
        "analysis.parse_elements": defaults.parse_elements,
    }

    # Track provenance for debugging
    src = {k: "default" for k in values}

    # ------------------------------------------------------------------
    # Repo, then user config (user overrides repo)
    # ------------------------------------------------------------------
    for cfg, label, cfg_path in ((repo_cfg, "repo", repo_config_path),
                                 (user_cfg, "user", user_config_path)):
        origin = f"{label}:{cfg_path}"

        v = _as_path(_deep_get(cfg, "paths.work_root"))
        if v is not None:
            values["paths.work_root"] = v
            src["paths.work_root"] = origin

        for k in _ANALYSIS_KEYS:
            raw = _deep_get(cfg, k)
            if raw is None:
                continue
            if k == "analysis.parse_elements":
                values[k] = _as_elements(raw, origin)
            else:
                values[k] = _as_number(raw, k, origin, allow_zero=k in _ZERO_OK)
            src[k] = origin

    # ------------------------------------------------------------------
    # Environment variable overrides (highest non-CLI precedence)
    # ------------------------------------------------------------------
    for env, key in _ENV_MAP.items():
        raw = os.environ.get(env)
        if not raw:
            continue
        origin = f"env:{env}"
        if key == "paths.work_root":
            values[key] = Path(raw).expanduser()
        else:
            values[key] = _as_number(raw, key, origin, allow_zero=key in _ZERO_OK)
        src[key] = origin

    analysis = AnalysisConfig(
        max_point_interval_ms=values["analysis.max_point_interval_ms"],
        elevation_threshold_m=values["analysis.elevation_threshold_m"],
        parse_elements=values["analysis.parse_elements"],
    )

    return GPXStatsConfig(
        work_root=values["paths.work_root"].expanduser(),
        analysis=analysis,
        source=src,
    )


def override_analysis(
        cfg: GPXStatsConfig,
        origin: str = "cli", *,
        max_point_interval_ms: Optional[float] = None,
        elevation_threshold_m: Optional[float] = None,
) -> GPXStatsConfig:
    """
    Apply explicit overrides (CLI flags) on top of a loaded config.

    Values go through the same checks as file and env values and are
    recorded in `source`. None means "not given".

    Raises:
      ConfigError
    """
    overrides = {
        "analysis.max_point_interval_ms": max_point_interval_ms,
        "analysis.elevation_threshold_m": elevation_threshold_m,
    }
    changes = {}
    src = dict(cfg.source)
    for key, raw in overrides.items():
        if raw is None:
            continue
        changes[key.split(".", 1)[1]] = _as_number(raw, key, origin, allow_zero=key in _ZERO_OK)
        src[key] = origin

    if not changes:
        return cfg
    return replace(cfg, analysis=replace(cfg.analysis, **changes), source=src)
