from pathlib import Path

import pytest

from gpxstats.config import load_config, override_analysis
from gpxstats.errors import ConfigError


def _load(tmp_path: Path, repo: str = "", user: str = ""):
    repo_path = tmp_path / "repo.toml"
    user_path = tmp_path / "user.toml"
    if repo:
        repo_path.write_text(repo, encoding="utf-8")
    if user:
        user_path.write_text(user, encoding="utf-8")
    return load_config(repo_config_path=repo_path, user_config_path=user_path)


def test_defaults(tmp_path):
    cfg = _load(tmp_path)
    assert cfg.analysis.max_point_interval_ms == 15000
    assert cfg.analysis.elevation_threshold_m == 4.0
    assert cfg.analysis.parse_elements == ("track", "route", "waypoint")
    assert cfg.work_root == Path.home() / "GPS" / "_work"
    assert set(cfg.source.values()) == {"default"}


def test_user_overrides_repo(tmp_path):
    cfg = _load(
        tmp_path,
        repo="[analysis]\nmax_point_interval_ms = 20000\nelevation_threshold_m = 3\n",
        user="[analysis]\nmax_point_interval_ms = 30000\n[paths]\nwork_root = \"~/tracks\"\n",
    )
    assert cfg.analysis.max_point_interval_ms == 30000
    assert cfg.analysis.elevation_threshold_m == 3.0
    assert cfg.work_root == Path.home() / "tracks"
    assert cfg.source["analysis.max_point_interval_ms"].startswith("user:")
    assert cfg.source["analysis.elevation_threshold_m"].startswith("repo:")


def test_env_overrides_files(tmp_path, monkeypatch):
    monkeypatch.setenv("GPXSTATS_MAX_POINT_INTERVAL_MS", "60000")
    monkeypatch.setenv("GPXSTATS_WORK_ROOT", str(tmp_path / "work"))
    cfg = _load(tmp_path, user="[analysis]\nmax_point_interval_ms = 30000\n")
    assert cfg.analysis.max_point_interval_ms == 60000
    assert cfg.work_root == tmp_path / "work"
    assert cfg.source["analysis.max_point_interval_ms"] == "env:GPXSTATS_MAX_POINT_INTERVAL_MS"


def test_parse_elements(tmp_path):
    cfg = _load(tmp_path, repo='[analysis]\nparse_elements = ["Track"]\n')
    assert cfg.analysis.parse_elements == ("track",)


def test_zero_threshold_allowed(tmp_path):
    cfg = _load(tmp_path, repo="[analysis]\nelevation_threshold_m = 0\n")
    assert cfg.analysis.elevation_threshold_m == 0


@pytest.mark.parametrize(
    "repo",
    [
        "[analysis\nmax_point_interval_ms = 1\n",
        "[analysis]\nmax_point_interval_ms = 0\n",
        "[analysis]\nmax_point_interval_ms = inf\n",
        "[analysis]\nelevation_threshold_m = nan\n",
        "[analysis]\nmax_point_interval_ms = \"fast\"\n",
        "[analysis]\nelevation_threshold_m = -1\n",
        "[analysis]\nelevation_threshold_m = true\n",
        "[analysis]\nparse_elements = [\"tracks\"]\n",
        "[analysis]\nparse_elements = 3\n",
    ],
)
def test_invalid_config(tmp_path, repo):
    with pytest.raises(ConfigError):
        _load(tmp_path, repo=repo)


def test_invalid_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GPXSTATS_ELEVATION_THRESHOLD_M", "lots")
    with pytest.raises(ConfigError):
        _load(tmp_path)


def test_override_analysis_records_origin(tmp_path):
    cfg = override_analysis(_load(tmp_path), max_point_interval_ms=60000, elevation_threshold_m=0)
    assert cfg.analysis.max_point_interval_ms == 60000
    assert cfg.analysis.elevation_threshold_m == 0
    assert cfg.source["analysis.max_point_interval_ms"] == "cli"
    assert cfg.source["analysis.elevation_threshold_m"] == "cli"


def test_override_analysis_without_values_is_a_no_op(tmp_path):
    cfg = _load(tmp_path)
    assert override_analysis(cfg) is cfg


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_point_interval_ms": -1},
        {"max_point_interval_ms": 0},
        {"elevation_threshold_m": -0.5},
        {"elevation_threshold_m": float("inf")},
    ],
)
def test_override_analysis_validates(tmp_path, overrides):
    with pytest.raises(ConfigError):
        override_analysis(_load(tmp_path), **overrides)
