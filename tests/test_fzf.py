import subprocess
from pathlib import Path

import pytest

import gpxstats.util.fzf as fzf
from gpxstats.errors import FzfNotFoundError, IngestError


@pytest.fixture
def fake_fzf(monkeypatch):
    """Pretend fzf is installed and capture what it is run with."""
    calls = []
    result = {"returncode": 0, "stdout": "", "stderr": ""}

    def fake_run(cmd, *, input, capture_output, text):
        calls.append({"cmd": cmd, "input": input})
        return subprocess.CompletedProcess(cmd, result["returncode"], result["stdout"], result["stderr"])

    monkeypatch.setattr(fzf, "which", lambda name: "/usr/bin/fzf")
    monkeypatch.setattr(fzf.subprocess, "run", fake_run)
    return calls, result


def test_fzf_command_flags():
    cmd = fzf.fzf_command(header="Pick", multi=False)
    assert cmd[0] == "fzf"
    assert "--with-nth=1" in cmd
    assert cmd[cmd.index("--header") + 1] == "Pick"
    assert "--multi" not in cmd
    assert "--preview" not in cmd

    cmd = fzf.fzf_command(header="Pick", preview="cat {2}")
    assert "--multi" in cmd
    assert cmd[cmd.index("--preview") + 1] == "cat {2}"


def test_parse_selection_uses_path_column(tmp_path):
    out = f"a.gpx\t{tmp_path / 'a.gpx'}\n\n{tmp_path / 'b.gpx'}\n"
    assert fzf.parse_selection(out) == [
        (tmp_path / "a.gpx").resolve(),
        (tmp_path / "b.gpx").resolve(),
    ]


def test_select_lists_relative_names(tmp_path, fake_fzf):
    calls, result = fake_fzf
    inside = tmp_path / "2024" / "ride.gpx"
    outside = Path("/elsewhere/walk.gpx")
    result["stdout"] = f"2024/ride.gpx\t{inside}\n"

    selected = fzf.fzf_select_paths([inside, outside], header="Pick", root=tmp_path)

    assert selected == [inside.resolve()]
    lines = calls[0]["input"].splitlines()
    assert lines[0] == f"{Path('2024') / 'ride.gpx'}\t{inside}"
    assert lines[1] == f"walk.gpx\t{outside}"


def test_select_aborted_returns_empty(tmp_path, fake_fzf):
    _, result = fake_fzf
    result["returncode"] = 130
    assert fzf.fzf_select_paths([tmp_path / "a.gpx"], header="Pick") == []


def test_select_failure_raises(tmp_path, fake_fzf):
    _, result = fake_fzf
    result["returncode"] = 2
    result["stderr"] = "unknown option\n"
    with pytest.raises(IngestError, match="unknown option"):
        fzf.fzf_select_paths([tmp_path / "a.gpx"], header="Pick")


def test_select_without_fzf(monkeypatch, tmp_path):
    monkeypatch.setattr(fzf, "which", lambda name: None)
    with pytest.raises(FzfNotFoundError):
        fzf.fzf_select_paths([tmp_path / "a.gpx"], header="Pick")
