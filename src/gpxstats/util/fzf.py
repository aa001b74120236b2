# gpxstats/util/fzf.py
"""
Interactive GPX file selection using `fzf`

Each candidate is fed to fzf as "<display>\t<full path>"; only the display
column is shown and searched, the full path comes back on selection.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which

from gpxstats.errors import FzfNotFoundError, IngestError

# fzf exits with 130 when the user aborts (Esc / Ctrl-C)
_FZF_ABORTED = 130


def _display_name(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return str(path.relative_to(root))
        except ValueError:
            pass
    return path.name


def fzf_command(*, header: str, multi: bool = True, preview: str | None = None) -> list[str]:
    cmd = [
        "fzf",
        "--ansi",
        "--delimiter=\t",
        "--nth=1",
        "--with-nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")
    if preview:
        cmd.extend(["--preview", preview, "--preview-window", "right:60%:wrap"])
    return cmd


def parse_selection(out: str) -> list[Path]:
    """Turn fzf's output lines back into resolved paths."""
    selected: list[Path] = []
    for line in out.splitlines():
        line = line.strip()
        if not line:
            continue
        path_str = line.split("\t", 1)[1] if "\t" in line else line
        selected.append(Path(path_str).expanduser().resolve())
    return selected


def fzf_select_paths(
        paths: list[Path], *,
        header: str,
        multi: bool = True,
        preview: str | None = None,
        root: Path | None = None,
) -> list[Path]:
    """
    Let the user pick from `paths`; returns the chosen full paths.

    Paths under `root` are listed relative to it, others by file name.
    `preview` is an fzf preview command; {2} expands to the full path.
    An aborted selection returns [].
    """
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    input_text = "".join(f"{_display_name(p, root)}\t{p}\n" for p in paths)

    proc = subprocess.run(
        fzf_command(header=header, multi=multi, preview=preview),
        input=input_text,
        capture_output=True,
        text=True,
    )

    if proc.returncode == _FZF_ABORTED:
        return []
    if proc.returncode != 0:
        raise IngestError(f"fzf failed ({proc.returncode}): {proc.stderr.strip()}")

    return parse_selection(proc.stdout)
