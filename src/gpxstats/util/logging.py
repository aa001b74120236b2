# gpxstats/util/logging.py
"""
Timestamped status lines for the CLI.

Everything goes to stderr; stdout carries reports and TSV rows only.
"""

from __future__ import annotations

import datetime
import sys

_state = {"quiet": False, "verbose": False}


def configure(*, quiet: bool = False, verbose: bool = False) -> None:
    """quiet silences log(); verbose enables debug(). quiet wins."""
    _state["quiet"] = quiet
    _state["verbose"] = verbose and not quiet


def _emit(msg: str) -> None:
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}", file=sys.stderr)


def log(msg: str) -> None:
    """Print a timestamped log line (local time with timezone)."""
    if not _state["quiet"]:
        _emit(msg)


def debug(msg: str) -> None:
    if _state["verbose"]:
        _emit(f"debug: {msg}")
