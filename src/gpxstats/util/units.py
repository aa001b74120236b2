# gpxstats/util/units.py
"""
Unit conversions and duration strings for reports and chart labels.
"""

from __future__ import annotations

_SECOND_IN_MILLIS = 1000
_MINUTE_IN_MILLIS = 60 * _SECOND_IN_MILLIS
_HOUR_IN_MILLIS = 60 * _MINUTE_IN_MILLIS
_DAY_IN_MILLIS = 24 * _HOUR_IN_MILLIS


def to_miles(km: float) -> float:
    return km / 1.60934

def to_ft(m: float) -> float:
    return m * 3.28084

def m_to_km(m: float) -> float:
    return m / 1000.0

def m_to_mi(m: float) -> float:
    return m / 1609.34

def ms_to_h(ms: float) -> float:
    return ms / 3_600_000.0


def duration_string(duration_ms: float, *, hide_ms: bool = False) -> str:
    """
    Format a duration like  1d 2:03'04"  (days and hours only when needed).

    Leftover milliseconds are appended as ".123" instead of the closing
    quote unless hide_ms is set.
    """
    duration = int(duration_ms)
    s = ""

    if duration >= _DAY_IN_MILLIS:
        s += f"{duration // _DAY_IN_MILLIS}d "
        duration %= _DAY_IN_MILLIS

    if duration >= _HOUR_IN_MILLIS:
        s += f"{duration // _HOUR_IN_MILLIS}:"
        duration %= _HOUR_IN_MILLIS

    mins, duration = divmod(duration, _MINUTE_IN_MILLIS)
    secs, duration = divmod(duration, _SECOND_IN_MILLIS)
    s += f"{mins:02d}'{secs:02d}"

    if not hide_ms and duration > 0:
        s += f".{duration:03d}"
    else:
        s += '"'
    return s


def duration_string_iso(duration_ms: float, *, hide_ms: bool = False) -> str:
    """Same as duration_string, with ':' separators:  2:03:04"""
    return duration_string(duration_ms, hide_ms=hide_ms).replace("'", ":").replace('"', "")
