# gpxstats/formats/gpx.py
"""
GPX helpers for gpxstats

This module is intentionally format-focused:
- reading GPX documents with ElementTree
- turning <trkseg>/<rte> groups into ordered TrackPoint lists
- extracting document metadata and waypoints

Key design principle:
  No statistics here. The aggregator in gpxstats.analyze.track only ever
  sees TrackPoint lists, whatever file format they came from.

Tags are matched by local name, so GPX 1.0, GPX 1.1 and extension
namespaces (e.g. Garmin's gpxtpx:hr) are all read the same way.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional
from xml.etree import ElementTree as ET

from gpxstats.analyze.models import EPOCH, TrackPoint
from gpxstats.errors import InvalidGpxError

PARSE_ELEMENTS = ("track", "route", "waypoint")

# (group tag, point tag) per parse element, in the order groups are read
_GROUP_TAGS = (
    ("route", "rte", "rtept"),
    ("track", "trkseg", "trkpt"),
)


@dataclass(frozen=True)
class Waypoint:
    lat: float
    lon: float
    name: str = ""
    desc: str = ""
    sym: str = ""
    link: Optional[str] = None


@dataclass
class GpxDocument:
    """Everything the analyzer needs from one GPX file."""

    name: Optional[str] = None
    desc: str = ""
    author: Optional[str] = None
    copyright: Optional[str] = None
    segments: list[list[TrackPoint]] = field(default_factory=list)
    waypoints: list[Waypoint] = field(default_factory=list)

    @property
    def point_count(self) -> int:
        return sum(len(s) for s in self.segments)


def _local(tag) -> str:
    """Strip the "{namespace}" prefix ElementTree puts on qualified tags."""
    if not isinstance(tag, str):
        return ""   # comments, processing instructions
    return tag.rsplit("}", 1)[-1]


def _iter_local(elem: ET.Element, name: str) -> Iterator[ET.Element]:
    """Descendants of `elem` (not elem itself) with the given local name."""
    for el in elem.iter():
        if el is not elem and _local(el.tag) == name:
            yield el


def _first(elem: ET.Element, name: str) -> Optional[ET.Element]:
    return next(_iter_local(elem, name), None)


def _first_text(elem: ET.Element, name: str) -> Optional[str]:
    el = _first(elem, name)
    if el is None:
        return None
    return "".join(el.itertext()).strip()


def _parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    # GPX times commonly use Z for UTC.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Ensure tz-aware; if naive, assume UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def _parse_float(text: Optional[str]) -> Optional[float]:
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    # nan / inf are as unusable as garbage text
    return value if math.isfinite(value) else None


def _parse_int(text: Optional[str]) -> Optional[int]:
    value = _parse_float(text)
    return int(value) if value is not None else None


def _parse_latlon(el: ET.Element) -> tuple[float, float]:
    try:
        lat, lon = float(el.get("lat")), float(el.get("lon"))
    except (TypeError, ValueError) as e:
        raise InvalidGpxError(
            f"<{_local(el.tag)}> without usable lat/lon: "
            f"lat={el.get('lat')!r} lon={el.get('lon')!r}") from e
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidGpxError(
            f"<{_local(el.tag)}> with non-finite lat/lon: lat={lat!r} lon={lon!r}")
    return lat, lon


def read_gpx(path: Path) -> ET.ElementTree:
    """
    Read a GPX file into an ElementTree.

    Raises:
      InvalidGpxError (malformed XML), OSError
    """
    try:
        return ET.parse(path)
    except ET.ParseError as e:
        raise InvalidGpxError(f"Could not parse GPX: {path} ({e})") from e


def parse_gpx_string(text: str) -> ET.ElementTree:
    """Parse GPX markup held in memory."""
    try:
        return ET.ElementTree(ET.fromstring(text))
    except ET.ParseError as e:
        raise InvalidGpxError(f"Could not parse GPX document ({e})") from e


def parse_point(el: ET.Element) -> TrackPoint:
    """
    Build a TrackPoint from a <trkpt>/<rtept> element.

    A missing or unreadable <time> becomes the epoch; unreadable optional
    values become None.
    """
    lat, lon = _parse_latlon(el)
    time = _parse_gpx_time(_first_text(el, "time") or "")
    return TrackPoint(
        lat=lat,
        lon=lon,
        ele=_parse_float(_first_text(el, "ele")),
        time=time if time is not None else EPOCH,
        hr=_parse_int(_first_text(el, "hr")),
        cad=_parse_int(_first_text(el, "cad")),
        atemp=_parse_float(_first_text(el, "atemp")),
    )


def parse_waypoint(el: ET.Element) -> Waypoint:
    lat, lon = _parse_latlon(el)
    link = _first(el, "link")
    return Waypoint(
        lat=lat,
        lon=lon,
        name=_first_text(el, "name") or "",
        desc=_first_text(el, "desc") or "",
        sym=_first_text(el, "sym") or "",
        link=link.get("href") if link is not None else None,
    )


def _document_desc(root: ET.Element) -> str:
    """All <desc> texts except those belonging to waypoints, one per line."""
    out = ""
    for parent in root.iter():
        if _local(parent.tag) == "wpt":
            continue
        for child in parent:
            if _local(child.tag) == "desc":
                out += "".join(child.itertext()) + "\n"
    return out


def extract_document(
        root: ET.Element, *,
        parse_elements: Iterable[str] = PARSE_ELEMENTS,
) -> GpxDocument:
    """
    Extract metadata, point segments and waypoints from a GPX root.

    Route groups are read before track segments. Groups without points are
    dropped.
    """
    wanted = set(parse_elements)
    doc = GpxDocument(
        name=_first_text(root, "name"),
        desc=_document_desc(root),
        author=_first_text(root, "author"),
        copyright=_first_text(root, "copyright"),
    )

    for element, group_tag, point_tag in _GROUP_TAGS:
        if element not in wanted:
            continue
        for group in _iter_local(root, group_tag):
            points = [parse_point(el) for el in _iter_local(group, point_tag)]
            if points:
                doc.segments.append(points)

    if "waypoint" in wanted:
        doc.waypoints = [parse_waypoint(el) for el in _iter_local(root, "wpt")]

    return doc
