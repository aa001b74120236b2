import pytest

from gpxstats.util.units import (
    duration_string,
    duration_string_iso,
    m_to_km,
    m_to_mi,
    ms_to_h,
    to_ft,
    to_miles,
)


@pytest.mark.parametrize(
    "ms, expected",
    [
        (0, "00'00\""),
        (65_000, "01'05\""),
        (3_723_000, "1:02'03\""),
        (90_061_000, "1d 1:01'01\""),
        (1_500, "00'01.500"),
    ],
)
def test_duration_string(ms, expected):
    assert duration_string(ms) == expected


def test_duration_string_hides_ms():
    assert duration_string(90_061_001, hide_ms=True) == "1d 1:01'01\""
    assert duration_string(90_061_001) == "1d 1:01'01.001"


def test_duration_string_iso():
    assert duration_string_iso(3_723_000) == "1:02:03"
    assert duration_string_iso(65_000) == "01:05"


def test_conversions():
    assert to_ft(1) == pytest.approx(3.28084)
    assert to_miles(1.60934) == pytest.approx(1.0)
    assert m_to_km(1500) == pytest.approx(1.5)
    assert m_to_mi(1609.34) == pytest.approx(1.0)
    assert ms_to_h(5_400_000) == pytest.approx(1.5)
