from datetime import datetime

import pytest
import pytz

from vedic_math import (
    NAKSHATRA_SPAN,
    angular_separation,
    datetime_from_julian_day,
    degree_in_sign,
    format_dms,
    houses_between,
    julian_day,
    nakshatra_index,
    nakshatra_pada,
    normalize_degree,
    orb,
    signed_angular_distance,
    sign_index,
    to_dms,
)


def test_julian_day_j2000():
    assert julian_day(datetime(2000, 1, 1, 12, 0)) == pytest.approx(2451545.0)


def test_julian_day_converts_aware_datetimes_to_utc():
    kolkata = pytz.timezone("Asia/Kolkata").localize(datetime(2000, 1, 1, 17, 30))
    assert julian_day(kolkata) == pytest.approx(2451545.0)


def test_julian_day_round_trip_within_a_second():
    moment = datetime(1990, 6, 15, 9, 0, 30, tzinfo=pytz.UTC)
    back = datetime_from_julian_day(julian_day(moment))
    assert abs((back - moment).total_seconds()) < 1.0


@pytest.mark.parametrize("value,expected", [
    (0.0, 0.0),
    (360.0, 0.0),
    (-30.0, 330.0),
    (725.5, 5.5),
    (-1e-17, 0.0),
])
def test_normalize_degree(value, expected):
    assert normalize_degree(value) == pytest.approx(expected)


def test_angular_separation_takes_shortest_arc():
    assert angular_separation(350.0, 10.0) == pytest.approx(20.0)
    assert angular_separation(0.0, 180.0) == pytest.approx(180.0)
    assert angular_separation(10.0, 350.0) == angular_separation(350.0, 10.0)


def test_signed_angular_distance_range():
    assert signed_angular_distance(350.0, 10.0) == pytest.approx(20.0)
    assert signed_angular_distance(10.0, 350.0) == pytest.approx(-20.0)
    assert signed_angular_distance(0.0, 180.0) == pytest.approx(180.0)


def test_orb_wraps_through_zero():
    assert orb(359.0, 0.0) == pytest.approx(1.0)
    assert orb(118.0, 120.0) == pytest.approx(2.0)


def test_sign_and_degree():
    assert sign_index(0.0) == 0
    assert sign_index(29.999) == 0
    assert sign_index(30.0) == 1
    assert sign_index(359.999) == 11
    assert degree_in_sign(45.5) == pytest.approx(15.5)


def test_nakshatra_boundaries():
    assert nakshatra_index(0.0) == 0
    assert nakshatra_index(NAKSHATRA_SPAN) == 1
    assert nakshatra_index(359.99) == 26
    assert nakshatra_pada(0.0) == 1
    assert nakshatra_pada(NAKSHATRA_SPAN - 1e-9) == 4


def test_dms_truncates():
    assert to_dms(15.9999) == (15, 59, 59)
    assert format_dms(5.5) == "5°30'00\""


def test_houses_between():
    assert houses_between(0, 0) == 1
    assert houses_between(3, 2) == 12
    assert houses_between(10, 1) == 4
