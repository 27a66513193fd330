"""
Time and coordinate helpers shared by every calculator.

All angles are sidereal ecliptic degrees. Nothing here rounds; the
degree/minute/second split truncates so that displayed values match
reference software that truncates as well.
"""

from datetime import datetime, timedelta
from typing import Tuple

import pytz
import swisseph as swe

DEGREES_PER_SIGN = 30.0
NAKSHATRA_SPAN = 360.0 / 27.0
PADA_SPAN = NAKSHATRA_SPAN / 4.0


def julian_day(dt: datetime) -> float:
    """Julian Day (UT) for a civil datetime. Naive values are read as UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(pytz.UTC)
    hour_decimal = dt.hour + dt.minute / 60.0 + dt.second / 3600.0 + dt.microsecond / 3600000000.0
    return swe.julday(dt.year, dt.month, dt.day, hour_decimal)


def datetime_from_julian_day(jd: float) -> datetime:
    """Inverse of julian_day, returned as an aware UTC datetime."""
    year, month, day, hour = swe.revjul(jd, swe.GREG_CAL)
    midnight = datetime(year, month, day, tzinfo=pytz.UTC)
    return midnight + timedelta(hours=hour)


def normalize_degree(deg: float) -> float:
    """Normalize degrees to the [0, 360) range."""
    result = deg % 360.0
    # -1e-17 % 360 rounds up to exactly 360.0
    if result >= 360.0:
        result = 0.0
    return result


def angular_separation(a: float, b: float) -> float:
    """
    Shortest arc between two longitudes.
    Always returns a value in [0, 180].
    """
    diff = abs(normalize_degree(a) - normalize_degree(b))
    return min(diff, 360.0 - diff)


def signed_angular_distance(from_pos: float, to_pos: float) -> float:
    """
    Signed distance from one longitude to another in (-180, 180].
    Positive means to_pos lies ahead in zodiacal order.
    """
    diff = normalize_degree(to_pos) - normalize_degree(from_pos)
    if diff > 180:
        diff -= 360
    elif diff <= -180:
        diff += 360
    return diff


def orb(actual: float, aspect_angle: float) -> float:
    """Distance of an actual separation from an exact aspect angle, wrapping through 360."""
    diff = abs(normalize_degree(actual) - normalize_degree(aspect_angle))
    return min(diff, 360.0 - diff)


def sign_index(longitude: float) -> int:
    return min(int(normalize_degree(longitude) / DEGREES_PER_SIGN), 11)


def degree_in_sign(longitude: float) -> float:
    return normalize_degree(longitude) % DEGREES_PER_SIGN


def nakshatra_index(longitude: float) -> int:
    return min(int(normalize_degree(longitude) / NAKSHATRA_SPAN), 26)


def position_in_nakshatra(longitude: float) -> float:
    return normalize_degree(longitude) - nakshatra_index(longitude) * NAKSHATRA_SPAN


def nakshatra_pada(longitude: float) -> int:
    pada = int(position_in_nakshatra(longitude) / PADA_SPAN) + 1
    return max(1, min(pada, 4))


def to_dms(degrees: float) -> Tuple[int, int, int]:
    """Split a non-negative angle into truncated degrees, minutes and seconds."""
    deg = int(degrees)
    minutes_float = (degrees - deg) * 60
    minutes = int(minutes_float)
    seconds = int((minutes_float - minutes) * 60)
    return deg, minutes, seconds


def format_dms(degrees: float) -> str:
    deg, minutes, seconds = to_dms(degrees)
    return f"{deg}°{minutes:02d}'{seconds:02d}\""


def houses_between(reference_sign: int, target_sign: int) -> int:
    """House count (1-12) of target_sign counted from reference_sign."""
    return (target_sign - reference_sign) % 12 + 1
