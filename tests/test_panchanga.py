from datetime import datetime

import pytest

from conftest import FakePositionProvider
from ephemeris import RiseSetEvent
from panchanga import (
    Paksha,
    PanchangaCalculator,
    calculate_panchanga,
    days_to_boundary,
    karana_index,
    karana_name,
    moon_phase,
    tithi_number,
    yoga_number,
)
from vedic_types import Nakshatra, Planet


def test_tithi_numbers():
    assert tithi_number(0.0, 0.0) == 1
    assert tithi_number(0.0, 11.99) == 1
    assert tithi_number(0.0, 12.0) == 2
    assert tithi_number(100.0, 279.0) == 15
    assert tithi_number(0.0, 347.999) == 29
    assert tithi_number(0.0, 348.0) == 30
    assert tithi_number(0.0, 359.9) == 30


def test_tithi_wraps_around_aries():
    # Moon just past 0, Sun late in Pisces
    assert tithi_number(350.0, 5.0) == 2


def test_karana_mapping():
    assert karana_name(0) == "Bava"
    assert karana_name(6) == "Vishti"
    assert karana_name(55) == "Vishti"
    assert karana_name(56) == "Shakuni"
    assert karana_name(59) == "Kimstughna"
    assert karana_index(0.0, 353.99) == 58
    assert karana_index(0.0, 354.0) == 59
    assert karana_index(0.0, 359.9) == 59


def test_yoga_number_from_sum():
    assert yoga_number(0.0, 0.0) == 1
    assert yoga_number(200.0, 159.9) == 27


def test_moon_phase():
    assert moon_phase(0.0, 0.0) == pytest.approx(0.0)
    assert moon_phase(0.0, 180.0) == pytest.approx(100.0)
    assert moon_phase(0.0, 270.0) == pytest.approx(50.0)


def test_days_to_boundary():
    assert days_to_boundary(6.0, 12.0, 12.0) == pytest.approx(0.5)
    assert days_to_boundary(6.0, 12.0, 0.0) is None
    assert days_to_boundary(6.0, 12.0, -1.0) is None


def _provider(**kwargs):
    return FakePositionProvider(
        longitudes={Planet.SUN: 0.0, Planet.MOON: 186.0},
        speeds={Planet.SUN: 1.0, Planet.MOON: 13.0},
        **kwargs,
    )


def test_calculate_krishna_pratipada():
    offsets = {
        (Planet.SUN, RiseSetEvent.RISE): 0.26,
        (Planet.SUN, RiseSetEvent.SET): 0.76,
    }
    calc = PanchangaCalculator(_provider(rise_set_offsets=offsets))
    result = calc.calculate(datetime(2024, 1, 17, 12, 0), 28.6, 77.2, "UTC")

    assert result.tithi.number == 16
    assert result.paksha == Paksha.KRISHNA
    assert result.tithi.name == "Pratipada"
    assert result.nakshatra.nakshatra == Nakshatra.CHITRA
    assert result.karana.name == "Taitila"
    # 186 - 180 = 6 degrees into the tithi, 12 deg/day relative motion
    assert result.tithi.ends_at == datetime(2024, 1, 18, 0, 0, tzinfo=result.date_time.tzinfo)
    assert result.sunrise.hour == 6
    assert result.sunset.hour == 18
    assert result.moonrise is None
    assert result.moonset is None
    # 2024-01-17 is a Wednesday and noon is after sunrise
    assert result.vara.name == "Wednesday"
    assert result.vara.lord == Planet.MERCURY


def test_vara_before_sunrise_belongs_to_previous_day():
    offsets = {(Planet.SUN, RiseSetEvent.RISE): 0.26}
    calc = PanchangaCalculator(_provider(rise_set_offsets=offsets))
    result = calc.calculate(datetime(2024, 1, 17, 3, 0), 28.6, 77.2, "UTC")
    assert result.vara.name == "Tuesday"


def test_absent_sunrise_keeps_civil_weekday():
    calc = PanchangaCalculator(_provider())
    result = calc.calculate(datetime(2024, 1, 17, 3, 0), 78.2, 15.6, "UTC")
    assert result.sunrise is None
    assert result.vara.name == "Wednesday"


def test_event_after_local_day_is_absent():
    offsets = {(Planet.MOON, RiseSetEvent.RISE): 1.2}
    calc = PanchangaCalculator(_provider(rise_set_offsets=offsets))
    result = calc.calculate(datetime(2024, 1, 17, 12, 0), 28.6, 77.2, "UTC")
    assert result.moonrise is None


def test_stationary_moon_gives_no_end_times():
    provider = FakePositionProvider(
        longitudes={Planet.SUN: 0.0, Planet.MOON: 186.0},
        speeds={Planet.SUN: 1.0, Planet.MOON: 0.5},
    )
    result = PanchangaCalculator(provider).calculate(datetime(2024, 1, 17, 12, 0), 28.6, 77.2)
    assert result.tithi.ends_at is None
    assert result.karana.ends_at is None
    assert result.nakshatra.ends_at is not None


def test_calculate_panchanga_wrapper():
    result = calculate_panchanga(datetime(2024, 1, 17, 12, 0), 28.6, 77.2, "Asia/Kolkata", provider=_provider())
    assert result.date_time.tzinfo is not None
    assert result.yoga.number == 14
    assert result.moon_phase == pytest.approx(moon_phase(0.0, 186.0))
