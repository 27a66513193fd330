from datetime import datetime

import pytest

from chart import ChartBuilder, build_transit_chart, format_chart_text, house_for_longitude, whole_sign_cusps
from conftest import FakePositionProvider, make_birth_data, make_chart
from config import CalculationConfig
from exceptions import (
    EphemerisUnavailableError,
    InvalidCoordinatesError,
    InvalidDateTimeError,
    InvalidTimezoneError,
)
from vedic_types import (
    MAIN_PLANETS,
    Element,
    HouseSystem,
    Nakshatra,
    Planet,
    PlanetPosition,
    Quality,
    ZodiacSign,
)


def test_birth_data_rejects_bad_latitude():
    with pytest.raises(InvalidCoordinatesError):
        make_birth_data(latitude=91.0)


def test_birth_data_rejects_bad_longitude():
    with pytest.raises(InvalidCoordinatesError):
        make_birth_data(longitude=-180.5)


def test_birth_data_rejects_unknown_timezone():
    with pytest.raises(InvalidTimezoneError):
        make_birth_data(timezone="Mars/Olympus_Mons")


def test_birth_data_rejects_non_datetime():
    with pytest.raises(InvalidDateTimeError):
        make_birth_data(date_time="1990-06-15")


def test_birth_data_utc_conversion():
    birth = make_birth_data(date_time=datetime(2000, 1, 1, 17, 30))
    utc = birth.utc_datetime()
    assert (utc.hour, utc.minute) == (12, 0)


def test_sign_and_nakshatra_metadata():
    assert ZodiacSign.LEO.ruler == Planet.SUN
    assert ZodiacSign.PISCES.ruler == Planet.JUPITER
    assert ZodiacSign.SCORPIO.quality == Quality.FIXED
    assert ZodiacSign.SCORPIO.element == Element.WATER
    assert Nakshatra.ASHWINI.ruler == Planet.KETU
    assert Nakshatra.REVATI.ruler == Planet.MERCURY
    assert Nakshatra.ASHWINI.number == 1


def test_position_derived_fields():
    pos = PlanetPosition(Planet.MARS, 365.5, speed=-0.2)
    assert pos.longitude == pytest.approx(5.5)
    assert pos.sign == ZodiacSign.ARIES
    assert pos.nakshatra == Nakshatra.ASHWINI
    assert pos.nakshatra_pada == 2
    assert pos.is_retrograde
    assert pos.formatted().endswith("Aries (R)")


def test_luminaries_never_retrograde():
    assert not PlanetPosition(Planet.SUN, 10.0, speed=-1.0).is_retrograde
    assert not PlanetPosition(Planet.MOON, 0.0, speed=-0.5).is_retrograde


def test_build_chart_with_fake_provider(sample_chart):
    assert len(sample_chart.planet_positions) == len(MAIN_PLANETS)
    assert sample_chart.ascendant_sign == ZodiacSign.ARIES
    assert sample_chart.ayanamsa == pytest.approx(24.0)
    assert sample_chart.position_of(Planet.MOON).house == 4
    assert sample_chart.position_of(Planet.SATURN).house == 10
    assert all(1 <= p.house <= 12 for p in sample_chart.planet_positions)


def test_whole_sign_houses_follow_ascendant_sign():
    chart = make_chart(ascendant=95.0, house_system=HouseSystem.WHOLE_SIGN)
    assert chart.house_cusps[0] == pytest.approx(90.0)
    # Moon at 100 shares the ascendant's sign
    assert chart.position_of(Planet.MOON).house == 1
    assert chart.position_of(Planet.SUN).house == 10


def test_house_for_longitude_across_zero():
    cusps = whole_sign_cusps(335.0)
    assert house_for_longitude(345.0, cusps) == 1
    assert house_for_longitude(5.0, cusps) == 2


def test_outer_planets_are_opt_in():
    longitudes = {planet: 10.0 * i for i, planet in enumerate(Planet)}
    builder = ChartBuilder(FakePositionProvider(longitudes),
                           CalculationConfig(include_outer_planets=True))
    chart = builder.build(make_birth_data())
    assert chart.position_of(Planet.PLUTO) is not None


def test_provider_failure_propagates_without_partial_chart():
    longitudes = {Planet.SUN: 10.0, Planet.MOON: 20.0}
    with pytest.raises(EphemerisUnavailableError):
        ChartBuilder(FakePositionProvider(longitudes)).build(make_birth_data())


def test_charts_are_hashable_and_comparable(sample_chart):
    other = make_chart()
    assert sample_chart == other
    assert hash(sample_chart) == hash(other)


def test_format_chart_text(sample_chart):
    text = format_chart_text(sample_chart)
    assert "Test Native" in text
    assert "Ascendant:      Aries" in text


def test_transit_chart_is_placed_at_origin(fake_provider):
    chart = build_transit_chart(datetime(2024, 3, 1, 12, 0), "Asia/Kolkata", provider=fake_provider)
    assert chart.birth_data.name == "Transit"
    assert (chart.birth_data.latitude, chart.birth_data.longitude) == (0.0, 0.0)
    assert chart.house_system == HouseSystem.WHOLE_SIGN
    assert chart.position_of(Planet.SATURN).sign == ZodiacSign.CAPRICORN


def test_planets_by_house_and_sign(sample_chart):
    assert {p.planet for p in sample_chart.planets_in_house(1)} == {Planet.SUN, Planet.MERCURY}
    assert [p.planet for p in sample_chart.planets_in_sign(ZodiacSign.LEO)] == [Planet.JUPITER]
    assert sample_chart.planets_in_house(3) == []
