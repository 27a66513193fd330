import pytest

from conftest import make_chart
from divisional import (
    DivisionType,
    build_divisional_chart,
    cached_divisional_chart,
    divisional_charts_for,
    divisional_longitude,
    divisional_sign,
    is_vargottama,
    vargottama_planets,
)
from vedic_types import Planet, ZodiacSign


def test_d1_is_identity():
    assert divisional_longitude(123.456, DivisionType.D1) == pytest.approx(123.456)


@pytest.mark.parametrize("longitude,expected", [
    (0.5, ZodiacSign.ARIES),         # movable sign starts from itself
    (3.4, ZodiacSign.TAURUS),
    (30.5, ZodiacSign.CAPRICORN),    # fixed sign starts from the 9th
    (60.5, ZodiacSign.LIBRA),        # dual sign starts from the 5th
    (359.9, ZodiacSign.PISCES),
])
def test_navamsa_signs(longitude, expected):
    assert divisional_sign(longitude, DivisionType.D9) == expected


def test_hora_odd_and_even_signs():
    assert divisional_sign(5.0, DivisionType.D2) == ZodiacSign.LEO
    assert divisional_sign(20.0, DivisionType.D2) == ZodiacSign.CANCER
    assert divisional_sign(35.0, DivisionType.D2) == ZodiacSign.CANCER
    assert divisional_sign(50.0, DivisionType.D2) == ZodiacSign.LEO


def test_drekkana_steps_by_trines():
    assert divisional_sign(5.0, DivisionType.D3) == ZodiacSign.ARIES
    assert divisional_sign(15.0, DivisionType.D3) == ZodiacSign.LEO
    assert divisional_sign(25.0, DivisionType.D3) == ZodiacSign.SAGITTARIUS


def test_trimsamsa_unequal_parts():
    assert divisional_sign(4.0, DivisionType.D30) == ZodiacSign.ARIES
    assert divisional_sign(7.0, DivisionType.D30) == ZodiacSign.AQUARIUS
    assert divisional_sign(29.9, DivisionType.D30) == ZodiacSign.LIBRA
    # Taurus is even
    assert divisional_sign(31.0, DivisionType.D30) == ZodiacSign.TAURUS
    assert divisional_sign(59.0, DivisionType.D30) == ZodiacSign.SCORPIO


@pytest.mark.parametrize("division", list(DivisionType))
def test_every_division_stays_in_range(division):
    for longitude in (0.0, 14.999, 29.9999999, 181.0, 359.9999999):
        result = divisional_longitude(longitude, division)
        assert 0.0 <= result < 360.0


def test_divisional_chart_houses_are_whole_sign(sample_chart):
    d9 = build_divisional_chart(sample_chart, DivisionType.D9)
    asc_sign = d9.ascendant_sign.ordinal
    for position in d9.planet_positions:
        assert position.house == (position.sign.ordinal - asc_sign) % 12 + 1
    # retrograde flag carries over through speed
    assert d9.position_of(Planet.RAHU).is_retrograde


def test_cached_divisional_chart_reuses_result(sample_chart):
    first = cached_divisional_chart(sample_chart, DivisionType.D10)
    second = cached_divisional_chart(make_chart(), DivisionType.D10)
    assert first is second
    assert len(divisional_charts_for(sample_chart)) == len(DivisionType)


def test_vargottama():
    # First navamsa of Aries maps back to Aries
    assert is_vargottama(1.0)
    assert not is_vargottama(5.0)
    chart = make_chart(longitudes={
        Planet.SUN: 1.0, Planet.MOON: 100.0, Planet.MARS: 200.0, Planet.MERCURY: 25.0,
        Planet.JUPITER: 130.0, Planet.VENUS: 50.0, Planet.SATURN: 280.0,
        Planet.RAHU: 330.0, Planet.KETU: 150.0,
    })
    assert Planet.SUN in vargottama_planets(chart)


@pytest.mark.parametrize("longitude", [0.01, 1.0, 3.33])
def test_vargottama_stable_within_first_navamsa(longitude):
    assert is_vargottama(longitude)


@pytest.mark.parametrize("longitude", [3.34, 5.0, 29.99])
def test_vargottama_clears_after_first_navamsa(longitude):
    # Aries navamsas past the first fall in Taurus onwards
    assert not is_vargottama(longitude)
