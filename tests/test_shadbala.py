import pytest

from conftest import DEFAULT_LONGITUDES, make_chart
from shadbala import (
    Relationship,
    StrengthRating,
    calculate_shadbala,
    chesta_bala,
    dig_bala,
    drik_strength,
    hora_lord,
    kendradi_bala,
    paksha_bala,
    rating_for_percentage,
    relationship,
    tribhaga_lord,
    uccha_bala,
    varga_dignity,
    yuddha_bala,
)
from vedic_types import MAIN_PLANETS, Planet, PlanetPosition, ZodiacSign


def test_uccha_bala_extremes():
    assert uccha_bala(Planet.SUN, 10.0) == pytest.approx(60.0)
    assert uccha_bala(Planet.SUN, 190.0) == pytest.approx(0.0)
    assert uccha_bala(Planet.SUN, 100.0) == pytest.approx(30.0)


def test_unknown_planet_falls_back_to_zero():
    assert uccha_bala(Planet.PLUTO, 10.0) == 0.0
    assert dig_bala(Planet.PLUTO, 1) == 0.0
    assert relationship(Planet.PLUTO, Planet.SUN) == Relationship.NEUTRAL


def test_varga_dignity_order():
    assert varga_dignity(Planet.SUN, ZodiacSign.ARIES) == 20.0
    assert varga_dignity(Planet.SUN, ZodiacSign.LEO) == 30.0
    assert varga_dignity(Planet.SUN, ZodiacSign.CANCER) == 15.0
    assert varga_dignity(Planet.SUN, ZodiacSign.TAURUS) == 7.5
    assert varga_dignity(Planet.SUN, ZodiacSign.GEMINI) == 10.0


def test_kendradi_and_dig():
    assert kendradi_bala(10) == 60.0
    assert kendradi_bala(5) == 30.0
    assert kendradi_bala(12) == 15.0
    assert dig_bala(Planet.SUN, 10) == 60.0
    assert dig_bala(Planet.SUN, 4) == 0.0
    assert dig_bala(Planet.JUPITER, 12) == 50.0


def test_paksha_bala_benefic_and_malefic():
    # Full moon: benefics strongest, malefics weakest
    assert paksha_bala(Planet.JUPITER, 0.0, 179.9) == pytest.approx(60.0, abs=0.1)
    assert paksha_bala(Planet.SATURN, 0.0, 179.9) == pytest.approx(0.0, abs=0.1)
    assert paksha_bala(Planet.SUN, None, 10.0) == 30.0


def test_time_lords():
    assert tribhaga_lord(8) == Planet.MERCURY
    assert tribhaga_lord(12) == Planet.SUN
    assert tribhaga_lord(23) == Planet.VENUS
    assert tribhaga_lord(3) == Planet.MARS
    # Sunday, first hora after sunrise belongs to the Sun
    assert hora_lord(6, 6) == Planet.SUN
    assert hora_lord(6, 7) == Planet.VENUS


def test_chesta_bala():
    assert chesta_bala(PlanetPosition(Planet.MARS, 0.0, speed=-0.2)) == 60.0
    assert chesta_bala(PlanetPosition(Planet.MARS, 0.0, speed=0.005)) == 50.0
    assert chesta_bala(PlanetPosition(Planet.MARS, 0.0, speed=1.2)) == 20.0
    assert chesta_bala(PlanetPosition(Planet.SUN, 0.0, speed=1.0)) == 0.0
    # Luminaries get no motional strength even with a negative speed
    assert chesta_bala(PlanetPosition(Planet.SUN, 0.0, speed=-1.0)) == 0.0
    assert chesta_bala(PlanetPosition(Planet.MOON, 0.0, speed=-13.0)) == 0.0


def test_drik_strength_bands():
    assert drik_strength(5.0) == 1.0
    assert drik_strength(120.0) == 0.75
    assert drik_strength(40.0) == 0.0


def test_yuddha_bala_uses_brightness():
    longitudes = dict(DEFAULT_LONGITUDES)
    longitudes[Planet.VENUS] = 200.5
    chart = make_chart(longitudes=longitudes)
    assert yuddha_bala(chart.position_of(Planet.VENUS), chart) == 30.0
    assert yuddha_bala(chart.position_of(Planet.MARS), chart) == -30.0
    assert yuddha_bala(chart.position_of(Planet.SUN), chart) == 0.0


def test_rating_bands():
    assert rating_for_percentage(140.0) == StrengthRating.VERY_STRONG
    assert rating_for_percentage(150.5) == StrengthRating.EXTREMELY_STRONG
    # Meeting the requirement exactly is Average, anything beyond is Above Average
    assert rating_for_percentage(100.0) == StrengthRating.AVERAGE
    assert rating_for_percentage(100.01) == StrengthRating.ABOVE_AVERAGE
    assert rating_for_percentage(10.0) == StrengthRating.EXTREMELY_WEAK


def test_calculate_shadbala(sample_chart):
    analysis = calculate_shadbala(sample_chart)
    assert set(analysis.strengths) == set(MAIN_PLANETS)

    sun = analysis.strengths[Planet.SUN]
    assert sun.naisargika == 60.0
    assert sun.required_rupas == 6.5
    assert sun.total_rupas == pytest.approx(sun.total_virupas / 60.0)
    assert sun.sthana.uccha == pytest.approx(60.0)

    ranked = analysis.by_strength
    assert ranked[0].planet == analysis.strongest_planet
    assert ranked[-1].planet == analysis.weakest_planet
    assert analysis.overall_score > 0


def test_weak_planets_fall_short_of_required(sample_chart):
    analysis = calculate_shadbala(sample_chart)
    for planet in analysis.weak_planets:
        strength = analysis.strengths[planet]
        assert not strength.is_strong
        assert strength.total_rupas < strength.required_rupas
