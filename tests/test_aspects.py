import pytest

from aspects import (
    AspectNature,
    AspectType,
    aspects_between,
    aspects_for_planet,
    calculate_aspects,
    describe_strength,
    detect_yogas,
    drishti_offsets,
    graha_drishti,
    planets_aspecting_house,
    strength_from_orb,
)
from config import OrbConfiguration
from conftest import DEFAULT_LONGITUDES, make_chart
from vedic_types import Planet, PlanetPosition, ZodiacSign


def _pos(planet, longitude, speed=0.0):
    return PlanetPosition(planet, longitude, speed=speed)


def test_strength_falls_linearly_with_orb():
    assert strength_from_orb(0.0, 8.0) == pytest.approx(1.0)
    assert strength_from_orb(4.0, 8.0) == pytest.approx(0.5)
    assert strength_from_orb(8.0, 8.0) == 0.0


@pytest.mark.parametrize("strength,label", [
    (0.95, "Exact"),
    (0.75, "Very Strong"),
    (0.5, "Strong"),
    (0.3, "Moderate"),
    (0.1, "Weak"),
])
def test_describe_strength(strength, label):
    assert describe_strength(strength) == label


def test_trine_with_pair_orb():
    # Sun (luminary 10) and Saturn (social 7) -> 8.5 degrees
    found = aspects_between(_pos(Planet.SUN, 0.0), _pos(Planet.SATURN, 128.0))
    assert [a.aspect_type for a in found] == [AspectType.TRINE]
    assert found[0].orb == pytest.approx(8.0)
    assert found[0].nature == AspectNature.HARMONIOUS

    assert aspects_between(_pos(Planet.SUN, 0.0), _pos(Planet.SATURN, 129.0)) == []


def test_conjunction_gets_bonus_orb():
    # Mercury and Venus: personal 8 + conjunction bonus 2
    found = aspects_between(_pos(Planet.MERCURY, 0.0), _pos(Planet.VENUS, 9.5))
    assert found[0].aspect_type == AspectType.CONJUNCTION


def test_minor_aspects_are_opt_in():
    pair = (_pos(Planet.MARS, 0.0), _pos(Planet.VENUS, 150.0))
    assert aspects_between(*pair) == []
    found = aspects_between(*pair, OrbConfiguration(include_minor_aspects=True))
    assert [a.aspect_type for a in found] == [AspectType.QUINCUNX]


def test_applying_versus_separating():
    applying = aspects_between(_pos(Planet.MOON, 0.0, 1.0), _pos(Planet.SATURN, 245.0, 0.0))
    assert applying[0].is_applying
    separating = aspects_between(_pos(Planet.MOON, 0.0, 1.0), _pos(Planet.SATURN, 115.0, 0.0))
    assert not separating[0].is_applying


def test_calculate_aspects_sorted_by_strength(sample_chart):
    aspects = calculate_aspects(sample_chart.planet_positions)
    strengths = [a.strength for a in aspects]
    assert strengths == sorted(strengths, reverse=True)
    # Rahu and Ketu are always exactly opposed
    assert any(
        a.aspect_type == AspectType.OPPOSITION and a.involves(Planet.RAHU) and a.involves(Planet.KETU)
        for a in aspects
    )


def test_drishti_offsets():
    assert drishti_offsets(Planet.MARS) == (4, 7, 8)
    assert drishti_offsets(Planet.JUPITER) == (5, 7, 9)
    assert drishti_offsets(Planet.SATURN) == (3, 7, 10)
    assert drishti_offsets(Planet.SUN) == (7,)


def test_graha_drishti(sample_chart):
    drishtis = graha_drishti(sample_chart)
    saturn = [d for d in drishtis if d.planet == Planet.SATURN]
    # Saturn in Capricorn aspects Pisces, Cancer and Libra
    assert {d.target_sign for d in saturn} == {ZodiacSign.PISCES, ZodiacSign.CANCER, ZodiacSign.LIBRA}
    seventh = next(d for d in saturn if d.offset == 7)
    assert seventh.aspected_planets == (Planet.MOON,)
    assert seventh.target_house == 4
    assert not seventh.is_special
    assert Planet.SATURN in planets_aspecting_house(sample_chart, 4)


def test_budha_aditya_and_gaja_kesari():
    longitudes = dict(DEFAULT_LONGITUDES)
    longitudes[Planet.MERCURY] = 12.0
    longitudes[Planet.JUPITER] = 190.0   # 90 degrees from the Moon
    chart = make_chart(longitudes=longitudes)
    names = [y.name for y in detect_yogas(chart)]
    assert "Budha-Aditya Yoga" in names
    assert "Gaja-Kesari Yoga" in names


def test_inauspicious_yoga_flagged():
    longitudes = dict(DEFAULT_LONGITUDES)
    longitudes[Planet.JUPITER] = 332.0
    chart = make_chart(longitudes=longitudes)
    guru_chandal = next(y for y in detect_yogas(chart) if y.name == "Guru-Chandal Yoga")
    assert not guru_chandal.is_auspicious
    assert 0.0 < guru_chandal.strength <= 1.0


def test_aspects_for_planet(sample_chart):
    aspects = calculate_aspects(sample_chart.planet_positions)
    for_rahu = aspects_for_planet(aspects, Planet.RAHU)
    assert for_rahu
    assert all(a.involves(Planet.RAHU) for a in for_rahu)
