from conditions import (
    CombustionStatus,
    RetrogradeStatus,
    analyze_conditions,
    combustion_status,
    detect_planetary_wars,
    retrograde_status,
    war_winner,
)
from conftest import DEFAULT_LONGITUDES, DEFAULT_SPEEDS, make_chart
from vedic_types import Planet, PlanetPosition


def test_retrograde_status_rules():
    assert retrograde_status(Planet.SUN, -1.0) == RetrogradeStatus.DIRECT
    assert retrograde_status(Planet.RAHU, 0.05) == RetrogradeStatus.RETROGRADE
    assert retrograde_status(Planet.MARS, -0.3) == RetrogradeStatus.RETROGRADE
    assert retrograde_status(Planet.MARS, 0.3) == RetrogradeStatus.DIRECT
    assert retrograde_status(Planet.SATURN, -0.01) == RetrogradeStatus.STATIONARY_RETROGRADE
    assert retrograde_status(Planet.SATURN, 0.01) == RetrogradeStatus.STATIONARY_DIRECT


def test_combustion_bands():
    assert combustion_status(Planet.MARS, 0.1) == CombustionStatus.CAZIMI
    assert combustion_status(Planet.MARS, 10.0) == CombustionStatus.FULL
    assert combustion_status(Planet.MARS, 20.0) == CombustionStatus.PARTIAL
    assert combustion_status(Planet.MARS, 30.0) == CombustionStatus.NOT_COMBUST


def test_retrograde_mercury_has_tighter_full_orb():
    assert combustion_status(Planet.MERCURY, 13.0) == CombustionStatus.FULL
    assert combustion_status(Planet.MERCURY, 13.0, retrograde=True) == CombustionStatus.PARTIAL


def test_nodes_never_combust():
    assert combustion_status(Planet.RAHU, 0.0) == CombustionStatus.NOT_COMBUST


def test_war_winner_by_brightness():
    assert war_winner(Planet.MARS, Planet.VENUS) == Planet.VENUS
    assert war_winner(Planet.JUPITER, Planet.SATURN) == Planet.JUPITER
    assert war_winner(Planet.MARS, Planet.MARS) == Planet.MARS


def test_detect_planetary_wars_only_among_five():
    positions = [
        PlanetPosition(Planet.MARS, 100.0),
        PlanetPosition(Planet.SATURN, 100.8),
        PlanetPosition(Planet.SUN, 100.5),
        PlanetPosition(Planet.VENUS, 359.5),
        PlanetPosition(Planet.JUPITER, 0.3),
    ]
    wars = detect_planetary_wars(positions)
    pairs = {frozenset((w.planet1, w.planet2)) for w in wars}
    assert pairs == {frozenset((Planet.MARS, Planet.SATURN)), frozenset((Planet.VENUS, Planet.JUPITER))}
    mars_saturn = next(w for w in wars if w.winner == Planet.MARS)
    assert mars_saturn.loser == Planet.SATURN


def test_analyze_conditions():
    longitudes = dict(DEFAULT_LONGITUDES)
    longitudes[Planet.MERCURY] = 15.0   # 5 degrees from the Sun
    longitudes[Planet.VENUS] = 200.5    # war with Mars
    speeds = dict(DEFAULT_SPEEDS)
    speeds[Planet.MARS] = -0.4
    chart = make_chart(longitudes=longitudes, speeds=speeds)

    analysis = analyze_conditions(chart)
    assert Planet.MERCURY in analysis.combust_planets
    assert Planet.MARS in analysis.retrograde_planets
    assert Planet.RAHU in analysis.retrograde_planets
    assert analysis.condition_of(Planet.SUN).distance_from_sun is None

    mars = analysis.condition_of(Planet.MARS)
    assert mars.in_planetary_war
    assert mars.war_opponent == Planet.VENUS
    assert mars.is_war_winner is False
    assert mars.overall_strength == 0.5

    mercury = analysis.condition_of(Planet.MERCURY)
    assert mercury.overall_strength == CombustionStatus.FULL.strength
