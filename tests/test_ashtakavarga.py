import pytest

from ashtakavarga import (
    BINDU_HOUSES,
    LAGNA,
    TransitScore,
    bhinnashtakavarga,
    calculate_ashtakavarga,
    interpret_bindus,
)
from conftest import make_chart
from vedic_types import CLASSICAL_PLANETS, Planet, ZodiacSign


def test_table_totals():
    expected = {
        Planet.SUN: 48, Planet.MOON: 49, Planet.MARS: 39, Planet.MERCURY: 54,
        Planet.JUPITER: 56, Planet.VENUS: 52, Planet.SATURN: 39,
    }
    for planet, total in expected.items():
        assert sum(len(h) for h in BINDU_HOUSES[planet].values()) == total


@pytest.mark.parametrize("ascendant", [0.0, 77.0, 215.0, 359.0])
def test_sarva_total_is_always_337(ascendant):
    result = calculate_ashtakavarga(make_chart(ascendant=ascendant))
    assert result.total == 337
    assert len(result.sarva) == 12
    for planet in CLASSICAL_PLANETS:
        assert all(0 <= b <= 8 for b in result.bhinna[planet])


def test_bhinna_counts_houses_from_contributor():
    signs = {contributor: 0 for contributor in [p.value for p in CLASSICAL_PLANETS] + [LAGNA]}
    row = bhinnashtakavarga(Planet.SUN, signs)
    # Everyone in Aries: only Venus withholds its bindu from the 11th (Aquarius)
    assert row[10] == 7
    assert row[4] == 2
    assert sum(row) == 48


def test_transit_score():
    score = TransitScore(Planet.JUPITER, ZodiacSign.LEO, bindus=8, sav=56)
    assert score.rating == pytest.approx(1.0)
    assert score.interpretation == "Favourable"
    capped = TransitScore(Planet.JUPITER, ZodiacSign.LEO, bindus=0, sav=70)
    assert capped.rating == pytest.approx(0.4)
    assert interpret_bindus(4) == "Moderate"
    assert interpret_bindus(3) == "Weak"


def test_nodes_have_no_bindus(sample_chart):
    result = calculate_ashtakavarga(sample_chart)
    assert result.bindus(Planet.RAHU, ZodiacSign.ARIES) == 0
    score = result.transit_score(Planet.SATURN, ZodiacSign.LIBRA)
    assert score.sav == result.sav(ZodiacSign.LIBRA)
