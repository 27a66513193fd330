"""
Ashtakavarga bindu tables.

Each of the seven planets receives bindus from eight contributors (the
seven planets and the lagna). A contributor in sign S gives a bindu to
every sign (S + h - 1) for the houses h listed in its row.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from vedic_math import sign_index
from vedic_types import CLASSICAL_PLANETS, Planet, VedicChart, ZodiacSign

LAGNA = "Lagna"
CONTRIBUTORS: Tuple[str, ...] = tuple(p.value for p in CLASSICAL_PLANETS) + (LAGNA,)

# planet -> contributor -> houses (from the contributor) that receive a bindu
BINDU_HOUSES: Dict[Planet, Dict[str, Tuple[int, ...]]] = {
    Planet.SUN: {
        "Sun": (1, 2, 4, 7, 8, 9, 10, 11),
        "Moon": (3, 6, 10, 11),
        "Mars": (1, 2, 4, 7, 8, 9, 10, 11),
        "Mercury": (3, 5, 6, 9, 10, 11, 12),
        "Jupiter": (5, 6, 9, 11),
        "Venus": (6, 7, 12),
        "Saturn": (1, 2, 4, 7, 8, 9, 10, 11),
        LAGNA: (3, 4, 6, 10, 11, 12),
    },
    Planet.MOON: {
        "Sun": (3, 6, 7, 8, 10, 11),
        "Moon": (1, 3, 6, 7, 10, 11),
        "Mars": (2, 3, 5, 6, 9, 10, 11),
        "Mercury": (1, 3, 4, 5, 7, 8, 10, 11),
        "Jupiter": (1, 4, 7, 8, 10, 11, 12),
        "Venus": (3, 4, 5, 7, 9, 10, 11),
        "Saturn": (3, 5, 6, 11),
        LAGNA: (3, 6, 10, 11),
    },
    Planet.MARS: {
        "Sun": (3, 5, 6, 10, 11),
        "Moon": (3, 6, 11),
        "Mars": (1, 2, 4, 7, 8, 10, 11),
        "Mercury": (3, 5, 6, 11),
        "Jupiter": (6, 10, 11, 12),
        "Venus": (6, 8, 11, 12),
        "Saturn": (1, 4, 7, 8, 9, 10, 11),
        LAGNA: (1, 3, 6, 10, 11),
    },
    Planet.MERCURY: {
        "Sun": (5, 6, 9, 11, 12),
        "Moon": (2, 4, 6, 8, 10, 11),
        "Mars": (1, 2, 4, 7, 8, 9, 10, 11),
        "Mercury": (1, 3, 5, 6, 9, 10, 11, 12),
        "Jupiter": (6, 8, 11, 12),
        "Venus": (1, 2, 3, 4, 5, 8, 9, 11),
        "Saturn": (1, 2, 4, 7, 8, 9, 10, 11),
        LAGNA: (1, 2, 4, 6, 8, 10, 11),
    },
    Planet.JUPITER: {
        "Sun": (1, 2, 3, 4, 7, 8, 9, 10, 11),
        "Moon": (2, 5, 7, 9, 11),
        "Mars": (1, 2, 4, 7, 8, 10, 11),
        "Mercury": (1, 2, 4, 5, 6, 9, 10, 11),
        "Jupiter": (1, 2, 3, 4, 7, 8, 10, 11),
        "Venus": (2, 5, 6, 9, 10, 11),
        "Saturn": (3, 5, 6, 12),
        LAGNA: (1, 2, 4, 5, 6, 7, 9, 10, 11),
    },
    Planet.VENUS: {
        "Sun": (8, 11, 12),
        "Moon": (1, 2, 3, 4, 5, 8, 9, 11, 12),
        "Mars": (3, 5, 6, 9, 11, 12),
        "Mercury": (3, 5, 6, 9, 11),
        "Jupiter": (5, 8, 9, 10, 11),
        "Venus": (1, 2, 3, 4, 5, 8, 9, 10, 11),
        "Saturn": (3, 4, 5, 8, 9, 10, 11),
        LAGNA: (1, 2, 3, 4, 5, 8, 9, 11),
    },
    Planet.SATURN: {
        "Sun": (1, 2, 4, 7, 8, 10, 11),
        "Moon": (3, 6, 11),
        "Mars": (3, 5, 6, 10, 11, 12),
        "Mercury": (6, 8, 9, 10, 11, 12),
        "Jupiter": (5, 6, 11, 12),
        "Venus": (6, 11, 12),
        "Saturn": (3, 5, 6, 11),
        LAGNA: (1, 3, 4, 6, 10, 11),
    },
}

SAV_CAP = 56


def interpret_bindus(bindus: int) -> str:
    if bindus >= 5:
        return "Favourable"
    if bindus == 4:
        return "Moderate"
    return "Weak"


@dataclass(frozen=True)
class TransitScore:
    planet: Planet
    sign: ZodiacSign
    bindus: int
    sav: int

    @property
    def rating(self) -> float:
        """0..1 blend of the planet's own bindus and the sign's total."""
        return 0.6 * self.bindus / 8.0 + 0.4 * min(self.sav, SAV_CAP) / float(SAV_CAP)

    @property
    def interpretation(self) -> str:
        return interpret_bindus(self.bindus)


@dataclass(frozen=True)
class Ashtakavarga:
    # planet -> 12 bindu counts indexed by sign (Aries = 0)
    bhinna: Dict[Planet, Tuple[int, ...]]

    @property
    def sarva(self) -> Tuple[int, ...]:
        return tuple(sum(row[i] for row in self.bhinna.values()) for i in range(12))

    @property
    def total(self) -> int:
        return sum(self.sarva)

    def bindus(self, planet: Planet, sign: ZodiacSign) -> int:
        row = self.bhinna.get(planet)
        if row is None:
            return 0
        return row[sign.ordinal]

    def sav(self, sign: ZodiacSign) -> int:
        return self.sarva[sign.ordinal]

    def transit_score(self, planet: Planet, sign: ZodiacSign) -> TransitScore:
        return TransitScore(planet=planet, sign=sign, bindus=self.bindus(planet, sign), sav=self.sav(sign))


def contributor_signs(chart: VedicChart) -> Dict[str, int]:
    signs = {LAGNA: sign_index(chart.ascendant)}
    for planet in CLASSICAL_PLANETS:
        position = chart.position_of(planet)
        if position is not None:
            signs[planet.value] = sign_index(position.longitude)
    return signs


def bhinnashtakavarga(planet: Planet, signs: Dict[str, int]) -> Tuple[int, ...]:
    row = [0] * 12
    for contributor, houses in BINDU_HOUSES[planet].items():
        origin = signs.get(contributor)
        if origin is None:
            continue
        for house in houses:
            row[(origin + house - 1) % 12] += 1
    return tuple(row)


def calculate_ashtakavarga(chart: VedicChart) -> Ashtakavarga:
    signs = contributor_signs(chart)
    return Ashtakavarga(bhinna={planet: bhinnashtakavarga(planet, signs) for planet in BINDU_HOUSES})
