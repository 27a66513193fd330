"""
Divisional (varga) charts.

Each division splits a sign into N parts and maps the part holding a
longitude onto a sign. Partition arithmetic is shared; only the
starting-sign rule differs between division types, and all those rules
live in starting_sign() so they can be audited side by side.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, List, Tuple

from vedic_math import DEGREES_PER_SIGN, degree_in_sign, houses_between, normalize_degree, sign_index
from vedic_types import Planet, PlanetPosition, VedicChart, ZodiacSign

# Largest value strictly inside a sign, so a rescaled position never spills into the next one
_MAX_IN_SIGN = DEGREES_PER_SIGN - 1e-9


class DivisionType(Enum):
    D1 = 1
    D2 = 2
    D3 = 3
    D4 = 4
    D7 = 7
    D9 = 9
    D10 = 10
    D12 = 12
    D16 = 16
    D20 = 20
    D24 = 24
    D27 = 27
    D30 = 30
    D40 = 40
    D45 = 45
    D60 = 60

    @property
    def parts(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return DIVISION_NAMES[self]


DIVISION_NAMES: Dict[DivisionType, str] = {
    DivisionType.D1: "Rashi",
    DivisionType.D2: "Hora",
    DivisionType.D3: "Drekkana",
    DivisionType.D4: "Chaturthamsa",
    DivisionType.D7: "Saptamsa",
    DivisionType.D9: "Navamsa",
    DivisionType.D10: "Dasamsa",
    DivisionType.D12: "Dwadasamsa",
    DivisionType.D16: "Shodasamsa",
    DivisionType.D20: "Vimsamsa",
    DivisionType.D24: "Chaturvimsamsa",
    DivisionType.D27: "Bhamsa",
    DivisionType.D30: "Trimsamsa",
    DivisionType.D40: "Khavedamsa",
    DivisionType.D45: "Akshavedamsa",
    DivisionType.D60: "Shashtyamsa",
}

# Trimsamsa parts are unequal: (upper bound of part, sign index)
TRIMSAMSA_ODD: Tuple[Tuple[float, int], ...] = (
    (5.0, 0),    # Aries, Mars
    (10.0, 10),  # Aquarius, Saturn
    (18.0, 8),   # Sagittarius, Jupiter
    (25.0, 2),   # Gemini, Mercury
    (30.0, 6),   # Libra, Venus
)
TRIMSAMSA_EVEN: Tuple[Tuple[float, int], ...] = (
    (5.0, 1),    # Taurus, Venus
    (12.0, 5),   # Virgo, Mercury
    (20.0, 11),  # Pisces, Jupiter
    (25.0, 9),   # Capricorn, Saturn
    (30.0, 7),   # Scorpio, Mars
)

# Signs advanced per part; 1 unless listed
PART_STEPS: Dict[DivisionType, int] = {
    DivisionType.D3: 4,
    DivisionType.D4: 3,
}


def starting_sign(sign: int, division: DivisionType) -> int:
    """
    Sign index from which the parts of `sign` are counted.

    Quality index is sign % 3 (0 movable, 1 fixed, 2 dual); an even
    index is an odd sign (Aries = 1).
    """
    quality = sign % 3
    odd = sign % 2 == 0

    if division in (DivisionType.D1, DivisionType.D3, DivisionType.D4, DivisionType.D12):
        return sign
    if division == DivisionType.D2:
        return 4 if odd else 3
    if division == DivisionType.D7:
        return sign if odd else (sign + 6) % 12
    if division == DivisionType.D9:
        return (sign + (0, 8, 4)[quality]) % 12
    if division == DivisionType.D10:
        return sign if odd else (sign + 8) % 12
    if division in (DivisionType.D16, DivisionType.D45):
        return (0, 4, 8)[quality]
    if division == DivisionType.D20:
        return (0, 8, 4)[quality]
    if division == DivisionType.D24:
        return 4 if odd else 3
    if division == DivisionType.D27:
        return (0, 3, 6, 9)[sign % 4]
    if division == DivisionType.D40:
        return 0 if odd else 6
    if division == DivisionType.D60:
        return sign if odd else (sign + 6) % 12
    raise ValueError(f"No starting-sign rule for {division}")


def _trimsamsa_longitude(sign: int, degree: float) -> float:
    table = TRIMSAMSA_ODD if sign % 2 == 0 else TRIMSAMSA_EVEN
    lower = 0.0
    for upper, target in table:
        if degree < upper or upper == DEGREES_PER_SIGN:
            rescaled = (degree - lower) / (upper - lower) * DEGREES_PER_SIGN
            return target * DEGREES_PER_SIGN + min(rescaled, _MAX_IN_SIGN)
        lower = upper
    raise AssertionError("unreachable: trimsamsa table covers the whole sign")


def divisional_longitude(longitude: float, division: DivisionType) -> float:
    """Map a D1 longitude into the given division."""
    longitude = normalize_degree(longitude)
    if division == DivisionType.D1:
        return longitude

    sign = sign_index(longitude)
    degree = degree_in_sign(longitude)

    if division == DivisionType.D30:
        return normalize_degree(_trimsamsa_longitude(sign, degree))

    parts = division.parts
    span = DEGREES_PER_SIGN / parts
    part = max(0, min(int(degree / span), parts - 1))

    start = starting_sign(sign, division)
    if division == DivisionType.D2 and sign % 2 == 0:
        # Odd signs run Leo then Cancer
        div_sign = (start - part) % 12
    else:
        div_sign = (start + part * PART_STEPS.get(division, 1)) % 12

    rescaled = (degree - part * span) / span * DEGREES_PER_SIGN
    return normalize_degree(div_sign * DEGREES_PER_SIGN + min(max(rescaled, 0.0), _MAX_IN_SIGN))


def divisional_sign(longitude: float, division: DivisionType) -> ZodiacSign:
    return ZodiacSign.from_longitude(divisional_longitude(longitude, division))


@dataclass(frozen=True)
class DivisionalChart:
    division: DivisionType
    ascendant: float
    planet_positions: Tuple[PlanetPosition, ...]

    @property
    def ascendant_sign(self) -> ZodiacSign:
        return ZodiacSign.from_longitude(self.ascendant)

    def position_of(self, planet: Planet):
        for position in self.planet_positions:
            if position.planet == planet:
                return position
        return None


def build_divisional_chart(chart: VedicChart, division: DivisionType) -> DivisionalChart:
    """
    Divisional chart of a natal chart.

    Houses are whole-sign from the divisional ascendant. Speed, and so
    the retrograde flag, carries over from D1.
    """
    ascendant = divisional_longitude(chart.ascendant, division)
    asc_sign = sign_index(ascendant)

    positions = []
    for position in chart.planet_positions:
        longitude = divisional_longitude(position.longitude, division)
        house = houses_between(asc_sign, sign_index(longitude))
        positions.append(position.moved_to(longitude, house))

    return DivisionalChart(division=division, ascendant=ascendant, planet_positions=tuple(positions))


@lru_cache(maxsize=512)
def cached_divisional_chart(chart: VedicChart, division: DivisionType) -> DivisionalChart:
    """Memoized build_divisional_chart; charts are immutable and hashable."""
    return build_divisional_chart(chart, division)


def divisional_charts_for(chart: VedicChart) -> Dict[DivisionType, DivisionalChart]:
    return {division: cached_divisional_chart(chart, division) for division in DivisionType}


def is_vargottama(longitude: float) -> bool:
    """Same sign in the Rashi (D1) and Navamsa (D9)."""
    return sign_index(longitude) == sign_index(divisional_longitude(longitude, DivisionType.D9))


def vargottama_planets(chart: VedicChart) -> List[Planet]:
    return [p.planet for p in chart.planet_positions if is_vargottama(p.longitude)]
