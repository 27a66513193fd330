"""
Shadbala, the six-fold planetary strength.

Each component is computed in virupas (60 virupas = 1 rupa):

1. Sthana (positional): uccha, saptavargaja, ojhayugma, kendradi, drekkana
2. Dig (directional)
3. Kala (temporal): nathonnatha, paksha, tribhaga, hora/dina lords, ayana, yuddha
4. Chesta (motional)
5. Naisargika (natural)
6. Drik (aspectual)

Every table lookup has a fallback, so no planet ever raises here.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from conditions import WAR_BRIGHTNESS, war_winner
from divisional import DivisionType, cached_divisional_chart
from vedic_math import angular_separation, degree_in_sign, normalize_degree
from vedic_types import MAIN_PLANETS, Planet, PlanetPosition, VedicChart, ZodiacSign

VIRUPAS_PER_RUPA = 60.0
DEFAULT_REQUIRED_RUPAS = 5.0

EXALTATION_DEGREES: Dict[Planet, float] = {
    Planet.SUN: 10.0,
    Planet.MOON: 33.0,
    Planet.MARS: 298.0,
    Planet.MERCURY: 165.0,
    Planet.JUPITER: 95.0,
    Planet.VENUS: 357.0,
    Planet.SATURN: 200.0,
    Planet.RAHU: 50.0,
    Planet.KETU: 230.0,
}

DEBILITATION_DEGREES: Dict[Planet, float] = {
    planet: normalize_degree(degree + 180.0) for planet, degree in EXALTATION_DEGREES.items()
}

NATURAL_STRENGTH: Dict[Planet, float] = {
    Planet.SUN: 60.0,
    Planet.MOON: 51.43,
    Planet.VENUS: 42.86,
    Planet.JUPITER: 34.29,
    Planet.MERCURY: 25.71,
    Planet.MARS: 17.14,
    Planet.SATURN: 8.57,
    Planet.RAHU: 8.57,
    Planet.KETU: 8.57,
}

REQUIRED_RUPAS: Dict[Planet, float] = {
    Planet.SUN: 6.5,
    Planet.MOON: 6.0,
    Planet.MARS: 5.0,
    Planet.MERCURY: 7.0,
    Planet.JUPITER: 6.5,
    Planet.VENUS: 5.5,
    Planet.SATURN: 5.0,
    Planet.RAHU: 4.0,
    Planet.KETU: 4.0,
}

# House of full directional strength
DIG_BALA_HOUSES: Dict[Planet, int] = {
    Planet.SUN: 10,
    Planet.MOON: 4,
    Planet.MARS: 10,
    Planet.MERCURY: 1,
    Planet.JUPITER: 1,
    Planet.VENUS: 4,
    Planet.SATURN: 7,
    Planet.RAHU: 10,
    Planet.KETU: 4,
}

EXALTATION_SIGNS: Dict[Planet, Tuple[ZodiacSign, ...]] = {
    Planet.SUN: (ZodiacSign.ARIES,),
    Planet.MOON: (ZodiacSign.TAURUS,),
    Planet.MARS: (ZodiacSign.CAPRICORN,),
    Planet.MERCURY: (ZodiacSign.VIRGO,),
    Planet.JUPITER: (ZodiacSign.CANCER,),
    Planet.VENUS: (ZodiacSign.PISCES,),
    Planet.SATURN: (ZodiacSign.LIBRA,),
    Planet.RAHU: (ZodiacSign.TAURUS, ZodiacSign.GEMINI),
    Planet.KETU: (ZodiacSign.SCORPIO, ZodiacSign.SAGITTARIUS),
}

MOOLATRIKONA_SIGNS: Dict[Planet, ZodiacSign] = {
    Planet.SUN: ZodiacSign.LEO,
    Planet.MOON: ZodiacSign.TAURUS,
    Planet.MARS: ZodiacSign.ARIES,
    Planet.MERCURY: ZodiacSign.VIRGO,
    Planet.JUPITER: ZodiacSign.SAGITTARIUS,
    Planet.VENUS: ZodiacSign.LIBRA,
    Planet.SATURN: ZodiacSign.AQUARIUS,
}

FRIENDS: Dict[Planet, Tuple[Planet, ...]] = {
    Planet.SUN: (Planet.MOON, Planet.MARS, Planet.JUPITER),
    Planet.MOON: (Planet.SUN, Planet.MERCURY),
    Planet.MARS: (Planet.SUN, Planet.MOON, Planet.JUPITER),
    Planet.MERCURY: (Planet.SUN, Planet.VENUS),
    Planet.JUPITER: (Planet.SUN, Planet.MOON, Planet.MARS),
    Planet.VENUS: (Planet.MERCURY, Planet.SATURN),
    Planet.SATURN: (Planet.MERCURY, Planet.VENUS),
}

ENEMIES: Dict[Planet, Tuple[Planet, ...]] = {
    Planet.SUN: (Planet.VENUS, Planet.SATURN),
    Planet.MOON: (),
    Planet.MARS: (Planet.MERCURY,),
    Planet.MERCURY: (Planet.MOON,),
    Planet.JUPITER: (Planet.MERCURY, Planet.VENUS),
    Planet.VENUS: (Planet.SUN, Planet.MOON),
    Planet.SATURN: (Planet.SUN, Planet.MOON, Planet.MARS),
}

# Divisional charts used for saptavargaja and their weights
VARGA_WEIGHTS: Tuple[Tuple[DivisionType, float], ...] = (
    (DivisionType.D1, 1.0),
    (DivisionType.D2, 0.5),
    (DivisionType.D3, 0.5),
    (DivisionType.D9, 1.0),
    (DivisionType.D12, 0.5),
    (DivisionType.D30, 0.5),
)

# Monday first, matching datetime.weekday()
WEEKDAY_LORDS: Tuple[Planet, ...] = (
    Planet.MOON, Planet.MARS, Planet.MERCURY, Planet.JUPITER,
    Planet.VENUS, Planet.SATURN, Planet.SUN,
)
HORA_SEQUENCE: Tuple[Planet, ...] = (
    Planet.SUN, Planet.VENUS, Planet.MERCURY, Planet.MOON,
    Planet.SATURN, Planet.JUPITER, Planet.MARS,
)

PAKSHA_BENEFICS = frozenset({Planet.JUPITER, Planet.VENUS, Planet.MOON, Planet.MERCURY})
MALE_PLANETS = frozenset({Planet.SUN, Planet.MARS, Planet.JUPITER})
FEMALE_PLANETS = frozenset({Planet.MOON, Planet.VENUS})
NEUTER_PLANETS = frozenset({Planet.MERCURY, Planet.SATURN})


class Relationship(str, Enum):
    FRIEND = "Friend"
    NEUTRAL = "Neutral"
    ENEMY = "Enemy"


class StrengthRating(str, Enum):
    EXTREMELY_WEAK = "Extremely Weak"
    WEAK = "Weak"
    BELOW_AVERAGE = "Below Average"
    AVERAGE = "Average"
    ABOVE_AVERAGE = "Above Average"
    STRONG = "Strong"
    VERY_STRONG = "Very Strong"
    EXTREMELY_STRONG = "Extremely Strong"


# (inclusive upper bound of percentage-of-required, rating); anything above the last is EXTREMELY_STRONG
RATING_BANDS: Tuple[Tuple[float, StrengthRating], ...] = (
    (50.0, StrengthRating.EXTREMELY_WEAK),
    (70.0, StrengthRating.WEAK),
    (85.0, StrengthRating.BELOW_AVERAGE),
    (100.0, StrengthRating.AVERAGE),
    (115.0, StrengthRating.ABOVE_AVERAGE),
    (130.0, StrengthRating.STRONG),
    (150.0, StrengthRating.VERY_STRONG),
)


def rating_for_percentage(percentage: float) -> StrengthRating:
    for upper, rating in RATING_BANDS:
        if percentage <= upper:
            return rating
    return StrengthRating.EXTREMELY_STRONG


def relationship(planet: Planet, sign_lord: Planet) -> Relationship:
    if sign_lord in FRIENDS.get(planet, ()):
        return Relationship.FRIEND
    if sign_lord in ENEMIES.get(planet, ()):
        return Relationship.ENEMY
    return Relationship.NEUTRAL


@dataclass(frozen=True)
class SthanaBala:
    uccha: float
    saptavargaja: float
    ojhayugma: float
    kendradi: float
    drekkana: float

    @property
    def total(self) -> float:
        return self.uccha + self.saptavargaja + self.ojhayugma + self.kendradi + self.drekkana


@dataclass(frozen=True)
class KalaBala:
    nathonnatha: float
    paksha: float
    tribhaga: float
    hora_adi: float
    ayana: float
    yuddha: float

    @property
    def total(self) -> float:
        return self.nathonnatha + self.paksha + self.tribhaga + self.hora_adi + self.ayana + self.yuddha


@dataclass(frozen=True)
class PlanetShadbala:
    planet: Planet
    sthana: SthanaBala
    dig: float
    kala: KalaBala
    chesta: float
    naisargika: float
    drik: float
    required_rupas: float

    @property
    def total_virupas(self) -> float:
        return self.sthana.total + self.dig + self.kala.total + self.chesta + self.naisargika + self.drik

    @property
    def total_rupas(self) -> float:
        return self.total_virupas / VIRUPAS_PER_RUPA

    @property
    def percentage_of_required(self) -> float:
        return self.total_rupas / self.required_rupas * 100.0

    @property
    def rating(self) -> StrengthRating:
        return rating_for_percentage(self.percentage_of_required)

    @property
    def is_strong(self) -> bool:
        return self.total_rupas >= self.required_rupas


@dataclass(frozen=True)
class ShadbalaAnalysis:
    strengths: Dict[Planet, PlanetShadbala]

    @property
    def by_strength(self) -> List[PlanetShadbala]:
        return sorted(self.strengths.values(), key=lambda s: s.total_rupas, reverse=True)

    @property
    def strongest_planet(self) -> Optional[Planet]:
        ranked = self.by_strength
        return ranked[0].planet if ranked else None

    @property
    def weakest_planet(self) -> Optional[Planet]:
        ranked = self.by_strength
        return ranked[-1].planet if ranked else None

    @property
    def overall_score(self) -> float:
        """Mean percentage-of-required across the analysed planets."""
        if not self.strengths:
            return 0.0
        return sum(s.percentage_of_required for s in self.strengths.values()) / len(self.strengths)

    @property
    def weak_planets(self) -> List[Planet]:
        return [s.planet for s in self.strengths.values() if not s.is_strong]


# Sthana

def uccha_bala(planet: Planet, longitude: float) -> float:
    """60 at the exaltation degree, 0 at debilitation."""
    debilitation = DEBILITATION_DEGREES.get(planet)
    if debilitation is None:
        return 0.0
    return angular_separation(longitude, debilitation) / 180.0 * 60.0


def varga_dignity(planet: Planet, sign: ZodiacSign) -> float:
    if sign in EXALTATION_SIGNS.get(planet, ()):
        return 20.0
    if sign.ruler == planet:
        return 30.0
    if MOOLATRIKONA_SIGNS.get(planet) == sign:
        return 22.5
    rel = relationship(planet, sign.ruler)
    if rel == Relationship.FRIEND:
        return 15.0
    if rel == Relationship.ENEMY:
        return 7.5
    return 10.0


def saptavargaja_bala(planet: Planet, chart: VedicChart) -> float:
    total = 0.0
    for division, weight in VARGA_WEIGHTS:
        position = cached_divisional_chart(chart, division).position_of(planet)
        if position is not None:
            total += varga_dignity(planet, position.sign) * weight
    return total


def ojhayugma_bala(planet: Planet, sign: ZodiacSign) -> float:
    if planet in FEMALE_PLANETS:
        return 0.0 if sign.is_odd else 15.0
    return 15.0 if sign.is_odd else 0.0


def kendradi_bala(house: int) -> float:
    if house in (1, 4, 7, 10):
        return 60.0
    if house in (2, 5, 8, 11):
        return 30.0
    return 15.0


def drekkana_bala(planet: Planet, longitude: float) -> float:
    decanate = min(int(degree_in_sign(longitude) / 10.0), 2) + 1
    if planet in MALE_PLANETS and decanate == 1:
        return 15.0
    if planet in NEUTER_PLANETS and decanate == 2:
        return 15.0
    if planet in FEMALE_PLANETS and decanate == 3:
        return 15.0
    return 0.0


def sthana_bala(position: PlanetPosition, chart: VedicChart) -> SthanaBala:
    return SthanaBala(
        uccha=uccha_bala(position.planet, position.longitude),
        saptavargaja=saptavargaja_bala(position.planet, chart),
        ojhayugma=ojhayugma_bala(position.planet, position.sign),
        kendradi=kendradi_bala(position.house),
        drekkana=drekkana_bala(position.planet, position.longitude),
    )


# Dig

def dig_bala(planet: Planet, house: int) -> float:
    strong_house = DIG_BALA_HOUSES.get(planet)
    if strong_house is None:
        return 0.0
    distance = abs(house - strong_house)
    if distance > 6:
        distance = 12 - distance
    return (6 - distance) * 10.0


# Kala

def is_daytime(hour: int) -> bool:
    return 6 <= hour <= 18


def nathonnatha_bala(planet: Planet, hour: int) -> float:
    day = is_daytime(hour)
    if planet == Planet.MERCURY:
        return 60.0
    if planet in (Planet.SUN, Planet.JUPITER, Planet.VENUS, Planet.KETU):
        return 60.0 if day else 0.0
    if planet in (Planet.MOON, Planet.MARS, Planet.SATURN, Planet.RAHU):
        return 0.0 if day else 60.0
    return 30.0


def paksha_bala(planet: Planet, sun_longitude: Optional[float], moon_longitude: Optional[float]) -> float:
    if sun_longitude is None or moon_longitude is None:
        return 30.0
    elongation = normalize_degree(moon_longitude - sun_longitude)
    shukla = elongation < 180.0
    phase = (elongation if shukla else 360.0 - elongation) / 180.0 * 60.0
    benefic = planet in PAKSHA_BENEFICS
    if benefic == shukla:
        return phase
    return 60.0 - phase


def tribhaga_lord(hour: int) -> Planet:
    if is_daytime(hour):
        if hour < 10:
            return Planet.MERCURY
        if hour < 14:
            return Planet.SUN
        return Planet.SATURN
    if 18 <= hour < 22:
        return Planet.MOON
    if hour >= 22 or hour < 2:
        return Planet.VENUS
    return Planet.MARS


def tribhaga_bala(planet: Planet, hour: int) -> float:
    return 60.0 if planet == tribhaga_lord(hour) else 0.0


def day_lord(weekday: int) -> Planet:
    return WEEKDAY_LORDS[weekday]


def hora_lord(weekday: int, hour: int) -> Planet:
    start = HORA_SEQUENCE.index(day_lord(weekday))
    horas_since_sunrise = hour - 6 if hour >= 6 else hour + 18
    return HORA_SEQUENCE[(start + horas_since_sunrise) % 7]


def hora_adi_bala(planet: Planet, weekday: int, hour: int, moon_sign: Optional[ZodiacSign]) -> float:
    bala = 0.0
    if planet == day_lord(weekday):
        bala += 15.0
    if planet == hora_lord(weekday, hour):
        bala += 15.0
    if moon_sign is not None and planet == moon_sign.ruler:
        bala += 10.0
    if planet == Planet.SUN:
        bala += 5.0
    return bala


def ayana_bala(planet: Planet, longitude: float) -> float:
    # Declination approximated from longitude alone
    declination = 23.45 * math.sin(math.radians(longitude - 80.0))
    if planet in (Planet.SUN, Planet.MARS, Planet.JUPITER):
        return 30.0 + declination
    if planet in (Planet.MOON, Planet.VENUS, Planet.SATURN):
        return 30.0 - declination
    return 30.0


def yuddha_bala(position: PlanetPosition, chart: VedicChart) -> float:
    """+30 to the winner and -30 to the loser of a planetary war, else 0."""
    if position.planet not in WAR_BRIGHTNESS:
        return 0.0
    for other in chart.planet_positions:
        if other.planet == position.planet or other.planet not in WAR_BRIGHTNESS:
            continue
        distance = abs(position.longitude - other.longitude)
        if distance <= 1.0 or distance >= 359.0:
            return 30.0 if war_winner(position.planet, other.planet) == position.planet else -30.0
    return 0.0


def kala_bala(position: PlanetPosition, chart: VedicChart) -> KalaBala:
    local = chart.birth_data.local_datetime()
    sun = chart.position_of(Planet.SUN)
    moon = chart.position_of(Planet.MOON)
    planet = position.planet
    return KalaBala(
        nathonnatha=nathonnatha_bala(planet, local.hour),
        paksha=paksha_bala(planet,
                           sun.longitude if sun is not None else None,
                           moon.longitude if moon is not None else None),
        tribhaga=tribhaga_bala(planet, local.hour),
        hora_adi=hora_adi_bala(planet, local.weekday(), local.hour,
                               moon.sign if moon is not None else None),
        ayana=ayana_bala(planet, position.longitude),
        yuddha=yuddha_bala(position, chart),
    )


# Chesta, Drik

def chesta_bala(position: PlanetPosition) -> float:
    if position.planet in (Planet.SUN, Planet.MOON):
        return 0.0
    if position.is_retrograde:
        return 60.0
    if position.speed < 0.01:
        return 50.0
    if position.speed < 0.5:
        return 40.0
    if position.speed < 1.0:
        return 30.0
    return 20.0


def drik_strength(angle: float) -> float:
    if angle <= 10.0:
        return 1.0
    if 55.0 <= angle <= 65.0:
        return 0.25
    if 85.0 <= angle <= 95.0:
        return 0.5
    if 115.0 <= angle <= 125.0:
        return 0.75
    if 170.0 <= angle <= 180.0:
        return 0.5
    return 0.0


def _is_drik_benefic(position: PlanetPosition) -> bool:
    if position.planet in (Planet.JUPITER, Planet.VENUS, Planet.MERCURY):
        return True
    return position.planet == Planet.MOON and not position.is_retrograde


def drik_bala(position: PlanetPosition, chart: VedicChart) -> float:
    bala = 0.0
    for other in chart.planet_positions:
        if other.planet == position.planet:
            continue
        strength = drik_strength(angular_separation(position.longitude, other.longitude))
        if strength == 0:
            continue
        bala += strength * 15.0 if _is_drik_benefic(other) else -strength * 10.0
    return max(-30.0, min(bala, 60.0))


def planet_shadbala(position: PlanetPosition, chart: VedicChart) -> PlanetShadbala:
    planet = position.planet
    return PlanetShadbala(
        planet=planet,
        sthana=sthana_bala(position, chart),
        dig=dig_bala(planet, position.house),
        kala=kala_bala(position, chart),
        chesta=chesta_bala(position),
        naisargika=NATURAL_STRENGTH.get(planet, 0.0),
        drik=drik_bala(position, chart),
        required_rupas=REQUIRED_RUPAS.get(planet, DEFAULT_REQUIRED_RUPAS),
    )


def calculate_shadbala(chart: VedicChart) -> ShadbalaAnalysis:
    """Shadbala for the nine main planets present in the chart."""
    strengths = {}
    for position in chart.planet_positions:
        if position.planet in MAIN_PLANETS:
            strengths[position.planet] = planet_shadbala(position, chart)
    return ShadbalaAnalysis(strengths=strengths)
