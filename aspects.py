"""
Planetary aspects.

Three passes over a chart:

- geometric aspects between every unordered planet pair, with a
  per-pair orb from OrbConfiguration
- graha drishti, the Vedic house-offset aspects (a lookup, not geometry)
- yoga detection over the aspect list against a fixed catalog
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from config import OrbConfiguration
from vedic_math import angular_separation, normalize_degree, orb, sign_index
from vedic_types import Planet, PlanetPosition, VedicChart, ZodiacSign


class AspectNature(str, Enum):
    HARMONIOUS = "Harmonious"
    CHALLENGING = "Challenging"
    VARIABLE = "Variable"


class AspectType(Enum):
    CONJUNCTION = ("Conjunction", 0.0, AspectNature.VARIABLE)
    SEXTILE = ("Sextile", 60.0, AspectNature.HARMONIOUS)
    SQUARE = ("Square", 90.0, AspectNature.CHALLENGING)
    TRINE = ("Trine", 120.0, AspectNature.HARMONIOUS)
    OPPOSITION = ("Opposition", 180.0, AspectNature.CHALLENGING)
    SEMI_SEXTILE = ("Semi-Sextile", 30.0, AspectNature.HARMONIOUS)
    SEMI_SQUARE = ("Semi-Square", 45.0, AspectNature.CHALLENGING)
    SESQUIQUADRATE = ("Sesquiquadrate", 135.0, AspectNature.CHALLENGING)
    QUINCUNX = ("Quincunx", 150.0, AspectNature.CHALLENGING)

    def __init__(self, label: str, angle: float, nature: AspectNature):
        self.label = label
        self.angle = angle
        self.nature = nature


MAJOR_ASPECTS: Tuple[AspectType, ...] = (
    AspectType.CONJUNCTION, AspectType.SEXTILE, AspectType.SQUARE,
    AspectType.TRINE, AspectType.OPPOSITION,
)
MINOR_ASPECTS: Tuple[AspectType, ...] = (
    AspectType.SEMI_SEXTILE, AspectType.SEMI_SQUARE,
    AspectType.SESQUIQUADRATE, AspectType.QUINCUNX,
)


def strength_from_orb(actual_orb: float, max_orb: float) -> float:
    """1.0 at the exact angle falling linearly to 0.0 at the orb boundary."""
    if max_orb <= 0 or actual_orb >= max_orb:
        return 0.0
    return 1.0 - actual_orb / max_orb


def describe_strength(strength: float) -> str:
    if strength >= 0.9:
        return "Exact"
    if strength >= 0.7:
        return "Very Strong"
    if strength >= 0.5:
        return "Strong"
    if strength >= 0.3:
        return "Moderate"
    return "Weak"


@dataclass(frozen=True)
class Aspect:
    planet1: Planet
    planet2: Planet
    aspect_type: AspectType
    separation: float
    orb: float
    is_applying: bool
    strength: float

    @property
    def nature(self) -> AspectNature:
        return self.aspect_type.nature

    @property
    def strength_description(self) -> str:
        return describe_strength(self.strength)

    def involves(self, planet: Planet) -> bool:
        return planet in (self.planet1, self.planet2)


def effective_orb(planet1: Planet, planet2: Planet, aspect_type: AspectType,
                  orb_config: OrbConfiguration) -> float:
    base = orb_config.pair_orb(planet1, planet2)
    if aspect_type == AspectType.CONJUNCTION:
        return base + orb_config.conjunction_bonus
    if aspect_type == AspectType.OPPOSITION:
        return base + orb_config.opposition_bonus
    return base


def is_applying(pos1: PlanetPosition, pos2: PlanetPosition, aspect_angle: float) -> bool:
    """True when one day of motion brings the pair closer to the exact angle."""
    current = orb(angular_separation(pos1.longitude, pos2.longitude), aspect_angle)
    future_separation = angular_separation(normalize_degree(pos1.longitude + pos1.speed),
                                           normalize_degree(pos2.longitude + pos2.speed))
    return orb(future_separation, aspect_angle) < current


def aspects_between(pos1: PlanetPosition, pos2: PlanetPosition,
                    orb_config: Optional[OrbConfiguration] = None) -> List[Aspect]:
    orb_config = orb_config or OrbConfiguration()
    aspect_types = MAJOR_ASPECTS + MINOR_ASPECTS if orb_config.include_minor_aspects else MAJOR_ASPECTS
    separation = angular_separation(pos1.longitude, pos2.longitude)

    found = []
    for aspect_type in aspect_types:
        allowed = effective_orb(pos1.planet, pos2.planet, aspect_type, orb_config)
        actual = orb(separation, aspect_type.angle)
        if actual <= allowed:
            found.append(Aspect(
                planet1=pos1.planet,
                planet2=pos2.planet,
                aspect_type=aspect_type,
                separation=separation,
                orb=actual,
                is_applying=is_applying(pos1, pos2, aspect_type.angle),
                strength=strength_from_orb(actual, allowed),
            ))
    return found


def calculate_aspects(positions: Sequence[PlanetPosition],
                      orb_config: Optional[OrbConfiguration] = None) -> List[Aspect]:
    """All aspects between unordered planet pairs, strongest first."""
    orb_config = orb_config or OrbConfiguration()
    aspects = []
    for i, pos1 in enumerate(positions):
        for pos2 in positions[i + 1:]:
            aspects.extend(aspects_between(pos1, pos2, orb_config))
    return sorted(aspects, key=lambda a: a.strength, reverse=True)


def aspects_for_planet(aspects: Sequence[Aspect], planet: Planet) -> List[Aspect]:
    return [a for a in aspects if a.involves(planet)]


def aspect_between(aspects: Sequence[Aspect], planet1: Planet, planet2: Planet,
                   aspect_types: Optional[Sequence[AspectType]] = None) -> Optional[Aspect]:
    """Strongest aspect joining the two planets, optionally restricted by type."""
    best = None
    for aspect in aspects:
        if not (aspect.involves(planet1) and aspect.involves(planet2)):
            continue
        if aspect_types is not None and aspect.aspect_type not in aspect_types:
            continue
        if best is None or aspect.strength > best.strength:
            best = aspect
    return best


# Graha drishti: houses counted from the planet's own sign, itself being 1
DRISHTI_OFFSETS: Dict[Planet, Tuple[int, ...]] = {
    Planet.MARS: (4, 7, 8),
    Planet.JUPITER: (5, 7, 9),
    Planet.SATURN: (3, 7, 10),
    Planet.RAHU: (5, 7, 9),
    Planet.KETU: (5, 7, 9),
}
DEFAULT_DRISHTI: Tuple[int, ...] = (7,)


def drishti_offsets(planet: Planet) -> Tuple[int, ...]:
    return DRISHTI_OFFSETS.get(planet, DEFAULT_DRISHTI)


@dataclass(frozen=True)
class Drishti:
    planet: Planet
    offset: int
    target_sign: ZodiacSign
    target_house: int
    aspected_planets: Tuple[Planet, ...]

    @property
    def is_special(self) -> bool:
        return self.offset != 7


def graha_drishti(chart: VedicChart) -> List[Drishti]:
    """
    Sign-based Vedic aspects cast by every planet in the chart.

    Target houses are whole-sign houses from the ascendant.
    """
    asc_sign = sign_index(chart.ascendant)
    results = []
    for position in chart.planet_positions:
        own_sign = sign_index(position.longitude)
        for offset in drishti_offsets(position.planet):
            target = (own_sign + offset - 1) % 12
            receivers = tuple(
                other.planet for other in chart.planet_positions
                if other.planet != position.planet and sign_index(other.longitude) == target
            )
            results.append(Drishti(
                planet=position.planet,
                offset=offset,
                target_sign=ZodiacSign.from_index(target),
                target_house=(target - asc_sign) % 12 + 1,
                aspected_planets=receivers,
            ))
    return results


def planets_aspecting_house(chart: VedicChart, house: int) -> List[Planet]:
    return [d.planet for d in graha_drishti(chart) if d.target_house == house]


@dataclass(frozen=True)
class Yoga:
    name: str
    planets: Tuple[Planet, ...]
    description: str
    strength: float
    is_auspicious: bool


@dataclass(frozen=True)
class YogaRule:
    name: str
    planets: Tuple[Planet, Planet]
    aspect_types: Tuple[AspectType, ...]
    description: str
    is_auspicious: bool = True


YOGA_CATALOG: Tuple[YogaRule, ...] = (
    YogaRule("Budha-Aditya Yoga", (Planet.SUN, Planet.MERCURY), (AspectType.CONJUNCTION,),
             "Intelligence, communication skills, sharp intellect"),
    YogaRule("Chandra-Mangala Yoga", (Planet.MOON, Planet.MARS), (AspectType.CONJUNCTION,),
             "Wealth through enterprise, business acumen"),
    YogaRule("Guru-Chandal Yoga", (Planet.JUPITER, Planet.RAHU), (AspectType.CONJUNCTION,),
             "Challenges to traditional wisdom, unconventional beliefs", is_auspicious=False),
    YogaRule("Shani-Rahu Yoga", (Planet.SATURN, Planet.RAHU), (AspectType.CONJUNCTION,),
             "Karmic challenges, need for patience and discipline", is_auspicious=False),
    YogaRule("Raja Yoga", (Planet.JUPITER, Planet.VENUS), (AspectType.CONJUNCTION, AspectType.TRINE),
             "Prosperity, status and refinement through the two benefics"),
)

GAJA_KESARI_ORB = 15.0
GAJA_KESARI_STRENGTH = 0.8
_KENDRA_ANGLES = (0.0, 90.0, 180.0, 270.0)


def _gaja_kesari(chart: VedicChart) -> Optional[Yoga]:
    moon = chart.position_of(Planet.MOON)
    jupiter = chart.position_of(Planet.JUPITER)
    if moon is None or jupiter is None:
        return None
    separation = angular_separation(moon.longitude, jupiter.longitude)
    if not any(orb(separation, angle) <= GAJA_KESARI_ORB for angle in _KENDRA_ANGLES):
        return None
    return Yoga(
        name="Gaja-Kesari Yoga",
        planets=(Planet.MOON, Planet.JUPITER),
        description="Fame, wisdom, wealth, and noble character",
        strength=GAJA_KESARI_STRENGTH,
        is_auspicious=True,
    )


def detect_yogas(chart: VedicChart, orb_config: Optional[OrbConfiguration] = None,
                 aspects: Optional[Sequence[Aspect]] = None) -> List[Yoga]:
    """Yogas present in the chart, strongest first."""
    if aspects is None:
        aspects = calculate_aspects(chart.planet_positions, orb_config)

    yogas = []
    for rule in YOGA_CATALOG:
        match = aspect_between(aspects, rule.planets[0], rule.planets[1], rule.aspect_types)
        if match is None:
            continue
        yogas.append(Yoga(
            name=rule.name,
            planets=rule.planets,
            description=rule.description,
            strength=match.strength,
            is_auspicious=rule.is_auspicious,
        ))

    gaja_kesari = _gaja_kesari(chart)
    if gaja_kesari is not None:
        yogas.append(gaja_kesari)

    return sorted(yogas, key=lambda y: y.strength, reverse=True)
