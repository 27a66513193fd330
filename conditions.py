"""Retrograde status, combustion and planetary war for a chart's planets."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from vedic_math import angular_separation
from vedic_types import LUMINARIES, NODES, Planet, PlanetPosition, VedicChart

STATIONARY_SPEED = 0.05
CAZIMI_ORB = 0.2833  # 17 arc-minutes
WAR_ORB = 1.0


class RetrogradeStatus(str, Enum):
    DIRECT = "Direct"
    RETROGRADE = "Retrograde"
    STATIONARY_RETROGRADE = "Stationary Retrograde"
    STATIONARY_DIRECT = "Stationary Direct"


class CombustionStatus(Enum):
    NOT_COMBUST = ("Not Combust", 1.0)
    PARTIAL = ("Partial Combustion", 0.5)
    FULL = ("Full Combustion", 0.25)
    CAZIMI = ("Cazimi", 1.2)

    def __init__(self, label: str, strength: float):
        self.label = label
        self.strength = strength


# (full, partial) orbs from the Sun
COMBUSTION_ORBS: Dict[Planet, Tuple[float, float]] = {
    Planet.MOON: (12.0, 17.0),
    Planet.MARS: (17.0, 25.0),
    Planet.MERCURY: (14.0, 20.0),
    Planet.JUPITER: (11.0, 17.0),
    Planet.VENUS: (10.0, 16.0),
    Planet.SATURN: (15.0, 22.0),
}
RETROGRADE_FULL_ORBS: Dict[Planet, float] = {
    Planet.MERCURY: 12.0,
    Planet.VENUS: 8.0,
}

# Planetary war ranking; the brighter planet wins. Only these five take part.
WAR_BRIGHTNESS: Dict[Planet, int] = {
    Planet.VENUS: 7,
    Planet.JUPITER: 6,
    Planet.MARS: 5,
    Planet.MERCURY: 4,
    Planet.SATURN: 3,
}


def retrograde_status(planet: Planet, speed: float) -> RetrogradeStatus:
    if planet in LUMINARIES:
        return RetrogradeStatus.DIRECT
    if planet in NODES:
        return RetrogradeStatus.RETROGRADE
    if abs(speed) < STATIONARY_SPEED:
        return RetrogradeStatus.STATIONARY_RETROGRADE if speed < 0 else RetrogradeStatus.STATIONARY_DIRECT
    return RetrogradeStatus.RETROGRADE if speed < 0 else RetrogradeStatus.DIRECT


def combustion_status(planet: Planet, distance_from_sun: float, retrograde: bool = False) -> CombustionStatus:
    orbs = COMBUSTION_ORBS.get(planet)
    if orbs is None:
        return CombustionStatus.NOT_COMBUST
    full_orb, partial_orb = orbs
    if retrograde and planet in RETROGRADE_FULL_ORBS:
        full_orb = RETROGRADE_FULL_ORBS[planet]

    if distance_from_sun <= CAZIMI_ORB:
        return CombustionStatus.CAZIMI
    if distance_from_sun <= full_orb:
        return CombustionStatus.FULL
    if distance_from_sun <= partial_orb:
        return CombustionStatus.PARTIAL
    return CombustionStatus.NOT_COMBUST


def war_winner(planet1: Planet, planet2: Planet) -> Planet:
    """Brighter planet by WAR_BRIGHTNESS; ties go to planet1."""
    if WAR_BRIGHTNESS.get(planet1, 0) >= WAR_BRIGHTNESS.get(planet2, 0):
        return planet1
    return planet2


@dataclass(frozen=True)
class PlanetaryWar:
    planet1: Planet
    planet2: Planet
    separation: float
    winner: Planet

    @property
    def loser(self) -> Planet:
        return self.planet2 if self.winner == self.planet1 else self.planet1


def detect_planetary_wars(positions: List[PlanetPosition]) -> List[PlanetaryWar]:
    fighters = [p for p in positions if p.planet in WAR_BRIGHTNESS]
    wars = []
    for i, pos1 in enumerate(fighters):
        for pos2 in fighters[i + 1:]:
            separation = angular_separation(pos1.longitude, pos2.longitude)
            if separation <= WAR_ORB:
                wars.append(PlanetaryWar(pos1.planet, pos2.planet, separation,
                                         war_winner(pos1.planet, pos2.planet)))
    return wars


@dataclass(frozen=True)
class PlanetCondition:
    planet: Planet
    retrograde_status: RetrogradeStatus
    combustion_status: CombustionStatus
    distance_from_sun: Optional[float]
    speed: float
    war_opponent: Optional[Planet] = None
    is_war_winner: Optional[bool] = None

    @property
    def in_planetary_war(self) -> bool:
        return self.war_opponent is not None

    @property
    def overall_strength(self) -> float:
        strength = self.combustion_status.strength
        if self.retrograde_status in (RetrogradeStatus.STATIONARY_RETROGRADE,
                                      RetrogradeStatus.STATIONARY_DIRECT):
            strength *= 1.2
        if self.is_war_winner is False:
            strength *= 0.5
        return strength


@dataclass(frozen=True)
class ConditionAnalysis:
    conditions: Tuple[PlanetCondition, ...]
    wars: Tuple[PlanetaryWar, ...]

    @property
    def retrograde_planets(self) -> List[Planet]:
        return [c.planet for c in self.conditions
                if c.retrograde_status in (RetrogradeStatus.RETROGRADE, RetrogradeStatus.STATIONARY_RETROGRADE)]

    @property
    def combust_planets(self) -> List[Planet]:
        return [c.planet for c in self.conditions
                if c.combustion_status in (CombustionStatus.FULL, CombustionStatus.PARTIAL)]

    def condition_of(self, planet: Planet) -> Optional[PlanetCondition]:
        for condition in self.conditions:
            if condition.planet == planet:
                return condition
        return None


def analyze_conditions(chart: VedicChart) -> ConditionAnalysis:
    sun = chart.position_of(Planet.SUN)
    wars = detect_planetary_wars(list(chart.planet_positions))

    conditions = []
    for position in chart.planet_positions:
        distance = None
        combustion = CombustionStatus.NOT_COMBUST
        if sun is not None and position.planet != Planet.SUN:
            distance = angular_separation(position.longitude, sun.longitude)
            combustion = combustion_status(position.planet, distance, position.is_retrograde)

        opponent = None
        winner = None
        for war in wars:
            if position.planet in (war.planet1, war.planet2):
                opponent = war.planet2 if war.planet1 == position.planet else war.planet1
                winner = war.winner == position.planet
                break

        conditions.append(PlanetCondition(
            planet=position.planet,
            retrograde_status=retrograde_status(position.planet, position.speed),
            combustion_status=combustion,
            distance_from_sun=distance,
            speed=position.speed,
            war_opponent=opponent,
            is_war_winner=winner,
        ))

    return ConditionAnalysis(conditions=tuple(conditions), wars=tuple(wars))
