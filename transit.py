"""
Gochara (transit) analysis.

Transiting planets are placed by house counted from the natal Moon's
sign, classified with classical favourable/neutral house tables, checked
for Vedha (obstruction), aspected against the natal chart and scored
with the natal Ashtakavarga. A short forward scan flags Saturn, Jupiter
and node placements worth watching.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ashtakavarga import TransitScore, calculate_ashtakavarga
from aspects import MAJOR_ASPECTS, AspectType, strength_from_orb
from chart import ChartBuilder
from config import CalculationConfig
from ephemeris import PositionProvider
from exceptions import MissingMoonError
from vedic_math import angular_separation, houses_between, normalize_degree, orb
from vedic_types import MAIN_PLANETS, NODES, Planet, PlanetPosition, VedicChart, ZodiacSign

logger = logging.getLogger(__name__)


class TransitEffect(Enum):
    EXCELLENT = ("Excellent", 5)
    GOOD = ("Good", 4)
    NEUTRAL = ("Neutral", 3)
    CHALLENGING = ("Challenging", 2)
    DIFFICULT = ("Difficult", 1)

    def __init__(self, label: str, score: int):
        self.label = label
        self.score = score


class TransitQuality(str, Enum):
    EXCELLENT = "Excellent Period"
    GOOD = "Good Period"
    MIXED = "Mixed Period"
    CHALLENGING = "Challenging Period"
    DIFFICULT = "Difficult Period"


# Houses from the natal Moon
FAVORABLE_HOUSES: Dict[Planet, Tuple[int, ...]] = {
    Planet.SUN: (3, 6, 10, 11),
    Planet.MOON: (1, 3, 6, 7, 10, 11),
    Planet.MARS: (3, 6, 11),
    Planet.MERCURY: (2, 4, 6, 8, 10, 11),
    Planet.JUPITER: (2, 5, 7, 9, 11),
    Planet.VENUS: (1, 2, 3, 4, 5, 8, 9, 11, 12),
    Planet.SATURN: (3, 6, 11),
    Planet.RAHU: (3, 6, 10, 11),
    Planet.KETU: (3, 6, 10, 11),
}

NEUTRAL_HOUSES: Dict[Planet, Tuple[int, ...]] = {
    Planet.SUN: (1, 2, 5),
    Planet.MOON: (2, 5),
    Planet.MARS: (1, 10),
    Planet.MERCURY: (1, 3, 5),
    Planet.JUPITER: (1, 4, 6, 8, 10),
    Planet.VENUS: (6, 7, 10),
    Planet.SATURN: (1, 2, 10),
    Planet.RAHU: (1, 2, 5),
    Planet.KETU: (1, 2, 5),
}

# favourable house -> house whose occupant obstructs it
VEDHA_HOUSES: Dict[Planet, Dict[int, int]] = {
    Planet.SUN: {3: 9, 9: 3, 6: 12, 12: 6, 10: 4, 4: 10, 11: 5, 5: 11},
    Planet.MOON: {1: 5, 5: 1, 3: 9, 9: 3, 6: 12, 12: 6, 7: 2, 2: 7, 10: 4, 4: 10, 11: 8, 8: 11},
    Planet.MARS: {3: 12, 12: 3, 6: 9, 9: 6, 11: 5, 5: 11},
    Planet.MERCURY: {2: 5, 5: 2, 4: 3, 3: 4, 6: 9, 9: 6, 8: 1, 1: 8, 10: 8, 11: 12, 12: 11},
    Planet.JUPITER: {2: 12, 12: 2, 5: 4, 4: 5, 7: 3, 3: 7, 9: 10, 10: 9, 11: 8, 8: 11},
    Planet.VENUS: {1: 3, 2: 7, 3: 12, 4: 10, 5: 8, 6: 11, 7: 2, 8: 5, 9: 11, 10: 4, 11: 6, 12: 3},
    Planet.SATURN: {3: 12, 12: 3, 6: 9, 9: 6, 11: 5, 5: 11},
}

TRANSIT_ORBS: Dict[Planet, float] = {
    Planet.SUN: 8.0,
    Planet.MOON: 8.0,
    Planet.JUPITER: 8.0,
    Planet.SATURN: 8.0,
    Planet.MERCURY: 6.0,
    Planet.VENUS: 6.0,
    Planet.MARS: 6.0,
    Planet.RAHU: 5.0,
    Planet.KETU: 5.0,
}
DEFAULT_TRANSIT_ORB = 6.0

HOUSE_MATTERS: Dict[int, str] = {
    1: "self, health, personality",
    2: "wealth, family, speech",
    3: "courage, siblings, short journeys",
    4: "home, mother, mental peace",
    5: "children, creativity, romance",
    6: "enemies, health issues, debts",
    7: "marriage, partnerships, business",
    8: "obstacles, longevity, occult",
    9: "fortune, father, religion",
    10: "career, status, government",
    11: "gains, friends, elder siblings",
    12: "expenses, spirituality, foreign",
}

SCAN_OFFSETS_DAYS: Tuple[int, ...] = (0, 7, 14, 21, 28)
SCAN_WINDOW_DAYS = 7

SIGNIFICANT_HOUSES: Dict[Planet, Tuple[int, ...]] = {
    Planet.SATURN: (1, 4, 7, 8, 10, 12),
    Planet.JUPITER: (1, 5, 9),
    Planet.RAHU: (1, 7),
    Planet.KETU: (1, 7),
}

BENEFIC_TRANSITERS = frozenset({Planet.JUPITER, Planet.VENUS})
MALEFIC_TRANSITERS = frozenset({Planet.SATURN, Planet.MARS, Planet.RAHU, Planet.KETU})
HARMONIOUS_ASPECTS = frozenset({AspectType.TRINE, AspectType.SEXTILE})
HARD_ASPECTS = frozenset({AspectType.SQUARE, AspectType.OPPOSITION})


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


@dataclass(frozen=True)
class GocharaResult:
    planet: Planet
    transit_sign: ZodiacSign
    house_from_moon: int
    effect: TransitEffect
    vedha_source: Optional[Planet]
    interpretation: str

    @property
    def is_vedha_affected(self) -> bool:
        return self.vedha_source is not None


@dataclass(frozen=True)
class TransitAspect:
    transiting_planet: Planet
    natal_planet: Planet
    aspect_type: AspectType
    separation: float
    orb: float
    is_applying: bool
    strength: float
    interpretation: str


@dataclass(frozen=True)
class TransitAssessment:
    quality: TransitQuality
    score: float
    gochara_score: float
    aspect_score: float
    ashtakavarga_score: float
    summary: str
    focus_areas: Tuple[str, ...]


@dataclass(frozen=True)
class SignificantPeriod:
    start: datetime
    end: datetime
    description: str
    planets: Tuple[Planet, ...]
    intensity: int


@dataclass(frozen=True)
class TransitAnalysis:
    natal_chart: VedicChart
    transit_chart: VedicChart
    transit_datetime: datetime
    gochara: Tuple[GocharaResult, ...]
    aspects: Tuple[TransitAspect, ...]
    ashtakavarga_scores: Dict[Planet, TransitScore]
    assessment: TransitAssessment
    significant_periods: Tuple[SignificantPeriod, ...]

    def gochara_for(self, planet: Planet) -> Optional[GocharaResult]:
        for result in self.gochara:
            if result.planet == planet:
                return result
        return None


def base_effect(planet: Planet, house_from_moon: int) -> TransitEffect:
    if planet not in FAVORABLE_HOUSES:
        return TransitEffect.NEUTRAL
    if house_from_moon in FAVORABLE_HOUSES[planet]:
        return TransitEffect.GOOD
    if house_from_moon in NEUTRAL_HOUSES.get(planet, ()):
        return TransitEffect.NEUTRAL
    return TransitEffect.CHALLENGING


def find_vedha(planet: Planet, house_from_moon: int, houses: Dict[Planet, int]) -> Optional[Planet]:
    """First other planet occupying the obstruction house, if any."""
    obstruction = VEDHA_HOUSES.get(planet, {}).get(house_from_moon)
    if obstruction is None:
        return None
    for other in MAIN_PLANETS:
        if other != planet and houses.get(other) == obstruction:
            return other
    return None


def gochara_interpretation(planet: Planet, house: int, effect: TransitEffect, vedha: bool) -> str:
    matters = HOUSE_MATTERS.get(house, "general matters")
    where = f"{planet.value} transit in {ordinal(house)} house"
    if effect == TransitEffect.EXCELLENT:
        text = f"{where} brings excellent results for {matters}."
    elif effect == TransitEffect.GOOD:
        text = f"{where} supports {matters}."
    elif effect == TransitEffect.NEUTRAL:
        text = f"{where} has neutral effects on {matters}."
    elif effect == TransitEffect.CHALLENGING:
        text = f"{where} may challenge {matters}."
    else:
        text = f"{where} requires caution in {matters}."
    if vedha:
        text += " Effects may be diminished due to Vedha."
    return text


def calculate_gochara(moon_sign: ZodiacSign, transit_positions: Sequence[PlanetPosition]) -> List[GocharaResult]:
    houses = {
        p.planet: houses_between(moon_sign.ordinal, p.sign.ordinal)
        for p in transit_positions if p.planet in MAIN_PLANETS
    }
    results = []
    for position in transit_positions:
        if position.planet not in MAIN_PLANETS:
            continue
        house = houses[position.planet]
        effect = base_effect(position.planet, house)
        vedha = find_vedha(position.planet, house, houses)
        if vedha is not None and effect == TransitEffect.GOOD:
            effect = TransitEffect.NEUTRAL
        results.append(GocharaResult(
            planet=position.planet,
            transit_sign=position.sign,
            house_from_moon=house,
            effect=effect,
            vedha_source=vedha,
            interpretation=gochara_interpretation(position.planet, house, effect, vedha is not None),
        ))
    return results


def aspect_interpretation(transiting: Planet, natal: Planet, aspect_type: AspectType, applying: bool) -> str:
    motion = "becoming exact" if applying else "separating"
    text = f"Transit {transiting.value} {aspect_type.label} natal {natal.value} ({motion})"
    benefic = transiting in BENEFIC_TRANSITERS
    harmonious = aspect_type in HARMONIOUS_ASPECTS
    if benefic and harmonious:
        return f"Favorable: {text} - beneficial influence"
    if benefic:
        return f"{text} - mixed but generally supportive"
    if harmonious:
        return f"{text} - harmonious connection"
    return f"{text} - requires attention"


def calculate_transit_aspects(natal_chart: VedicChart,
                              transit_positions: Sequence[PlanetPosition]) -> List[TransitAspect]:
    """Aspects from transiting planets to fixed natal positions, strongest first."""
    found = []
    for transit in transit_positions:
        max_orb = TRANSIT_ORBS.get(transit.planet, DEFAULT_TRANSIT_ORB)
        next_day = normalize_degree(transit.longitude + transit.speed)
        for natal in natal_chart.planet_positions:
            separation = angular_separation(transit.longitude, natal.longitude)
            for aspect_type in MAJOR_ASPECTS:
                actual = orb(separation, aspect_type.angle)
                if actual > max_orb:
                    continue
                applying = orb(angular_separation(next_day, natal.longitude), aspect_type.angle) < actual
                found.append(TransitAspect(
                    transiting_planet=transit.planet,
                    natal_planet=natal.planet,
                    aspect_type=aspect_type,
                    separation=separation,
                    orb=actual,
                    is_applying=applying,
                    strength=strength_from_orb(actual, max_orb),
                    interpretation=aspect_interpretation(transit.planet, natal.planet, aspect_type, applying),
                ))
    return sorted(found, key=lambda a: a.strength, reverse=True)


def aspect_balance_score(aspects: Sequence[TransitAspect]) -> float:
    if not aspects:
        return 50.0
    benefic = sum(
        1 for a in aspects
        if a.aspect_type in HARMONIOUS_ASPECTS
        or (a.aspect_type == AspectType.CONJUNCTION and a.transiting_planet in BENEFIC_TRANSITERS)
    )
    malefic = sum(
        1 for a in aspects
        if a.aspect_type in HARD_ASPECTS and a.transiting_planet in MALEFIC_TRANSITERS
    )
    return float(max(0, min(benefic * 10 - malefic * 5 + 50, 100)))


def quality_for_score(score: float) -> TransitQuality:
    if score >= 75:
        return TransitQuality.EXCELLENT
    if score >= 60:
        return TransitQuality.GOOD
    if score >= 45:
        return TransitQuality.MIXED
    if score >= 30:
        return TransitQuality.CHALLENGING
    return TransitQuality.DIFFICULT


def _summary(quality: TransitQuality, gochara: Sequence[GocharaResult]) -> str:
    favorable = ", ".join(g.planet.value for g in gochara
                          if g.effect in (TransitEffect.EXCELLENT, TransitEffect.GOOD))
    challenging = ", ".join(g.planet.value for g in gochara
                            if g.effect in (TransitEffect.CHALLENGING, TransitEffect.DIFFICULT))
    if quality == TransitQuality.EXCELLENT:
        return (f"This is an excellent transit period. {favorable} are well-placed from Moon, "
                f"supporting growth and positive developments.")
    if quality == TransitQuality.GOOD:
        return f"Overall favorable transit period. {favorable} provide support. Good time for important initiatives."
    if quality == TransitQuality.MIXED:
        return f"Mixed transit influences present. Balance {favorable} positives against {challenging} challenges."
    if quality == TransitQuality.CHALLENGING:
        return f"Challenging period requiring patience. {challenging} may create obstacles. Focus on steady progress."
    return (f"Difficult transit period. {challenging} create significant challenges. "
            f"Exercise caution and avoid major decisions.")


def focus_areas(gochara: Sequence[GocharaResult], aspects: Sequence[TransitAspect]) -> List[str]:
    houses = {g.planet: g.house_from_moon for g in gochara}
    areas = []

    saturn = houses.get(Planet.SATURN)
    if saturn in (1, 12):
        areas.append("Sade Sati period - focus on patience, health, and spiritual growth")
    elif saturn == 8:
        areas.append("Ashtama Shani - be cautious about health, unexpected challenges")
    elif saturn == 4:
        areas.append("Kantaka Shani - attention to home, mother, mental peace")
    elif saturn == 10:
        areas.append("Saturn transiting 10th - career responsibilities, hard work pays off")

    jupiter = houses.get(Planet.JUPITER)
    if jupiter in (1, 5, 9):
        areas.append("Jupiter in trine houses - excellent for expansion, learning, spirituality")
    elif jupiter == 2:
        areas.append("Jupiter transiting 2nd - favorable for wealth accumulation")
    elif jupiter == 11:
        areas.append("Jupiter transiting 11th - gains through networking, fulfillment of desires")

    for aspect in [a for a in aspects if a.strength > 0.8][:3]:
        areas.append(f"Strong {aspect.aspect_type.label} from transit {aspect.transiting_planet.value} "
                     f"to natal {aspect.natal_planet.value}")
    return areas[:5]


def period_description(planet: Planet, house: int) -> str:
    if planet == Planet.SATURN:
        return {
            12: "Sade Sati beginning phase (Saturn in 12th from Moon)",
            1: "Sade Sati peak phase (Saturn over natal Moon)",
            2: "Sade Sati ending phase (Saturn in 2nd from Moon)",
            8: "Ashtama Shani (Saturn in 8th from Moon)",
            4: "Kantaka Shani (Saturn in 4th from Moon)",
            7: "Saturn in 7th from Moon - relationship focus",
            10: "Saturn in 10th from Moon - career challenges and growth",
        }.get(house, f"Saturn transit in {ordinal(house)} from Moon")
    if planet == Planet.JUPITER:
        return {
            1: "Jupiter over natal Moon - expansion and growth",
            5: "Jupiter in 5th from Moon - creativity and children",
            9: "Jupiter in 9th from Moon - fortune and dharma",
        }.get(house, f"Jupiter transit in {ordinal(house)} from Moon")
    if planet == Planet.RAHU:
        return f"Rahu transit in {ordinal(house)} from Moon - worldly desires amplified"
    if planet == Planet.KETU:
        return f"Ketu transit in {ordinal(house)} from Moon - spiritual detachment"
    return f"{planet.value} transit in {ordinal(house)} from Moon"


def period_intensity(planet: Planet, house: int) -> int:
    if planet == Planet.SATURN and house == 8:
        return 5
    if planet == Planet.SATURN and house in (1, 12):
        return 4
    if planet == Planet.JUPITER and house in (1, 5, 9):
        return 4
    return 3


class TransitAnalyzer:
    """Analyses transits over a natal chart using a ChartBuilder for transit positions."""

    def __init__(self, builder: Optional[ChartBuilder] = None):
        self.builder = builder or ChartBuilder()

    @staticmethod
    def _natal_moon_sign(natal_chart: VedicChart) -> ZodiacSign:
        moon = natal_chart.position_of(Planet.MOON)
        if moon is None:
            raise MissingMoonError("Natal chart has no Moon position")
        return moon.sign

    def significant_periods(self, natal_chart: VedicChart, start: datetime,
                            timezone: str) -> List[SignificantPeriod]:
        moon_sign = self._natal_moon_sign(natal_chart)
        periods = []
        seen = set()
        for offset in SCAN_OFFSETS_DAYS:
            sample = start + timedelta(days=offset)
            logger.debug("Scanning transits at %s", sample.isoformat())
            chart = self.builder.build_transit(sample, timezone)
            for planet, houses in SIGNIFICANT_HOUSES.items():
                position = chart.position_of(planet)
                if position is None:
                    continue
                house = houses_between(moon_sign.ordinal, position.sign.ordinal)
                if house not in houses:
                    continue
                description = period_description(planet, house)
                if description in seen:
                    continue
                seen.add(description)
                periods.append(SignificantPeriod(
                    start=sample,
                    end=sample + timedelta(days=SCAN_WINDOW_DAYS),
                    description=description,
                    planets=(planet,),
                    intensity=period_intensity(planet, house),
                ))
        return periods

    def analyze(self, natal_chart: VedicChart, transit_datetime: datetime,
                timezone: Optional[str] = None) -> TransitAnalysis:
        timezone = timezone or natal_chart.birth_data.timezone
        moon_sign = self._natal_moon_sign(natal_chart)

        transit_chart = self.builder.build_transit(transit_datetime, timezone)
        positions = transit_chart.planet_positions

        gochara = calculate_gochara(moon_sign, positions)
        aspects = calculate_transit_aspects(natal_chart, positions)

        ashtakavarga = calculate_ashtakavarga(natal_chart)
        scores = {
            p.planet: ashtakavarga.transit_score(p.planet, p.sign)
            for p in positions if p.planet in MAIN_PLANETS and p.planet not in NODES
        }

        gochara_score = sum(g.effect.score for g in gochara) / len(gochara) * 20 if gochara else 50.0
        aspect_score = aspect_balance_score(aspects)
        ashtakavarga_score = sum(s.rating for s in scores.values()) / len(scores) * 100 if scores else 50.0
        combined = gochara_score * 0.4 + aspect_score * 0.3 + ashtakavarga_score * 0.3
        quality = quality_for_score(combined)

        assessment = TransitAssessment(
            quality=quality,
            score=combined,
            gochara_score=gochara_score,
            aspect_score=aspect_score,
            ashtakavarga_score=ashtakavarga_score,
            summary=_summary(quality, gochara),
            focus_areas=tuple(focus_areas(gochara, aspects)),
        )

        return TransitAnalysis(
            natal_chart=natal_chart,
            transit_chart=transit_chart,
            transit_datetime=transit_datetime,
            gochara=tuple(gochara),
            aspects=tuple(aspects),
            ashtakavarga_scores=scores,
            assessment=assessment,
            significant_periods=tuple(self.significant_periods(natal_chart, transit_datetime, timezone)),
        )


def analyze_transits(natal_chart: VedicChart, transit_datetime: datetime,
                     provider: Optional[PositionProvider] = None,
                     config: Optional[CalculationConfig] = None) -> TransitAnalysis:
    return TransitAnalyzer(ChartBuilder(provider, config)).analyze(natal_chart, transit_datetime)
