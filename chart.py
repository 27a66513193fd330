"""
Vedic chart construction.

ChartBuilder turns BirthData into an immutable VedicChart: sidereal
planet positions, ascendant, midheaven, house cusps and the house of
every planet. A chart is built completely or not at all.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Sequence, Tuple

from config import CalculationConfig
from ephemeris import HouseData, PositionProvider, SwissEphemerisProvider
from vedic_math import DEGREES_PER_SIGN, julian_day, normalize_degree, sign_index
from vedic_types import (
    MAIN_PLANETS,
    OUTER_PLANETS,
    BirthData,
    HouseSystem,
    Planet,
    PlanetPosition,
    VedicChart,
)

logger = logging.getLogger(__name__)

DEFAULT_HOUSE_SYSTEM = HouseSystem.PLACIDUS


def whole_sign_cusps(ascendant: float) -> Tuple[float, ...]:
    first = sign_index(ascendant) * DEGREES_PER_SIGN
    return tuple(normalize_degree(first + i * DEGREES_PER_SIGN) for i in range(12))


def equal_cusps(ascendant: float) -> Tuple[float, ...]:
    return tuple(normalize_degree(ascendant + i * DEGREES_PER_SIGN) for i in range(12))


# Systems computed locally from the ascendant; everything else uses the provider's cusps
CUSP_RULES: Dict[HouseSystem, Callable[[float], Tuple[float, ...]]] = {
    HouseSystem.WHOLE_SIGN: whole_sign_cusps,
    HouseSystem.EQUAL: equal_cusps,
}


def house_for_longitude(longitude: float, cusps: Sequence[float]) -> int:
    """Locate a longitude within the twelve cusp intervals."""
    longitude = normalize_degree(longitude)
    for i in range(12):
        cusp_start = normalize_degree(cusps[i])
        cusp_end = normalize_degree(cusps[(i + 1) % 12])

        if cusp_start < cusp_end:
            if cusp_start <= longitude < cusp_end:
                return i + 1
        elif cusp_start > cusp_end:  # House spans 0°
            if longitude >= cusp_start or longitude < cusp_end:
                return i + 1
    return 1


class ChartBuilder:
    """Builds VedicChart instances from a PositionProvider."""

    def __init__(self, provider: Optional[PositionProvider] = None,
                 config: Optional[CalculationConfig] = None):
        self.config = config or CalculationConfig()
        self.provider = provider or SwissEphemerisProvider(self.config)

    def tracked_planets(self) -> Tuple[Planet, ...]:
        if self.config.include_outer_planets:
            return MAIN_PLANETS + OUTER_PLANETS
        return MAIN_PLANETS

    def _house_data(self, jd: float, birth_data: BirthData, house_system: HouseSystem) -> HouseData:
        angles = self.provider.houses(jd, birth_data.latitude, birth_data.longitude, house_system)
        rule = CUSP_RULES.get(house_system)
        if rule is None:
            return angles
        return HouseData(cusps=rule(angles.ascendant), ascendant=angles.ascendant,
                         midheaven=angles.midheaven)

    def build(self, birth_data: BirthData,
              house_system: HouseSystem = DEFAULT_HOUSE_SYSTEM) -> VedicChart:
        jd = julian_day(birth_data.utc_datetime())
        logger.debug("Building chart for %s at JD %.6f (%s)", birth_data.name, jd, house_system.value)

        # Any provider failure propagates; a partial planet set is never returned
        raw_positions = [(planet, self.provider.position_at(jd, planet))
                         for planet in self.tracked_planets()]
        houses = self._house_data(jd, birth_data, house_system)

        positions = tuple(
            PlanetPosition(
                planet=planet,
                longitude=raw.longitude,
                latitude=raw.latitude,
                distance=raw.distance,
                speed=raw.speed,
                house=house_for_longitude(raw.longitude, houses.cusps),
            )
            for planet, raw in raw_positions
        )

        return VedicChart(
            birth_data=birth_data,
            julian_day=jd,
            ayanamsa=self.provider.ayanamsa(jd),
            ayanamsa_name=self.provider.ayanamsa_name,
            ascendant=houses.ascendant,
            midheaven=houses.midheaven,
            planet_positions=positions,
            house_cusps=tuple(houses.cusps),
            house_system=house_system,
        )

    def build_transit(self, date_time: datetime, timezone: str = "UTC") -> VedicChart:
        """Chart for a transit moment; only sign placements are meaningful."""
        transit_data = BirthData(
            name="Transit",
            date_time=date_time,
            latitude=0.0,
            longitude=0.0,
            timezone=timezone,
            location="Transit Chart",
        )
        return self.build(transit_data, HouseSystem.WHOLE_SIGN)


def format_chart_text(chart: VedicChart) -> str:
    lines = []
    lines.append("=" * 75)
    lines.append("VEDIC CHART")
    lines.append("=" * 75)

    birth = chart.birth_data
    lines.append(f"Name:           {birth.name}")
    lines.append(f"Birth (Local):  {birth.local_datetime().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"Timezone:       {birth.timezone}")
    lines.append(f"Location:       {abs(birth.latitude):.4f}°{'N' if birth.latitude >= 0 else 'S'}, "
                 f"{abs(birth.longitude):.4f}°{'E' if birth.longitude >= 0 else 'W'}")
    lines.append(f"House System:   {chart.house_system.value}")
    lines.append(f"Ayanamsa:       {chart.ayanamsa_name} {chart.ayanamsa:.4f}°")
    lines.append(f"Ascendant:      {chart.ascendant_sign.value} {chart.ascendant % 30:.2f}°")
    lines.append("")

    lines.append("PLANETARY POSITIONS")
    lines.append("-" * 75)
    lines.append(f"{'Planet':<10} {'Position':<24} {'House':<7} {'Nakshatra':<20} {'Pada'}")
    lines.append("-" * 75)
    for p in chart.planet_positions:
        lines.append(f"{p.planet.value:<10} {p.formatted():<24} {p.house:<7} "
                     f"{p.nakshatra.value:<20} {p.nakshatra_pada}")

    return "\n".join(lines)


def build_chart(birth_data: BirthData,
                house_system: HouseSystem = DEFAULT_HOUSE_SYSTEM,
                provider: Optional[PositionProvider] = None,
                config: Optional[CalculationConfig] = None) -> VedicChart:
    return ChartBuilder(provider, config).build(birth_data, house_system)


def build_transit_chart(date_time: datetime,
                        timezone: str = "UTC",
                        provider: Optional[PositionProvider] = None,
                        config: Optional[CalculationConfig] = None) -> VedicChart:
    return ChartBuilder(provider, config).build_transit(date_time, timezone)
