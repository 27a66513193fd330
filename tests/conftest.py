import os
import sys
from datetime import datetime
from typing import Dict, Optional, Tuple

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from chart import ChartBuilder, equal_cusps  # noqa: E402
from ephemeris import HouseData, PositionProvider, RawPosition, RiseSetEvent  # noqa: E402
from exceptions import EphemerisUnavailableError  # noqa: E402
from vedic_math import normalize_degree  # noqa: E402
from vedic_types import BirthData, HouseSystem, Planet  # noqa: E402


DEFAULT_LONGITUDES: Dict[Planet, float] = {
    Planet.SUN: 10.0,       # Aries
    Planet.MOON: 100.0,     # Cancer
    Planet.MARS: 200.0,     # Libra
    Planet.MERCURY: 25.0,   # Aries
    Planet.JUPITER: 130.0,  # Leo
    Planet.VENUS: 50.0,     # Taurus
    Planet.SATURN: 280.0,   # Capricorn
    Planet.RAHU: 330.0,     # Pisces
    Planet.KETU: 150.0,     # Virgo
}

DEFAULT_SPEEDS: Dict[Planet, float] = {
    Planet.SUN: 0.98,
    Planet.MOON: 13.2,
    Planet.MARS: 0.6,
    Planet.MERCURY: 1.4,
    Planet.JUPITER: 0.12,
    Planet.VENUS: 1.2,
    Planet.SATURN: 0.06,
    Planet.RAHU: -0.053,
    Planet.KETU: -0.053,
}


class FakePositionProvider(PositionProvider):
    """Fixed longitudes at every moment; equal houses from a given ascendant."""

    ayanamsa_name = "Lahiri"

    def __init__(self, longitudes: Optional[Dict[Planet, float]] = None,
                 speeds: Optional[Dict[Planet, float]] = None,
                 ascendant: float = 0.0,
                 ayanamsa_value: float = 24.0,
                 rise_set_offsets: Optional[Dict[Tuple[Planet, RiseSetEvent], float]] = None):
        self.longitudes = dict(DEFAULT_LONGITUDES if longitudes is None else longitudes)
        self.speeds = dict(DEFAULT_SPEEDS if speeds is None else speeds)
        self.ascendant = ascendant
        self.ayanamsa_value = ayanamsa_value
        self.rise_set_offsets = rise_set_offsets or {}
        self.calls = 0

    def position_at(self, julian_day: float, planet: Planet) -> RawPosition:
        self.calls += 1
        if planet not in self.longitudes:
            raise EphemerisUnavailableError(f"No position for {planet.value}",
                                            body=planet.value, julian_day=julian_day)
        return RawPosition(normalize_degree(self.longitudes[planet]), 0.0, 1.0,
                           self.speeds.get(planet, 0.0))

    def ayanamsa(self, julian_day: float) -> float:
        return self.ayanamsa_value

    def houses(self, julian_day: float, latitude: float, longitude: float,
               house_system: HouseSystem) -> HouseData:
        return HouseData(cusps=equal_cusps(self.ascendant), ascendant=self.ascendant,
                         midheaven=normalize_degree(self.ascendant + 270.0))

    def rise_set(self, julian_day: float, planet: Planet, latitude: float,
                 longitude: float, event: RiseSetEvent) -> Optional[float]:
        offset = self.rise_set_offsets.get((planet, event))
        if offset is None:
            return None
        return julian_day + offset


def make_birth_data(**overrides) -> BirthData:
    values = dict(
        name="Test Native",
        date_time=datetime(1990, 6, 15, 14, 30),
        latitude=28.6139,
        longitude=77.2090,
        timezone="Asia/Kolkata",
        location="New Delhi",
    )
    values.update(overrides)
    return BirthData(**values)


def make_chart(longitudes: Optional[Dict[Planet, float]] = None,
               speeds: Optional[Dict[Planet, float]] = None,
               ascendant: float = 0.0,
               house_system: HouseSystem = HouseSystem.EQUAL,
               **birth_overrides):
    provider = FakePositionProvider(longitudes, speeds, ascendant)
    return ChartBuilder(provider).build(make_birth_data(**birth_overrides), house_system)


@pytest.fixture
def fake_provider():
    return FakePositionProvider()


@pytest.fixture
def sample_chart():
    return make_chart()
