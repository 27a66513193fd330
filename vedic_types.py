"""
Core value types for sidereal chart calculations.

Planets, signs, nakshatras and house systems are closed enumerations.
Behaviour that varies per member lives in lookup tables keyed by the
enum rather than in methods overridden per member.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

import pytz

from exceptions import InvalidCoordinatesError, InvalidDateTimeError, InvalidTimezoneError
from vedic_math import (
    degree_in_sign,
    nakshatra_index,
    nakshatra_pada,
    normalize_degree,
    sign_index,
    to_dms,
)


class Planet(str, Enum):
    SUN = "Sun"
    MOON = "Moon"
    MARS = "Mars"
    MERCURY = "Mercury"
    JUPITER = "Jupiter"
    VENUS = "Venus"
    SATURN = "Saturn"
    RAHU = "Rahu"
    KETU = "Ketu"
    URANUS = "Uranus"
    NEPTUNE = "Neptune"
    PLUTO = "Pluto"


MAIN_PLANETS: Tuple[Planet, ...] = (
    Planet.SUN, Planet.MOON, Planet.MARS, Planet.MERCURY, Planet.JUPITER,
    Planet.VENUS, Planet.SATURN, Planet.RAHU, Planet.KETU,
)
CLASSICAL_PLANETS: Tuple[Planet, ...] = MAIN_PLANETS[:7]
OUTER_PLANETS: Tuple[Planet, ...] = (Planet.URANUS, Planet.NEPTUNE, Planet.PLUTO)
NODES = frozenset({Planet.RAHU, Planet.KETU})
LUMINARIES = frozenset({Planet.SUN, Planet.MOON})


class Quality(str, Enum):
    """Sign quality, also called modality."""
    MOVABLE = "Movable"
    FIXED = "Fixed"
    DUAL = "Dual"


class Element(str, Enum):
    FIRE = "Fire"
    EARTH = "Earth"
    AIR = "Air"
    WATER = "Water"


class ZodiacSign(str, Enum):
    ARIES = "Aries"
    TAURUS = "Taurus"
    GEMINI = "Gemini"
    CANCER = "Cancer"
    LEO = "Leo"
    VIRGO = "Virgo"
    LIBRA = "Libra"
    SCORPIO = "Scorpio"
    SAGITTARIUS = "Sagittarius"
    CAPRICORN = "Capricorn"
    AQUARIUS = "Aquarius"
    PISCES = "Pisces"

    @classmethod
    def from_index(cls, index: int) -> "ZodiacSign":
        return SIGNS[index % 12]

    @classmethod
    def from_longitude(cls, longitude: float) -> "ZodiacSign":
        return SIGNS[sign_index(longitude)]

    @property
    def ordinal(self) -> int:
        return _SIGN_INDEX[self]

    @property
    def number(self) -> int:
        """1-based position, Aries = 1."""
        return _SIGN_INDEX[self] + 1

    @property
    def is_odd(self) -> bool:
        return self.number % 2 == 1

    @property
    def ruler(self) -> Planet:
        return SIGN_RULERS[self.ordinal]

    @property
    def quality(self) -> Quality:
        return (Quality.MOVABLE, Quality.FIXED, Quality.DUAL)[self.ordinal % 3]

    @property
    def element(self) -> Element:
        return (Element.FIRE, Element.EARTH, Element.AIR, Element.WATER)[self.ordinal % 4]


SIGNS: List[ZodiacSign] = list(ZodiacSign)
_SIGN_INDEX: Dict[ZodiacSign, int] = {sign: i for i, sign in enumerate(SIGNS)}

SIGN_RULERS: Tuple[Planet, ...] = (
    Planet.MARS, Planet.VENUS, Planet.MERCURY, Planet.MOON, Planet.SUN, Planet.MERCURY,
    Planet.VENUS, Planet.MARS, Planet.JUPITER, Planet.SATURN, Planet.SATURN, Planet.JUPITER,
)


class Nakshatra(str, Enum):
    ASHWINI = "Ashwini"
    BHARANI = "Bharani"
    KRITTIKA = "Krittika"
    ROHINI = "Rohini"
    MRIGASHIRA = "Mrigashira"
    ARDRA = "Ardra"
    PUNARVASU = "Punarvasu"
    PUSHYA = "Pushya"
    ASHLESHA = "Ashlesha"
    MAGHA = "Magha"
    PURVA_PHALGUNI = "Purva Phalguni"
    UTTARA_PHALGUNI = "Uttara Phalguni"
    HASTA = "Hasta"
    CHITRA = "Chitra"
    SWATI = "Swati"
    VISHAKHA = "Vishakha"
    ANURADHA = "Anuradha"
    JYESHTHA = "Jyeshtha"
    MULA = "Mula"
    PURVA_ASHADHA = "Purva Ashadha"
    UTTARA_ASHADHA = "Uttara Ashadha"
    SHRAVANA = "Shravana"
    DHANISHTHA = "Dhanishtha"
    SHATABHISHA = "Shatabhisha"
    PURVA_BHADRAPADA = "Purva Bhadrapada"
    UTTARA_BHADRAPADA = "Uttara Bhadrapada"
    REVATI = "Revati"

    @classmethod
    def from_longitude(cls, longitude: float) -> "Nakshatra":
        return NAKSHATRAS[nakshatra_index(longitude)]

    @property
    def ordinal(self) -> int:
        return _NAKSHATRA_INDEX[self]

    @property
    def number(self) -> int:
        return _NAKSHATRA_INDEX[self] + 1

    @property
    def ruler(self) -> Planet:
        return VIMSHOTTARI_SEQUENCE[self.ordinal % 9]

    @property
    def deity(self) -> str:
        return NAKSHATRA_DEITIES[self.ordinal]


NAKSHATRAS: List[Nakshatra] = list(Nakshatra)
_NAKSHATRA_INDEX: Dict[Nakshatra, int] = {n: i for i, n in enumerate(NAKSHATRAS)}

# Nakshatra lordship follows the Vimshottari order starting from Ashwini
VIMSHOTTARI_SEQUENCE: Tuple[Planet, ...] = (
    Planet.KETU, Planet.VENUS, Planet.SUN, Planet.MOON, Planet.MARS,
    Planet.RAHU, Planet.JUPITER, Planet.SATURN, Planet.MERCURY,
)

NAKSHATRA_DEITIES: Tuple[str, ...] = (
    "Ashwini Kumaras", "Yama", "Agni", "Brahma", "Soma", "Rudra", "Aditi",
    "Brihaspati", "Sarpa", "Pitris", "Bhaga", "Aryaman", "Savitar", "Tvashtar",
    "Vayu", "Indra-Agni", "Mitra", "Indra", "Nirriti", "Apas", "Vishwadevas",
    "Vishnu", "Vasus", "Varuna", "Aja Ekapada", "Ahir Budhnya", "Pushan",
)


class HouseSystem(str, Enum):
    """House systems; the swisseph code is looked up through .code."""
    PLACIDUS = "Placidus"
    KOCH = "Koch"
    PORPHYRY = "Porphyry"
    REGIOMONTANUS = "Regiomontanus"
    CAMPANUS = "Campanus"
    EQUAL = "Equal"
    WHOLE_SIGN = "Whole Sign"
    VEHLOW = "Vehlow"
    MERIDIAN = "Meridian"
    MORINUS = "Morinus"
    ALCABITIUS = "Alcabitius"

    @property
    def code(self) -> bytes:
        return HOUSE_SYSTEM_CODES[self]


HOUSE_SYSTEM_CODES: Dict[HouseSystem, bytes] = {
    HouseSystem.PLACIDUS: b'P',
    HouseSystem.KOCH: b'K',
    HouseSystem.PORPHYRY: b'O',
    HouseSystem.REGIOMONTANUS: b'R',
    HouseSystem.CAMPANUS: b'C',
    HouseSystem.EQUAL: b'E',
    HouseSystem.WHOLE_SIGN: b'W',
    HouseSystem.VEHLOW: b'V',
    HouseSystem.MERIDIAN: b'X',
    HouseSystem.MORINUS: b'M',
    HouseSystem.ALCABITIUS: b'B',
}


class Ayanamsa(str, Enum):
    LAHIRI = "Lahiri"
    RAMAN = "Raman"
    KRISHNAMURTI = "Krishnamurti"
    FAGAN_BRADLEY = "Fagan-Bradley"
    TRUE_CHITRA = "True Chitra"


class NodeType(str, Enum):
    TRUE = "true"
    MEAN = "mean"


def is_retrograde(planet: Planet, speed: float) -> bool:
    """Retrograde iff daily speed is negative; the luminaries never are."""
    if planet in LUMINARIES:
        return False
    return speed < 0


@dataclass(frozen=True)
class BirthData:
    """Civil birth (or transit) moment and place."""
    name: str
    date_time: datetime
    latitude: float
    longitude: float
    timezone: str = "UTC"
    location: str = ""

    def __post_init__(self):
        if not isinstance(self.date_time, datetime):
            raise InvalidDateTimeError(f"date_time must be a datetime, got {type(self.date_time).__name__}")
        if not -90 <= self.latitude <= 90:
            raise InvalidCoordinatesError(f"Latitude must be between -90 and 90, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise InvalidCoordinatesError(f"Longitude must be between -180 and 180, got {self.longitude}")
        try:
            pytz.timezone(self.timezone)
        except pytz.exceptions.UnknownTimeZoneError:
            raise InvalidTimezoneError(f"Unknown timezone: {self.timezone}")

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    def local_datetime(self) -> datetime:
        """Birth moment as an aware datetime in its own timezone."""
        dt = self.date_time
        if dt.tzinfo is not None:
            return dt.astimezone(self.tz)
        try:
            return self.tz.localize(dt, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            return self.tz.localize(dt, is_dst=False)
        except pytz.exceptions.NonExistentTimeError:
            return self.tz.localize(dt, is_dst=True)

    def utc_datetime(self) -> datetime:
        return self.local_datetime().astimezone(pytz.UTC)


@dataclass(frozen=True)
class PlanetPosition:
    """
    Sidereal position of one body.

    Sign, nakshatra, pada and the dms split are derived from the
    longitude on access, so they cannot drift from it.
    """
    planet: Planet
    longitude: float
    latitude: float = 0.0
    distance: float = 0.0
    speed: float = 0.0
    house: int = 1

    def __post_init__(self):
        object.__setattr__(self, 'longitude', normalize_degree(self.longitude))

    @property
    def is_retrograde(self) -> bool:
        return is_retrograde(self.planet, self.speed)

    @property
    def sign(self) -> ZodiacSign:
        return ZodiacSign.from_longitude(self.longitude)

    @property
    def degree_in_sign(self) -> float:
        return degree_in_sign(self.longitude)

    @property
    def dms(self) -> Tuple[int, int, int]:
        return to_dms(self.degree_in_sign)

    @property
    def nakshatra(self) -> Nakshatra:
        return Nakshatra.from_longitude(self.longitude)

    @property
    def nakshatra_pada(self) -> int:
        return nakshatra_pada(self.longitude)

    def moved_to(self, longitude: float, house: Optional[int] = None) -> "PlanetPosition":
        """Copy at a new longitude; everything derived follows automatically."""
        return replace(self, longitude=longitude, house=self.house if house is None else house)

    def formatted(self) -> str:
        deg, minutes, seconds = self.dms
        retro = " (R)" if self.is_retrograde else ""
        return f"{deg}°{minutes:02d}'{seconds:02d}\" {self.sign.value}{retro}"


@dataclass(frozen=True)
class VedicChart:
    """Immutable snapshot of one moment's sidereal chart."""
    birth_data: BirthData
    julian_day: float
    ayanamsa: float
    ayanamsa_name: str
    ascendant: float
    midheaven: float
    planet_positions: Tuple[PlanetPosition, ...]
    house_cusps: Tuple[float, ...]
    house_system: HouseSystem
    calculated_at: datetime = field(default_factory=lambda: datetime.now(pytz.UTC), compare=False)

    def position_of(self, planet: Planet) -> Optional[PlanetPosition]:
        for position in self.planet_positions:
            if position.planet == planet:
                return position
        return None

    @property
    def ascendant_sign(self) -> ZodiacSign:
        return ZodiacSign.from_longitude(self.ascendant)

    def planets_in_house(self, house: int) -> List[PlanetPosition]:
        return [p for p in self.planet_positions if p.house == house]

    def planets_in_sign(self, sign: ZodiacSign) -> List[PlanetPosition]:
        return [p for p in self.planet_positions if p.sign == sign]
