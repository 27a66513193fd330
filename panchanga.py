"""
Panchanga: the five limbs of the Hindu calendar day.

Tithi, karana and yoga are functions of the Sun and Moon longitudes;
nakshatra of the Moon alone. End-times are linear extrapolations to the
next boundary using the current relative speed, and are None when that
speed is not positive.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple

from config import CalculationConfig
from ephemeris import PositionProvider, RiseSetEvent, SwissEphemerisProvider
from vedic_math import NAKSHATRA_SPAN, datetime_from_julian_day, julian_day, nakshatra_pada, normalize_degree
from vedic_types import BirthData, Nakshatra, Planet

logger = logging.getLogger(__name__)

TITHI_SPAN = 12.0
KARANA_SPAN = 6.0
YOGA_SPAN = NAKSHATRA_SPAN


class Paksha(str, Enum):
    SHUKLA = "Shukla"
    KRISHNA = "Krishna"


_TITHI_BASE = (
    "Pratipada", "Dwitiya", "Tritiya", "Chaturthi", "Panchami", "Shashthi", "Saptami",
    "Ashtami", "Navami", "Dashami", "Ekadashi", "Dwadashi", "Trayodashi", "Chaturdashi",
)
TITHI_NAMES: Tuple[str, ...] = _TITHI_BASE + ("Purnima",) + _TITHI_BASE + ("Amavasya",)

TITHI_LORDS: Tuple[Planet, ...] = (
    Planet.SUN, Planet.MOON, Planet.MARS, Planet.MERCURY, Planet.JUPITER,
    Planet.VENUS, Planet.SATURN, Planet.RAHU, Planet.SUN, Planet.MOON,
    Planet.MARS, Planet.MERCURY, Planet.JUPITER, Planet.VENUS, Planet.SATURN,
)

YOGAS: Tuple[Tuple[str, str], ...] = (
    ("Vishkumbha", "Inauspicious"), ("Priti", "Auspicious"), ("Ayushman", "Auspicious"),
    ("Saubhagya", "Auspicious"), ("Shobhana", "Auspicious"), ("Atiganda", "Inauspicious"),
    ("Sukarma", "Auspicious"), ("Dhriti", "Auspicious"), ("Shoola", "Inauspicious"),
    ("Ganda", "Inauspicious"), ("Vriddhi", "Auspicious"), ("Dhruva", "Auspicious"),
    ("Vyaghata", "Inauspicious"), ("Harshana", "Auspicious"), ("Vajra", "Inauspicious"),
    ("Siddhi", "Auspicious"), ("Vyatipata", "Inauspicious"), ("Variyan", "Auspicious"),
    ("Parigha", "Inauspicious"), ("Shiva", "Auspicious"), ("Siddha", "Auspicious"),
    ("Sadhya", "Auspicious"), ("Shubha", "Auspicious"), ("Shukla", "Auspicious"),
    ("Brahma", "Auspicious"), ("Indra", "Auspicious"), ("Vaidhriti", "Inauspicious"),
)

MOVABLE_KARANAS: Tuple[str, ...] = ("Bava", "Balava", "Kaulava", "Taitila", "Garija", "Vanija", "Vishti")
FIXED_KARANAS: Tuple[str, ...] = ("Shakuni", "Chatushpada", "Nagava", "Kimstughna")

# Sunday first, matching (weekday + 1) % 7
VARAS: Tuple[Tuple[str, Planet], ...] = (
    ("Sunday", Planet.SUN), ("Monday", Planet.MOON), ("Tuesday", Planet.MARS),
    ("Wednesday", Planet.MERCURY), ("Thursday", Planet.JUPITER),
    ("Friday", Planet.VENUS), ("Saturday", Planet.SATURN),
)


@dataclass(frozen=True)
class TithiInfo:
    number: int
    name: str
    paksha: Paksha
    lord: Planet
    progress: float
    ends_at: Optional[datetime]


@dataclass(frozen=True)
class NakshatraInfo:
    nakshatra: Nakshatra
    pada: int
    lord: Planet
    progress: float
    ends_at: Optional[datetime]


@dataclass(frozen=True)
class YogaInfo:
    number: int
    name: str
    nature: str
    progress: float
    ends_at: Optional[datetime]


@dataclass(frozen=True)
class KaranaInfo:
    index: int
    name: str
    is_fixed: bool
    ends_at: Optional[datetime]


@dataclass(frozen=True)
class VaraInfo:
    number: int
    name: str
    lord: Planet


@dataclass(frozen=True)
class Panchanga:
    date_time: datetime
    julian_day: float
    sun_longitude: float
    moon_longitude: float
    tithi: TithiInfo
    vara: VaraInfo
    nakshatra: NakshatraInfo
    yoga: YogaInfo
    karana: KaranaInfo
    moon_phase: float
    sunrise: Optional[datetime]
    sunset: Optional[datetime]
    moonrise: Optional[datetime]
    moonset: Optional[datetime]

    @property
    def paksha(self) -> Paksha:
        return self.tithi.paksha


def elongation(sun_longitude: float, moon_longitude: float) -> float:
    return normalize_degree(moon_longitude - sun_longitude)


def tithi_number(sun_longitude: float, moon_longitude: float) -> int:
    """Tithi 1-30; 1-15 fall in Shukla paksha."""
    return min(int(elongation(sun_longitude, moon_longitude) / TITHI_SPAN) + 1, 30)


def karana_index(sun_longitude: float, moon_longitude: float) -> int:
    return min(int(elongation(sun_longitude, moon_longitude) / KARANA_SPAN), 59)


def karana_name(index: int) -> str:
    """Indices 0-55 cycle the movable karanas eight times; 56-59 are fixed."""
    if index < 56:
        return MOVABLE_KARANAS[index % 7]
    return FIXED_KARANAS[index - 56]


def yoga_number(sun_longitude: float, moon_longitude: float) -> int:
    return min(int(normalize_degree(sun_longitude + moon_longitude) / YOGA_SPAN) + 1, 27)


def moon_phase(sun_longitude: float, moon_longitude: float) -> float:
    """Illumination-like percentage: 0 at new moon, 100 at full moon."""
    diff = elongation(sun_longitude, moon_longitude)
    if diff <= 180.0:
        return diff / 180.0 * 100.0
    return (360.0 - diff) / 180.0 * 100.0


def days_to_boundary(angle: float, span: float, relative_speed: float) -> Optional[float]:
    """
    Days until `angle` reaches the next multiple of `span`.

    None when the relative speed is zero or negative.
    """
    if relative_speed <= 0:
        return None
    angle = normalize_degree(angle)
    boundary = (int(angle / span) + 1) * span
    return (boundary - angle) / relative_speed


def _progress(angle: float, span: float) -> float:
    return (normalize_degree(angle) % span) / span * 100.0


def _ends_at(moment: datetime, days: Optional[float]) -> Optional[datetime]:
    if days is None:
        return None
    return moment + timedelta(days=days)


class PanchangaCalculator:
    """Computes a Panchanga for a moment and place."""

    def __init__(self, provider: Optional[PositionProvider] = None,
                 config: Optional[CalculationConfig] = None):
        self.config = config or CalculationConfig()
        self.provider = provider or SwissEphemerisProvider(self.config)

    def _event_on_day(self, day_start_jd: float, planet: Planet, latitude: float,
                      longitude: float, event: RiseSetEvent, tz) -> Optional[datetime]:
        event_jd = self.provider.rise_set(day_start_jd, planet, latitude, longitude, event)
        if event_jd is None or event_jd >= day_start_jd + 1.0:
            return None
        return datetime_from_julian_day(event_jd).astimezone(tz)

    def calculate(self, date_time: datetime, latitude: float, longitude: float,
                  timezone: str = "UTC") -> Panchanga:
        place = BirthData("Panchanga", date_time, latitude, longitude, timezone)
        local = place.local_datetime()
        jd = julian_day(local)

        sun = self.provider.position_at(jd, Planet.SUN)
        moon = self.provider.position_at(jd, Planet.MOON)

        midnight = place.tz.localize(datetime(local.year, local.month, local.day))
        day_start_jd = julian_day(midnight)
        sunrise = self._event_on_day(day_start_jd, Planet.SUN, latitude, longitude, RiseSetEvent.RISE, place.tz)
        sunset = self._event_on_day(day_start_jd, Planet.SUN, latitude, longitude, RiseSetEvent.SET, place.tz)
        moonrise = self._event_on_day(day_start_jd, Planet.MOON, latitude, longitude, RiseSetEvent.RISE, place.tz)
        moonset = self._event_on_day(day_start_jd, Planet.MOON, latitude, longitude, RiseSetEvent.SET, place.tz)

        elong = elongation(sun.longitude, moon.longitude)
        relative = moon.speed - sun.speed

        number = tithi_number(sun.longitude, moon.longitude)
        tithi = TithiInfo(
            number=number,
            name=TITHI_NAMES[number - 1],
            paksha=Paksha.SHUKLA if number <= 15 else Paksha.KRISHNA,
            lord=TITHI_LORDS[(number - 1) % 15],
            progress=_progress(elong, TITHI_SPAN),
            ends_at=_ends_at(local, days_to_boundary(elong, TITHI_SPAN, relative)),
        )

        nakshatra = Nakshatra.from_longitude(moon.longitude)
        nakshatra_info = NakshatraInfo(
            nakshatra=nakshatra,
            pada=nakshatra_pada(moon.longitude),
            lord=nakshatra.ruler,
            progress=_progress(moon.longitude, NAKSHATRA_SPAN),
            ends_at=_ends_at(local, days_to_boundary(moon.longitude, NAKSHATRA_SPAN, moon.speed)),
        )

        yoga_sum = normalize_degree(sun.longitude + moon.longitude)
        y_number = yoga_number(sun.longitude, moon.longitude)
        yoga = YogaInfo(
            number=y_number,
            name=YOGAS[y_number - 1][0],
            nature=YOGAS[y_number - 1][1],
            progress=_progress(yoga_sum, YOGA_SPAN),
            ends_at=_ends_at(local, days_to_boundary(yoga_sum, YOGA_SPAN, moon.speed + sun.speed)),
        )

        k_index = karana_index(sun.longitude, moon.longitude)
        karana = KaranaInfo(
            index=k_index,
            name=karana_name(k_index),
            is_fixed=k_index >= 56,
            ends_at=_ends_at(local, days_to_boundary(elong, KARANA_SPAN, relative)),
        )

        # The Vedic day runs from sunrise to sunrise
        vara_number = (local.weekday() + 1) % 7
        if sunrise is not None and local < sunrise:
            vara_number = (vara_number - 1) % 7
        vara = VaraInfo(number=vara_number, name=VARAS[vara_number][0], lord=VARAS[vara_number][1])

        return Panchanga(
            date_time=local,
            julian_day=jd,
            sun_longitude=sun.longitude,
            moon_longitude=moon.longitude,
            tithi=tithi,
            vara=vara,
            nakshatra=nakshatra_info,
            yoga=yoga,
            karana=karana,
            moon_phase=moon_phase(sun.longitude, moon.longitude),
            sunrise=sunrise,
            sunset=sunset,
            moonrise=moonrise,
            moonset=moonset,
        )


def calculate_panchanga(date_time: datetime, latitude: float, longitude: float,
                        timezone: str = "UTC",
                        provider: Optional[PositionProvider] = None,
                        config: Optional[CalculationConfig] = None) -> Panchanga:
    return PanchangaCalculator(provider, config).calculate(date_time, latitude, longitude, timezone)
