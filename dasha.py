"""
Planetary period (dasha) systems.

Vimshottari is a 120-year cycle keyed off the Moon's birth nakshatra,
subdivided into antardashas and pratyantardashas in proportion to each
lord's years. Periods form an immutable tree; which period is running at
a moment is always a query, never stored state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

from exceptions import MissingMoonError
from vedic_math import NAKSHATRA_SPAN, position_in_nakshatra
from vedic_types import VIMSHOTTARI_SEQUENCE, Nakshatra, Planet, VedicChart

DAYS_PER_YEAR = 365.25
VIMSHOTTARI_YEARS_TOTAL = 120.0
YOGINI_YEARS_TOTAL = 36.0

VIMSHOTTARI_YEARS: Dict[Planet, float] = {
    Planet.KETU: 7.0,
    Planet.VENUS: 20.0,
    Planet.SUN: 6.0,
    Planet.MOON: 10.0,
    Planet.MARS: 7.0,
    Planet.RAHU: 18.0,
    Planet.JUPITER: 16.0,
    Planet.SATURN: 19.0,
    Planet.MERCURY: 17.0,
}

LEVEL_NAMES: Dict[int, str] = {
    1: "Mahadasha",
    2: "Antardasha",
    3: "Pratyantardasha",
}
MAX_LEVEL = 3

ASHTOTTARI_HOUSES = frozenset({1, 4, 5, 7, 9, 10})


def years_to_timedelta(years: float) -> timedelta:
    return timedelta(days=years * DAYS_PER_YEAR)


@dataclass(frozen=True)
class DashaPeriod:
    planet: Planet
    level: int
    start: datetime
    end: datetime
    duration_years: float
    sub_periods: Tuple["DashaPeriod", ...] = field(default=(), repr=False)

    @property
    def level_name(self) -> str:
        return LEVEL_NAMES[self.level]

    def contains(self, moment: datetime) -> bool:
        """Half-open: the end instant belongs to the next period."""
        return self.start <= moment < self.end

    def sub_period_at(self, moment: datetime) -> Optional["DashaPeriod"]:
        for period in self.sub_periods:
            if period.contains(moment):
                return period
        return None


@dataclass(frozen=True)
class CurrentDasha:
    mahadasha: DashaPeriod
    antardasha: Optional[DashaPeriod]
    pratyantardasha: Optional[DashaPeriod]

    @property
    def description(self) -> str:
        parts = [f"{self.mahadasha.planet.value} Mahadasha"]
        if self.antardasha is not None:
            parts.append(f"{self.antardasha.planet.value} Bhukti")
            if self.pratyantardasha is not None:
                parts.append(f"{self.pratyantardasha.planet.value} Pratyantar")
        return " / ".join(parts)


@dataclass(frozen=True)
class Sandhi:
    """Junction where one period hands over to the next."""
    moment: datetime
    level: int
    from_planet: Planet
    to_planet: Planet


def _sequence_from(planet: Planet) -> List[Planet]:
    start = VIMSHOTTARI_SEQUENCE.index(planet)
    return [VIMSHOTTARI_SEQUENCE[(start + i) % len(VIMSHOTTARI_SEQUENCE)]
            for i in range(len(VIMSHOTTARI_SEQUENCE))]


def _sub_periods(lord: Planet, start: datetime, parent_end: datetime, parent_years: float,
                 level: int) -> Tuple[DashaPeriod, ...]:
    if level > MAX_LEVEL:
        return ()
    sequence = _sequence_from(lord)
    periods = []
    current = start
    for i, planet in enumerate(sequence):
        years = parent_years * VIMSHOTTARI_YEARS[planet] / VIMSHOTTARI_YEARS_TOTAL
        # Last sub-period closes exactly on the parent's end
        end = parent_end if i == len(sequence) - 1 else current + years_to_timedelta(years)
        periods.append(DashaPeriod(
            planet=planet,
            level=level,
            start=current,
            end=end,
            duration_years=years,
            sub_periods=_sub_periods(planet, current, end, years, level + 1),
        ))
        current = end
    return tuple(periods)


@dataclass(frozen=True)
class DashaSystem:
    birth_datetime: datetime
    moon_longitude: float
    nakshatra: Nakshatra
    starting_lord: Planet
    nakshatra_progress: float
    balance_years: float
    mahadashas: Tuple[DashaPeriod, ...]

    @property
    def elapsed_years(self) -> float:
        """Part of the first mahadasha already run before birth."""
        return VIMSHOTTARI_YEARS[self.starting_lord] - self.balance_years

    @property
    def end(self) -> datetime:
        return self.mahadashas[-1].end

    def mahadasha_at(self, moment: datetime) -> Optional[DashaPeriod]:
        for period in self.mahadashas:
            if period.contains(moment):
                return period
        return None

    def current_period(self, moment: datetime) -> Optional[CurrentDasha]:
        """Running periods at `moment`, or None outside the timeline."""
        mahadasha = self.mahadasha_at(moment)
        if mahadasha is None:
            return None
        antardasha = mahadasha.sub_period_at(moment)
        pratyantardasha = antardasha.sub_period_at(moment) if antardasha is not None else None
        return CurrentDasha(mahadasha, antardasha, pratyantardasha)

    def sandhis(self, after: datetime, limit: Optional[int] = None, max_level: int = 2) -> List[Sandhi]:
        """Upcoming period changes strictly after `after`, in time order."""
        junctions = []

        def collect(periods: Tuple[DashaPeriod, ...]) -> None:
            for previous, following in zip(periods, periods[1:]):
                if following.start > after:
                    junctions.append(Sandhi(following.start, following.level,
                                            previous.planet, following.planet))
            for period in periods:
                if period.level < max_level and period.end > after:
                    collect(period.sub_periods)

        collect(self.mahadashas)
        junctions.sort(key=lambda s: (s.moment, s.level))
        return junctions[:limit] if limit is not None else junctions


def calculate_dasha_system(birth_datetime: datetime, moon_longitude: float) -> DashaSystem:
    """One full Vimshottari cycle starting at birth."""
    nakshatra = Nakshatra.from_longitude(moon_longitude)
    lord = nakshatra.ruler
    progress = position_in_nakshatra(moon_longitude) / NAKSHATRA_SPAN
    balance = VIMSHOTTARI_YEARS[lord] * (1.0 - progress)

    mahadashas = []
    current = birth_datetime
    for i, planet in enumerate(_sequence_from(lord)):
        years = balance if i == 0 else VIMSHOTTARI_YEARS[planet]
        end = current + years_to_timedelta(years)
        mahadashas.append(DashaPeriod(
            planet=planet,
            level=1,
            start=current,
            end=end,
            duration_years=years,
            sub_periods=_sub_periods(planet, current, end, years, 2),
        ))
        current = end

    return DashaSystem(
        birth_datetime=birth_datetime,
        moon_longitude=moon_longitude,
        nakshatra=nakshatra,
        starting_lord=lord,
        nakshatra_progress=progress,
        balance_years=balance,
        mahadashas=tuple(mahadashas),
    )


def _moon_longitude(chart: VedicChart) -> float:
    moon = chart.position_of(Planet.MOON)
    if moon is None:
        raise MissingMoonError("Chart has no Moon position")
    return moon.longitude


def dasha_system_for_chart(chart: VedicChart) -> DashaSystem:
    return calculate_dasha_system(chart.birth_data.local_datetime(), _moon_longitude(chart))


class Yogini(Enum):
    MANGALA = ("Mangala", Planet.MOON, 1)
    PINGALA = ("Pingala", Planet.SUN, 2)
    DHANYA = ("Dhanya", Planet.JUPITER, 3)
    BHRAMARI = ("Bhramari", Planet.MARS, 4)
    BHADRIKA = ("Bhadrika", Planet.MERCURY, 5)
    ULKA = ("Ulka", Planet.SATURN, 6)
    SIDDHA = ("Siddha", Planet.VENUS, 7)
    SANKATA = ("Sankata", Planet.RAHU, 8)

    def __init__(self, label: str, planet: Planet, years: int):
        self.label = label
        self.planet = planet
        self.years = years


YOGINIS: List[Yogini] = list(Yogini)


@dataclass(frozen=True)
class YoginiPeriod:
    yogini: Yogini
    start: datetime
    end: datetime
    duration_years: float
    sub_periods: Tuple["YoginiPeriod", ...] = field(default=(), repr=False)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _yogini_order(first: int) -> List[Yogini]:
    return [YOGINIS[(first + i) % len(YOGINIS)] for i in range(len(YOGINIS))]


def _yogini_antardashas(yogini: Yogini, start: datetime, parent_end: datetime,
                        parent_years: float) -> Tuple[YoginiPeriod, ...]:
    order = _yogini_order(YOGINIS.index(yogini))
    periods = []
    current = start
    for i, sub in enumerate(order):
        years = parent_years * sub.years / YOGINI_YEARS_TOTAL
        end = parent_end if i == len(order) - 1 else current + years_to_timedelta(years)
        periods.append(YoginiPeriod(sub, current, end, years))
        current = end
    return tuple(periods)


def starting_yogini(nakshatra: Nakshatra) -> Yogini:
    return YOGINIS[(nakshatra.number + 3) % len(YOGINIS)]


def calculate_yogini_dasha(birth_datetime: datetime, moon_longitude: float) -> List[YoginiPeriod]:
    """One 36-year Yogini cycle with antardashas."""
    nakshatra = Nakshatra.from_longitude(moon_longitude)
    first = starting_yogini(nakshatra)
    progress = position_in_nakshatra(moon_longitude) / NAKSHATRA_SPAN

    periods = []
    current = birth_datetime
    for i, yogini in enumerate(_yogini_order(YOGINIS.index(first))):
        years = yogini.years * (1.0 - progress) if i == 0 else float(yogini.years)
        end = current + years_to_timedelta(years)
        periods.append(YoginiPeriod(yogini, current, end, years,
                                    _yogini_antardashas(yogini, current, end, years)))
        current = end
    return periods


def yogini_dasha_for_chart(chart: VedicChart) -> List[YoginiPeriod]:
    return calculate_yogini_dasha(chart.birth_data.local_datetime(), _moon_longitude(chart))


def ashtottari_applies(chart: VedicChart) -> bool:
    """Rahu in a kendra or trikona counted from the lagna lord's house."""
    lagna_lord = chart.ascendant_sign.ruler
    lord = chart.position_of(lagna_lord)
    rahu = chart.position_of(Planet.RAHU)
    if lord is None or rahu is None:
        return False
    distance = (rahu.house - lord.house + 12) % 12 + 1
    return distance in ASHTOTTARI_HOUSES
