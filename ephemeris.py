"""
Ephemeris adapter over Swiss Ephemeris.

Every position leaves this module in the sidereal frame selected by
CalculationConfig.ayanamsa. Lookup failures surface as
EphemerisUnavailableError; rise/set events that do not happen (polar
day, circumpolar Moon) come back as None.
"""

import logging
import os
import shutil
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import swisseph as swe

from config import CalculationConfig
from exceptions import EphemerisSetupError, EphemerisUnavailableError
from vedic_math import normalize_degree
from vedic_types import Ayanamsa, HouseSystem, NodeType, Planet

logger = logging.getLogger(__name__)

SWE_BODIES: Dict[Planet, int] = {
    Planet.SUN: swe.SUN,
    Planet.MOON: swe.MOON,
    Planet.MERCURY: swe.MERCURY,
    Planet.VENUS: swe.VENUS,
    Planet.MARS: swe.MARS,
    Planet.JUPITER: swe.JUPITER,
    Planet.SATURN: swe.SATURN,
    Planet.URANUS: swe.URANUS,
    Planet.NEPTUNE: swe.NEPTUNE,
    Planet.PLUTO: swe.PLUTO,
}

AYANAMSA_MODES: Dict[Ayanamsa, int] = {
    Ayanamsa.LAHIRI: swe.SIDM_LAHIRI,
    Ayanamsa.RAMAN: swe.SIDM_RAMAN,
    Ayanamsa.KRISHNAMURTI: swe.SIDM_KRISHNAMURTI,
    Ayanamsa.FAGAN_BRADLEY: swe.SIDM_FAGAN_BRADLEY,
    Ayanamsa.TRUE_CHITRA: swe.SIDM_TRUE_CITRA,
}

EPHEMERIS_FILE_SUFFIX = '.se1'

# swisseph keeps the sidereal mode and file path in process-global state
_swe_lock = threading.Lock()


class RiseSetEvent(Enum):
    RISE = "rise"
    SET = "set"


@dataclass(frozen=True)
class RawPosition:
    """Sidereal longitude, latitude, distance (AU) and daily speed."""
    longitude: float
    latitude: float
    distance: float
    speed: float


@dataclass(frozen=True)
class HouseData:
    cusps: Tuple[float, ...]
    ascendant: float
    midheaven: float


class PositionProvider:
    """
    Source of sidereal positions for the calculators.

    Subclasses implement the four lookups; the calculators never talk
    to swisseph directly.
    """

    ayanamsa_name: str = Ayanamsa.LAHIRI.value

    def position_at(self, julian_day: float, planet: Planet) -> RawPosition:
        raise NotImplementedError

    def ayanamsa(self, julian_day: float) -> float:
        raise NotImplementedError

    def houses(self, julian_day: float, latitude: float, longitude: float,
               house_system: HouseSystem) -> HouseData:
        raise NotImplementedError

    def rise_set(self, julian_day: float, planet: Planet, latitude: float,
                 longitude: float, event: RiseSetEvent) -> Optional[float]:
        raise NotImplementedError


def setup_ephemeris(source_dir: str, target_dir: str) -> List[str]:
    """
    Copy Swiss Ephemeris data files into target_dir.

    Files already present are left alone, so calling this on every
    start is safe. Returns the names that were copied. Raises
    EphemerisSetupError on any I/O failure; the caller may retry.
    """
    copied = []
    try:
        os.makedirs(target_dir, exist_ok=True)
        for name in sorted(os.listdir(source_dir)):
            if not name.endswith(EPHEMERIS_FILE_SUFFIX):
                continue
            destination = os.path.join(target_dir, name)
            if os.path.exists(destination):
                continue
            shutil.copy2(os.path.join(source_dir, name), destination)
            copied.append(name)
    except OSError as e:
        logger.error("Ephemeris setup from %s to %s failed: %s", source_dir, target_dir, e)
        raise EphemerisSetupError(f"Ephemeris setup failed: {e}") from e

    if copied:
        logger.info("Copied %d ephemeris files into %s", len(copied), target_dir)
    return copied


class SwissEphemerisProvider(PositionProvider):
    """PositionProvider backed by pyswisseph."""

    def __init__(self, config: Optional[CalculationConfig] = None):
        self.config = config or CalculationConfig()
        self.ayanamsa_name = self.config.ayanamsa.value
        self._sid_mode = AYANAMSA_MODES[self.config.ayanamsa]
        self._ephe_path: Optional[str] = None
        self._use_moshier = True
        self._init_ephemeris(self.config.ephemeris_path)

    def _init_ephemeris(self, ephemeris_path: Optional[str]) -> None:
        if not ephemeris_path:
            logger.info("No ephemeris path configured, using built-in Moshier ephemeris")
            return
        if not os.path.isdir(ephemeris_path):
            logger.warning("Ephemeris path %s is not a directory, using Moshier ephemeris", ephemeris_path)
            return
        try:
            files = os.listdir(ephemeris_path)
        except OSError as e:
            raise EphemerisSetupError(f"Cannot read ephemeris path {ephemeris_path}: {e}") from e

        if any(f.endswith(EPHEMERIS_FILE_SUFFIX) for f in files):
            self._ephe_path = ephemeris_path
            self._use_moshier = False
            logger.info("Using Swiss Ephemeris data files from %s", ephemeris_path)
        else:
            logger.warning("No %s files in %s, using Moshier ephemeris", EPHEMERIS_FILE_SUFFIX, ephemeris_path)

    def _base_flags(self) -> int:
        return swe.FLG_MOSEPH if self._use_moshier else swe.FLG_SWIEPH

    def _get_calc_flags(self) -> int:
        return self._base_flags() | swe.FLG_SPEED | swe.FLG_SIDEREAL

    def _prepare(self) -> None:
        """Must be called with _swe_lock held."""
        if self._ephe_path:
            swe.set_ephe_path(self._ephe_path)
        swe.set_sid_mode(self._sid_mode)

    def _node_id(self) -> int:
        return swe.TRUE_NODE if self.config.node_type == NodeType.TRUE else swe.MEAN_NODE

    def position_at(self, julian_day: float, planet: Planet) -> RawPosition:
        if planet in (Planet.RAHU, Planet.KETU):
            body_id = self._node_id()
        elif planet in SWE_BODIES:
            body_id = SWE_BODIES[planet]
        else:
            raise EphemerisUnavailableError(f"No ephemeris body for {planet.value}",
                                            body=planet.value, julian_day=julian_day)

        try:
            with _swe_lock:
                self._prepare()
                result, _ = swe.calc_ut(julian_day, body_id, self._get_calc_flags())
        except swe.Error as e:
            raise EphemerisUnavailableError(
                f"Position unavailable for {planet.value} at JD {julian_day}: {e}",
                body=planet.value, julian_day=julian_day,
            ) from e

        longitude, latitude, distance, speed = result[0], result[1], result[2], result[3]
        if planet == Planet.KETU:
            longitude = longitude + 180.0
            latitude = -latitude
        return RawPosition(normalize_degree(longitude), latitude, distance, speed)

    def ayanamsa(self, julian_day: float) -> float:
        with _swe_lock:
            self._prepare()
            return swe.get_ayanamsa_ut(julian_day)

    def houses(self, julian_day: float, latitude: float, longitude: float,
               house_system: HouseSystem) -> HouseData:
        try:
            with _swe_lock:
                self._prepare()
                cusps_raw, ascmc = swe.houses_ex(julian_day, latitude, longitude,
                                                 house_system.code, swe.FLG_SIDEREAL)
        except swe.Error as e:
            raise EphemerisUnavailableError(
                f"House cusps unavailable for {house_system.value} at latitude {latitude}: {e}",
                body="houses", julian_day=julian_day,
            ) from e

        cusps = tuple(normalize_degree(c) for c in list(cusps_raw)[:12])
        return HouseData(cusps=cusps, ascendant=normalize_degree(ascmc[0]),
                         midheaven=normalize_degree(ascmc[1]))

    def rise_set(self, julian_day: float, planet: Planet, latitude: float,
                 longitude: float, event: RiseSetEvent) -> Optional[float]:
        body_id = SWE_BODIES.get(planet)
        if body_id is None:
            return None
        rsmi = swe.CALC_RISE if event == RiseSetEvent.RISE else swe.CALC_SET
        geopos = (longitude, latitude, 0.0)
        try:
            with _swe_lock:
                self._prepare()
                res, tret = swe.rise_trans(julian_day, body_id, rsmi, geopos, 0.0, 0.0,
                                           self._base_flags())
        except swe.Error as e:
            logger.debug("rise_trans failed for %s %s at JD %s: %s", planet.value, event.value, julian_day, e)
            return None
        if res != 0:
            logger.debug("No %s of %s after JD %s (code %s)", event.value, planet.value, julian_day, res)
            return None
        return tret[0]
