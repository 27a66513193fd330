"""Calculation settings passed explicitly into every calculator."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from vedic_types import Ayanamsa, NodeType, Planet

logger = logging.getLogger(__name__)


class PlanetClass:
    LUMINARY = "luminary"
    PERSONAL = "personal"
    SOCIAL = "social"
    NODE = "node"
    OUTER = "outer"


PLANET_CLASSES: Dict[Planet, str] = {
    Planet.SUN: PlanetClass.LUMINARY,
    Planet.MOON: PlanetClass.LUMINARY,
    Planet.MERCURY: PlanetClass.PERSONAL,
    Planet.VENUS: PlanetClass.PERSONAL,
    Planet.MARS: PlanetClass.PERSONAL,
    Planet.JUPITER: PlanetClass.SOCIAL,
    Planet.SATURN: PlanetClass.SOCIAL,
    Planet.RAHU: PlanetClass.NODE,
    Planet.KETU: PlanetClass.NODE,
    Planet.URANUS: PlanetClass.OUTER,
    Planet.NEPTUNE: PlanetClass.OUTER,
    Planet.PLUTO: PlanetClass.OUTER,
}


def _default_class_orbs() -> Dict[str, float]:
    return {
        PlanetClass.LUMINARY: 10.0,
        PlanetClass.PERSONAL: 8.0,
        PlanetClass.SOCIAL: 7.0,
        PlanetClass.NODE: 6.0,
        PlanetClass.OUTER: 5.0,
    }


@dataclass(frozen=True)
class OrbConfiguration:
    """Orb allowances used by the aspect calculator."""
    class_orbs: Mapping[str, float] = field(default_factory=_default_class_orbs)
    conjunction_bonus: float = 2.0
    opposition_bonus: float = 1.0
    include_minor_aspects: bool = False
    orb_factor: float = 1.0

    def orb_for(self, planet: Planet) -> float:
        planet_class = PLANET_CLASSES.get(planet, PlanetClass.OUTER)
        return self.class_orbs.get(planet_class, 5.0) * self.orb_factor

    def pair_orb(self, planet1: Planet, planet2: Planet) -> float:
        return (self.orb_for(planet1) + self.orb_for(planet2)) / 2.0


@dataclass(frozen=True)
class CalculationConfig:
    """Ephemeris and frame settings for chart construction."""
    ayanamsa: Ayanamsa = Ayanamsa.LAHIRI
    ephemeris_path: Optional[str] = None
    node_type: NodeType = NodeType.MEAN
    include_outer_planets: bool = False


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(environ: Optional[Mapping[str, str]] = None) -> CalculationConfig:
    """
    Build a CalculationConfig from JYOTISH_* environment variables.

    Recognised: JYOTISH_EPHE_PATH, JYOTISH_AYANAMSA (enum value such as
    "Lahiri"), JYOTISH_NODE_TYPE ("mean" or "true") and
    JYOTISH_OUTER_PLANETS.
    """
    env = os.environ if environ is None else environ

    ayanamsa = Ayanamsa.LAHIRI
    raw_ayanamsa = env.get("JYOTISH_AYANAMSA")
    if raw_ayanamsa:
        try:
            ayanamsa = Ayanamsa(raw_ayanamsa)
        except ValueError:
            raise ValueError(f"Unknown ayanamsa: {raw_ayanamsa}")

    node_type = NodeType.MEAN
    raw_node = env.get("JYOTISH_NODE_TYPE")
    if raw_node:
        try:
            node_type = NodeType(raw_node.lower())
        except ValueError:
            raise ValueError(f"Unknown node type: {raw_node}")

    config = CalculationConfig(
        ayanamsa=ayanamsa,
        ephemeris_path=env.get("JYOTISH_EPHE_PATH") or None,
        node_type=node_type,
        include_outer_planets=_env_flag(env.get("JYOTISH_OUTER_PLANETS", "")),
    )
    logger.debug("Loaded calculation config: %s", config)
    return config
