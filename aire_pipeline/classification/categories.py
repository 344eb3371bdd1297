"""
Air-quality category classifier.

Maps a pollutant concentration to a health category and display color using
fixed breakpoint tables. Bounds are inclusive upper bounds; the last tier of
every table is unbounded. Stateless, no side effects.
"""

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple

logger = logging.getLogger(__name__)

GOOD = ("Good", "#00e400")
MODERATE = ("Moderate", "#ffff00")
USG = ("Unhealthy for Sensitive Groups", "#ff7e00")
UNHEALTHY = ("Unhealthy", "#ff0000")
VERY_UNHEALTHY = ("Very Unhealthy", "#99004c")
HAZARDOUS = ("Hazardous", "#7e0023")

DEFAULT_POLLUTANT = "o3"


@dataclass(frozen=True)
class Tier:
    upper_bound: float
    category: str
    color: str


@dataclass(frozen=True)
class Category:
    category: str
    color: str

    def to_dict(self) -> dict:
        return {"category": self.category, "color": self.color}


UNKNOWN = Category("Unknown", "#808080")


def _tiers(*bounds: float) -> Tuple[Tier, ...]:
    labels = (GOOD, MODERATE, USG, UNHEALTHY, VERY_UNHEALTHY, HAZARDOUS)
    return tuple(
        Tier(bound, label, color)
        for bound, (label, color) in zip(bounds + (math.inf,), labels)
    )


BREAKPOINTS: Mapping[str, Tuple[Tier, ...]] = MappingProxyType({
    "o3":   _tiers(70, 95, 154, 204, 404),
    "pm10": _tiers(54, 154, 254, 354, 424),
    "pm25": _tiers(12, 35.4, 55.4, 150.4, 250.4),
    "nox":  _tiers(53, 100, 360, 649, 1249),
    "co":   _tiers(4.4, 9.4, 12.4, 15.4, 30.4),
    "so2":  _tiers(35, 75, 185, 304, 604),
})


def breakpoints_for(parameter: str) -> Tuple[Tier, ...]:
    """
    Breakpoint table for a canonical pollutant code (case and surrounding
    whitespace ignored). Anything else, wire codes such as "pm2" included,
    gets the ozone table.
    """
    tiers = BREAKPOINTS.get((parameter or "").strip().lower())
    if tiers is None:
        logger.debug("No breakpoints for %r, using %s", parameter, DEFAULT_POLLUTANT)
        return BREAKPOINTS[DEFAULT_POLLUTANT]
    return tiers


def classify(parameter: str, value: float) -> Category:
    """
    Category for a concentration.

    Args:
        parameter: Canonical pollutant code.
        value: Finite concentration. Missing readings must be filtered out by
               the caller; anything non-finite yields ``UNKNOWN``.

    Returns:
        Category of the first tier whose upper bound is >= value.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return UNKNOWN

    for tier in breakpoints_for(parameter):
        if value <= tier.upper_bound:
            return Category(tier.category, tier.color)
    return UNKNOWN


def classify_hourly_averages(parameter: str, averages: Iterable) -> List[dict]:
    """HourlyAverage dicts, each extended with its category and color."""
    return [
        {**avg.to_dict(), **classify(parameter, avg.value).to_dict()}
        for avg in averages
    ]
