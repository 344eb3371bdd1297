"""
Observation aggregator.

Groups a flat observation list by station and computes the cross-station
mean for every (date, hour) that has at least one real reading. Missing-data
observations count toward neither the sum nor the station count.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from aire_pipeline.extraction.table_extractor import Observation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourlyAverage:
    """Mean of all stations reporting at one timestamp."""
    date: str
    hour: str
    value: float
    station_count: int

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "hour": self.hour,
            "value": self.value,
            "stationCount": self.station_count,
        }


@dataclass
class AggregateResult:
    stations: Dict[str, List[Observation]] = field(default_factory=dict)
    hourly_averages: List[HourlyAverage] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "stations": {
                station: [o.to_dict() for o in observations]
                for station, observations in self.stations.items()
            },
            "hourlyAverages": [avg.to_dict() for avg in self.hourly_averages],
        }


def group_by_station(observations: Iterable[Observation]) -> Dict[str, List[Observation]]:
    """Stable partition by station; input order is kept inside each group."""
    groups: Dict[str, List[Observation]] = {}
    for obs in observations:
        groups.setdefault(obs.station, []).append(obs)
    return groups


def hourly_averages(observations: Iterable[Observation]) -> List[HourlyAverage]:
    """
    Cross-station mean per (date, hour), rounded to one decimal.

    Sorted by date, then by hour as an integer.
    """
    sums: Dict[Tuple[str, str], List[float]] = {}
    for obs in observations:
        if obs.value is None:
            continue
        bucket = sums.setdefault((obs.date, obs.hour), [0.0, 0])
        bucket[0] += obs.value
        bucket[1] += 1

    averages = [
        HourlyAverage(
            date=date,
            hour=hour,
            value=round(total / count, 1),
            station_count=int(count),
        )
        for (date, hour), (total, count) in sums.items()
    ]
    averages.sort(key=lambda avg: (avg.date, int(avg.hour)))
    return averages


def aggregate(observations: Iterable[Observation]) -> AggregateResult:
    """Build the per-station view and the hourly-average view."""
    observations = list(observations or [])
    if not observations:
        return AggregateResult()

    result = AggregateResult(
        stations=group_by_station(observations),
        hourly_averages=hourly_averages(observations),
    )
    logger.debug(
        "Aggregated %d observations: %d stations, %d hourly averages",
        len(observations), len(result.stations), len(result.hourly_averages),
    )
    return result
