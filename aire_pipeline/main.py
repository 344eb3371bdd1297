"""
Aire Pipeline — one-shot entry point.

Fetches one results page from the monitoring network, extracts the hourly
observations, aggregates them and prints the aggregate as JSON on stdout.
The request comes from AIRE_* environment variables (see config.py).

Exit codes:
    0  data extracted
    1  upstream fetch failed
    2  page fetched but no observations extracted
"""

import json
import logging
import sys

from aire_pipeline import config
from aire_pipeline.aggregation.aggregator import aggregate
from aire_pipeline.classification.categories import classify_hourly_averages
from aire_pipeline.ingestion.aire_connector import fetch_observations
from aire_pipeline.ingestion.parameters import POLLUTANT_UNITS, to_canonical_code

logger = logging.getLogger("aire_pipeline.main")


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [PIPELINE] %(levelname)s %(name)s — %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )


def run(request: dict) -> int:
    """Run one request; returns the process exit code."""
    parameter = to_canonical_code(request["parameter"])
    fetched, extraction = fetch_observations(
        parameter,
        request["year"],
        request["month"],
        day=request.get("day"),
        hour=request.get("hour"),
        station=request.get("station"),
    )
    if extraction is None:
        logger.error("Fetch failed: %s", fetched)
        return 1

    logger.info("Extraction finished: %s", extraction)
    if not extraction.observations:
        return 2

    result = aggregate(extraction.observations)
    unit = POLLUTANT_UNITS.get(parameter, "")
    for station, observations in result.stations.items():
        values = [o.value for o in observations if o.value is not None]
        if values:
            logger.info(
                "  %-6s readings=%-3d missing=%-3d max=%.1f %s",
                station, len(values), len(observations) - len(values), max(values), unit,
            )
        else:
            logger.info("  %-6s no valid readings (%d missing)", station, len(observations))

    payload = result.to_dict()
    payload["hourlyAverages"] = classify_hourly_averages(parameter, result.hourly_averages)
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


def main() -> None:
    _configure_logging()
    request = config.default_request()
    logger.info(
        "Requesting %s for %s-%s (day=%s hour=%s station=%s)",
        request["parameter"], request["year"], request["month"],
        request["day"], request["hour"], request["station"],
    )
    sys.exit(run(request))


if __name__ == "__main__":
    main()
