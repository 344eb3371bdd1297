"""
Monitoring network connector.

Requests the hourly concentrations results page from aire.cdmx.gob.mx.
Handles timeouts, HTTP errors and network failures by reporting them in a
FetchResult instead of raising.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Tuple

import httpx

from aire_pipeline import config
from aire_pipeline.extraction.table_extractor import ExtractionResult, extract_with_status
from aire_pipeline.ingestion.parameters import to_canonical_code, to_wire_code

logger = logging.getLogger(__name__)

QUERY_TYPE = "HORARIOS"

REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,es;q=0.8",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Referer": config.AIRE_REFERER,
}


@dataclass
class FetchResult:
    """Outcome of one upstream request."""
    ok: bool
    url: str
    status_code: Optional[int] = None
    text: str = ""
    error: Optional[str] = None

    def __str__(self) -> str:
        if self.ok:
            return f"[OK] {self.status_code} {len(self.text)} chars from {self.url}"
        return f"[FAILED] {self.status_code or '-'} {self.error} ({self.url})"


def build_query(
    parameter: str,
    year: str,
    month: str,
    day: Optional[str] = None,
    hour: Optional[int] = None,
    station: Optional[str] = None,
) -> dict:
    """Upstream query parameters; the pollutant goes out as its wire code."""
    query = {
        "qtipo": QUERY_TYPE,
        "parametro": to_wire_code(parameter),
        "anio": str(year),
        "qmes": str(month),
    }
    if day:
        query["dia"] = str(day)
    if hour is not None and hour != "":
        query["hora"] = str(hour)
    if station:
        query["qestacion"] = station
    return query


def _create_client() -> httpx.Client:
    transport = httpx.HTTPTransport(retries=config.REQUEST_RETRIES)
    return httpx.Client(
        transport=transport,
        timeout=config.REQUEST_TIMEOUT,
        headers=REQUEST_HEADERS,
        follow_redirects=True,
    )


def fetch_raw(query: dict) -> FetchResult:
    """
    Send an already-built query to the results endpoint.

    Returns:
        FetchResult; ``ok`` is False on timeout, HTTP error status or
        network failure.
    """
    url = str(httpx.URL(config.AIRE_BASE_URL, params=query))
    logger.info("Fetching data from: %s", url)

    try:
        with _create_client() as client:
            resp = client.get(config.AIRE_BASE_URL, params=query)
            resp.raise_for_status()
    except httpx.TimeoutException:
        logger.error("Upstream request timed out: %s", url)
        return FetchResult(ok=False, url=url, error="timeout")
    except httpx.HTTPStatusError as e:
        logger.error("Upstream HTTP error %s for %s", e.response.status_code, url)
        return FetchResult(
            ok=False, url=url,
            status_code=e.response.status_code,
            error=f"HTTP error! status: {e.response.status_code}",
        )
    except httpx.RequestError as e:
        logger.error("Upstream network error for %s: %s", url, e)
        return FetchResult(ok=False, url=url, error=str(e))

    text = resp.text
    logger.info("Response status: %s, content length: %d", resp.status_code, len(text))
    if "<table" not in text.lower():
        logger.warning("Response does not contain table tags")

    return FetchResult(ok=True, url=url, status_code=resp.status_code, text=text)


def fetch_html(
    parameter: str,
    year: str,
    month: str,
    day: Optional[str] = None,
    hour: Optional[int] = None,
    station: Optional[str] = None,
) -> FetchResult:
    """Fetch the results page for one pollutant/month (plus optional filters)."""
    return fetch_raw(build_query(parameter, year, month, day, hour, station))


def fetch_observations(
    parameter: str,
    year: str,
    month: str,
    day: Optional[str] = None,
    hour: Optional[int] = None,
    station: Optional[str] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Tuple[FetchResult, Optional[ExtractionResult]]:
    """
    Fetch and extract in one call.

    Returns:
        (FetchResult, ExtractionResult). The extraction result is None when
        the fetch failed.
    """
    canonical = to_canonical_code(parameter)
    fetched = fetch_html(canonical, year, month, day, hour, station)
    if not fetched.ok:
        return fetched, None

    extraction = extract_with_status(
        fetched.text, canonical, year, month,
        specific_day=day,
        specific_hour=hour,
        specific_station=station,
        clock=clock,
    )
    return fetched, extraction
