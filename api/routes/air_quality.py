"""
Air quality routes — upstream relay, parsed observations, category lookup.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse

from aire_pipeline import config
from aire_pipeline.aggregation.aggregator import aggregate
from aire_pipeline.classification.categories import classify, classify_hourly_averages
from aire_pipeline.ingestion import aire_connector
from aire_pipeline.ingestion.parameters import to_canonical_code

logger = logging.getLogger(__name__)

router = APIRouter()


def _current_period() -> tuple:
    now = config.network_now()
    return f"{now.year:04d}", f"{now.month:02d}"


@router.get("/proxy")
def proxy(
    qtipo: str = Query(aire_connector.QUERY_TYPE),
    parametro: str = Query("o3"),
    anio: Optional[str] = Query(None),
    qmes: Optional[str] = Query(None),
    dia: Optional[str] = Query(None),
    hora: Optional[str] = Query(None),
    qestacion: Optional[str] = Query(None),
):
    """Relay the upstream results page unchanged."""
    year, month = _current_period()
    query = {
        "qtipo": qtipo,
        "parametro": parametro,
        "anio": anio or year,
        "qmes": qmes or month,
    }
    for key, value in (("dia", dia), ("hora", hora), ("qestacion", qestacion)):
        if value:
            query[key] = value

    fetched = aire_connector.fetch_raw(query)
    if not fetched.ok:
        return JSONResponse(
            status_code=500,
            content={
                "error": fetched.error,
                "details": {"url": fetched.url, "statusCode": fetched.status_code},
            },
        )
    return HTMLResponse(content=fetched.text, status_code=200)


@router.get("/air-quality")
def air_quality(
    parameter: str = Query("o3", description="Canonical pollutant code"),
    year: Optional[str] = Query(None),
    month: Optional[str] = Query(None),
    day: Optional[str] = Query(None),
    hour: Optional[int] = Query(None, ge=0, le=23),
    station: Optional[str] = Query(None),
):
    """Fetch, extract and aggregate one results page."""
    current_year, current_month = _current_period()
    parameter = to_canonical_code(parameter)

    fetched, extraction = aire_connector.fetch_observations(
        parameter,
        year or current_year,
        month or current_month,
        day=day,
        hour=hour,
        station=station,
    )
    if extraction is None:
        raise HTTPException(
            status_code=502,
            detail={"error": fetched.error, "statusCode": fetched.status_code},
        )

    result = aggregate(extraction.observations)
    payload = result.to_dict()
    return {
        "parameter": parameter,
        "status": extraction.status.value,
        "reason": extraction.reason,
        "observations": [o.to_dict() for o in extraction.observations],
        "stations": payload["stations"],
        "hourlyAverages": classify_hourly_averages(parameter, result.hourly_averages),
    }


@router.get("/category")
def category(
    parameter: str = Query(..., description="Pollutant code"),
    value: float = Query(...),
):
    """Health category and color for a concentration."""
    parameter = to_canonical_code(parameter)
    return {"parameter": parameter, **classify(parameter, value).to_dict()}
