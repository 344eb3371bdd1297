"""
Aire Pipeline — FastAPI relay.

Serves the monitoring network's results page to browsers (which cannot call
it cross-origin) and exposes the parsed observations and aggregates.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aire_pipeline import config
from api.routes import air_quality

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Aire Pipeline API",
    description="CDMX hourly air-quality relay and extraction",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(air_quality.router, prefix="/api", tags=["Air Quality"])


@app.get("/api/health", tags=["Health"])
def health():
    return {"status": "ok", "service": "aire-pipeline-api", "version": "1.0.0"}
