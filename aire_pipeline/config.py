"""
Runtime configuration for the aire pipeline.

Values come from the environment (optionally a .env file) and are read once
at import time.
"""

import os
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# ── Upstream ───────────────────────────────────────────────────────────────────
AIRE_BASE_URL = os.environ.get(
    "AIRE_BASE_URL",
    "http://www.aire.cdmx.gob.mx/estadisticas-consultas/concentraciones/respuesta.php",
)
AIRE_REFERER = os.environ.get("AIRE_REFERER", "http://www.aire.cdmx.gob.mx/default.php")
REQUEST_TIMEOUT = float(os.environ.get("AIRE_REQUEST_TIMEOUT", "10"))  # seconds
REQUEST_RETRIES = int(os.environ.get("AIRE_RETRIES", "2"))

# ── Clock ──────────────────────────────────────────────────────────────────────
AIRE_TIMEZONE = os.environ.get("AIRE_TIMEZONE", "America/Mexico_City")

# ── Logging ────────────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def network_now() -> datetime:
    """Current wall-clock time at the monitoring network, as a naive datetime."""
    return datetime.now(ZoneInfo(AIRE_TIMEZONE)).replace(tzinfo=None)


def default_request() -> dict:
    """One-shot request parameters for the CLI, from AIRE_* variables."""
    now = network_now()

    def _opt(name: str) -> Optional[str]:
        value = os.environ.get(name, "").strip()
        return value or None

    hour = _opt("AIRE_HOUR")
    return {
        "parameter": os.environ.get("AIRE_PARAMETER", "o3"),
        "year": os.environ.get("AIRE_YEAR", f"{now.year:04d}"),
        "month": os.environ.get("AIRE_MONTH", f"{now.month:02d}"),
        "day": _opt("AIRE_DAY"),
        "hour": int(hour) if hour is not None and hour.isdigit() else None,
        "station": _opt("AIRE_STATION"),
    }
