"""
Pollutant codes.

The monitoring network's query string uses its own codes ("wire codes") for
some pollutants; everything inside the pipeline uses canonical codes.
"""

from typing import Dict

# canonical → wire
WIRE_CODES: Dict[str, str] = {
    "o3": "o3",
    "pm10": "pm10",
    "pm25": "pm2",
    "co": "co",
    "so2": "so2",
    "nox": "nox",
    "no2": "no2",
    "no": "no",
}

CANONICAL_CODES: Dict[str, str] = {wire: canonical for canonical, wire in WIRE_CODES.items()}

POLLUTANT_UNITS = {
    "o3": "ppb",
    "pm10": "μg/m³",
    "pm25": "μg/m³",
    "co": "ppm",
    "so2": "ppb",
    "nox": "ppb",
    "no2": "ppb",
    "no": "ppb",
}


def _normalize(code: str) -> str:
    return (code or "").strip().lower()


def to_wire_code(parameter: str) -> str:
    """Code to send upstream. Unknown codes pass through unchanged."""
    code = _normalize(parameter)
    return WIRE_CODES.get(code, code)


def to_canonical_code(parameter: str) -> str:
    """Canonical code for a canonical or wire code. Unknown codes pass through."""
    code = _normalize(parameter)
    if code in WIRE_CODES:
        return code
    return CANONICAL_CODES.get(code, code)
