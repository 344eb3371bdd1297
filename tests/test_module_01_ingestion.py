"""
Tests for Module 01 — Ingestion.
Tests pollutant code translation and the monitoring network connector.
"""

from datetime import datetime
from unittest.mock import patch

import httpx
import pytest

from aire_pipeline.extraction.table_extractor import ExtractionStatus
from aire_pipeline.ingestion import aire_connector
from aire_pipeline.ingestion.aire_connector import (
    FetchResult,
    build_query,
    fetch_html,
    fetch_observations,
    fetch_raw,
)
from aire_pipeline.ingestion.parameters import to_canonical_code, to_wire_code

PAGE = (
    "<html><body><table>"
    "<tr><th>Fecha</th><th>Hora</th><th>ACO</th><th>MER</th></tr>"
    "<tr><td>01/03/2025</td><td>1</td><td>18</td><td>nr</td></tr>"
    "<tr><td>01/03/2025</td><td>2</td><td>22</td><td>20</td></tr>"
    "</table></body></html>"
)


def _mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


# ============================================================
# Pollutant codes
# ============================================================

class TestParameterCodes:
    def test_pm25_goes_out_as_pm2(self):
        assert to_wire_code("pm25") == "pm2"

    @pytest.mark.parametrize("code", ["o3", "pm10", "co", "so2", "nox"])
    def test_other_codes_pass_through(self, code):
        assert to_wire_code(code) == code
        assert to_canonical_code(code) == code

    def test_wire_code_maps_back(self):
        assert to_canonical_code("pm2") == "pm25"

    def test_normalizes_case_and_whitespace(self):
        assert to_wire_code(" PM25 ") == "pm2"
        assert to_canonical_code("O3") == "o3"

    def test_unknown_code_unchanged(self):
        assert to_wire_code("tmp") == "tmp"
        assert to_canonical_code("tmp") == "tmp"


# ============================================================
# Query construction
# ============================================================

class TestBuildQuery:
    def test_required_fields(self):
        assert build_query("pm25", "2025", "03") == {
            "qtipo": "HORARIOS",
            "parametro": "pm2",
            "anio": "2025",
            "qmes": "03",
        }

    def test_optional_fields(self):
        query = build_query("o3", "2025", "03", day="07", hour=0, station="MER")
        assert query["dia"] == "07"
        assert query["hora"] == "0"
        assert query["qestacion"] == "MER"

    def test_optional_fields_omitted_when_empty(self):
        query = build_query("o3", "2025", "03", day=None, hour=None, station="")
        assert "dia" not in query
        assert "hora" not in query
        assert "qestacion" not in query


# ============================================================
# Fetching
# ============================================================

class TestFetchRaw:
    def test_happy_path(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, text=PAGE)

        with patch.object(aire_connector, "_create_client", lambda: _mock_client(handler)):
            result = fetch_html("pm25", "2025", "03")

        assert result.ok is True
        assert result.status_code == 200
        assert "<table>" in result.text
        assert seen["params"]["parametro"] == "pm2"
        assert "parametro=pm2" in result.url

    def test_timeout_reported(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with patch.object(aire_connector, "_create_client", lambda: _mock_client(handler)):
            result = fetch_raw(build_query("o3", "2025", "03"))

        assert result.ok is False
        assert result.error == "timeout"
        assert result.status_code is None

    def test_http_error_status_reported(self):
        with patch.object(aire_connector, "_create_client",
                          lambda: _mock_client(lambda request: httpx.Response(503, text="busy"))):
            result = fetch_raw(build_query("o3", "2025", "03"))

        assert result.ok is False
        assert result.status_code == 503
        assert "503" in result.error

    def test_network_error_reported(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with patch.object(aire_connector, "_create_client", lambda: _mock_client(handler)):
            result = fetch_raw(build_query("o3", "2025", "03"))

        assert result.ok is False
        assert "connection refused" in result.error

    def test_page_without_table_is_still_returned(self):
        with patch.object(aire_connector, "_create_client",
                          lambda: _mock_client(lambda request: httpx.Response(200, text="<p>Sin datos</p>"))):
            result = fetch_raw(build_query("o3", "2025", "03"))
        assert result.ok is True
        assert result.text == "<p>Sin datos</p>"


class TestFetchObservations:
    def test_stores_canonical_code(self):
        with patch.object(aire_connector, "_create_client",
                          lambda: _mock_client(lambda request: httpx.Response(200, text=PAGE))):
            fetched, extraction = fetch_observations(
                "pm25", "2025", "03", clock=lambda: datetime(2030, 1, 1),
            )

        assert fetched.ok
        assert extraction.status == ExtractionStatus.OK
        assert len(extraction.observations) == 4
        assert {o.parameter for o in extraction.observations} == {"pm25"}

    def test_filters_forwarded_to_extractor(self):
        with patch.object(aire_connector, "_create_client",
                          lambda: _mock_client(lambda request: httpx.Response(200, text=PAGE))):
            _, extraction = fetch_observations(
                "o3", "2025", "03", hour=2, station="MER", clock=lambda: datetime(2030, 1, 1),
            )

        assert [(o.station, o.hour, o.value) for o in extraction.observations] == [("MER", "02", 20.0)]

    def test_fetch_failure_skips_extraction(self):
        failed = FetchResult(ok=False, url="http://example", error="timeout")
        with patch.object(aire_connector, "fetch_html", return_value=failed):
            fetched, extraction = fetch_observations("o3", "2025", "03")
        assert fetched is failed
        assert extraction is None
