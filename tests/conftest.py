"""Shared test fixtures and configuration for the Aire Pipeline test suite."""

from datetime import datetime

import pytest


def _row(cells, tag="td"):
    return "<tr>" + "".join(f"<{tag}>{c}</{tag}>" for c in cells) + "</tr>"


def build_page(header, rows, preamble_rows=(), before="", other_tables=""):
    """
    Render a results page like the network's: optional leading tables, then
    the data grid whose header row may be preceded by title rows.
    """
    table = (
        "<table>"
        + "".join(_row(r) for r in preamble_rows)
        + _row(header, tag="th")
        + "".join(_row(r) for r in rows)
        + "</table>"
    )
    return f"<html><body>{before}{other_tables}{table}</body></html>"


@pytest.fixture()
def page():
    """Page builder (see build_page)."""
    return build_page


@pytest.fixture()
def past_clock():
    """A clock far enough ahead that no 2025 row is in the future."""
    return lambda: datetime(2030, 1, 1, 0, 0)
