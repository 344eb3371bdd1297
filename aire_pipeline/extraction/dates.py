"""
Date helpers for the table extractor.

The network renders dates in whatever order the page template of the day
uses (DD/MM/YYYY, YYYY-MM-DD, MM/DD/YY ...). Order is guessed from magnitude:
a part larger than 31 can only be the year.
"""

import logging
import re
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)

_DATE_TOKEN = re.compile(r"(\d{1,4})\s*[/\-.]\s*(\d{1,4})\s*[/\-.]\s*(\d{1,4})")
_DAY_IN_TEXT = re.compile(r"\b(?:d[ií]a|day)\s*:?\s*(\d{1,2})\b", re.IGNORECASE)


def make_date(year: int, month: int, day: int) -> Optional[date]:
    """Return the calendar date, or None if the parts do not form one."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _expand_year(year: int) -> int:
    return 2000 + year if year < 100 else year


def parse_date_token(text: str) -> Optional[date]:
    """
    Parse the first D/M/Y-shaped token found in ``text``.

    Year first  → Y/M/D.
    Year last   → D/M/Y, or M/D/Y when only that reading is a real date.
    No part > 31 → M/D/Y with a two-digit year meaning 20YY.
    """
    match = _DATE_TOKEN.search(text or "")
    if not match:
        return None

    a, b, c = (int(part) for part in match.groups())

    if a > 31:
        return make_date(a, b, c)

    if c > 31:
        parsed = make_date(c, b, a)
        if parsed is None:
            parsed = make_date(c, a, b)
        return parsed

    if b > 31:
        logger.debug("Year in middle position, ignoring date token %r", match.group(0))
        return None

    return make_date(_expand_year(c), a, b)


def find_day_in_text(text: str) -> Optional[str]:
    """Find a "Día: N" / "day N" fragment and return N zero-padded."""
    match = _DAY_IN_TEXT.search(text or "")
    if not match:
        return None
    return f"{int(match.group(1)):02d}"
