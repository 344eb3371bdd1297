"""
Table Extractor & Record Builder.

Turns a results page from the monitoring network into a flat list of typed
hourly observations. The page has no stable schema: the data grid moves
between tables, the header row is not always the first row, and missing
readings are rendered with a handful of placeholder tokens. Extraction never
raises; every failure mode degrades to fewer observations and is reported
through ``ExtractionResult.status``.
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from zoneinfo import ZoneInfo

from bs4 import BeautifulSoup, Tag

from aire_pipeline import config
from aire_pipeline.extraction.dates import find_day_in_text, make_date, parse_date_token
from aire_pipeline.extraction.strategies import (
    DEFAULT_TABLE_STRATEGIES,
    TableStrategy,
    candidate_order,
    row_cells,
    select_table,
    table_rows,
)
from aire_pipeline.ingestion.parameters import to_canonical_code

logger = logging.getLogger(__name__)

MISSING_TOKENS = frozenset({"", "-", "n/d", "nr", "nv", "**", "na", "n/a"})
HEADER_SCAN_ROWS = 3
DEFAULT_DAY = "01"
NEXT_CANDIDATE = "next_candidate"  # strategy label when the selected table had no header

_HOUR_TOKEN = re.compile(r"\d+")
_NON_NUMERIC = re.compile(r"[^\d.]")
_YEAR = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class Observation:
    """One station's reading for one pollutant at one hour."""
    date: str            # YYYY-MM-DD
    hour: str            # "00".."23"
    station: str
    parameter: str       # canonical pollutant code
    value: Optional[float] = None
    raw_value: Optional[str] = None

    @property
    def is_missing(self) -> bool:
        return self.value is None

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "hour": self.hour,
            "station": self.station,
            "parameter": self.parameter,
            "value": self.value,
            "rawValue": self.raw_value,
        }


class ExtractionStatus(str, enum.Enum):
    OK = "ok"
    INVALID_REQUEST = "invalid_request"
    NO_TABLE = "no_table"
    NO_HEADER = "no_header"
    NO_STATIONS = "no_stations"
    NO_ROWS = "no_rows"
    ERROR = "error"


@dataclass
class ExtractionResult:
    """Outcome of one extraction call."""
    status: ExtractionStatus
    observations: List[Observation] = field(default_factory=list)
    reason: Optional[str] = None
    table_index: Optional[int] = None
    table_strategy: Optional[str] = None
    header_row_index: Optional[int] = None
    stations: Dict[str, int] = field(default_factory=dict)
    skipped_rows: int = 0

    @property
    def ok(self) -> bool:
        return self.status == ExtractionStatus.OK

    def __str__(self) -> str:
        return (
            f"[{self.status.value}] observations={len(self.observations)} "
            f"stations={len(self.stations)} skipped_rows={self.skipped_rows}"
            + (f" reason={self.reason}" if self.reason else "")
        )


@dataclass
class _Header:
    row_index: int
    hour_index: int
    date_index: Optional[int]
    stations: Dict[str, int]


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _cell_text(cell: Tag) -> str:
    """Cell text with internal whitespace collapsed."""
    return " ".join(cell.get_text(" ", strip=True).split())


def parse_hour(text: str) -> Optional[int]:
    """First integer in the hour cell, if it is a valid hour of day."""
    match = _HOUR_TOKEN.search(text or "")
    if not match:
        return None
    hour = int(match.group(0))
    if 0 <= hour <= 23:
        return hour
    return None


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def parse_cell(text: str) -> Tuple[bool, Optional[float], Optional[str]]:
    """
    Interpret a station cell.

    Returns (emit, value, raw_value). Missing-data tokens give
    (True, None, TOKEN); numbers give (True, value, str(value)); anything
    that does not survive numeric cleanup gives (False, None, None).
    """
    token = (text or "").strip()
    if token.lower() in MISSING_TOKENS:
        return True, None, token.upper()

    cleaned = _NON_NUMERIC.sub("", token)
    try:
        value = float(cleaned)
    except ValueError:
        return False, None, None
    return True, value, _format_number(value)


# ---------------------------------------------------------------------------
# Header resolution
# ---------------------------------------------------------------------------

def _resolve_header(rows: Sequence[Tag], specific_station: Optional[str]) -> Optional[_Header]:
    """
    First row among the leading rows with an hour label and station columns.
    Title rows such as "Concentraciones horarias" also match "hora"; such a
    row is only used when no better candidate exists.
    """
    fallback: Optional[_Header] = None
    for row_index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        labels = [_cell_text(cell) for cell in row_cells(row)]

        hour_index: Optional[int] = None
        date_index: Optional[int] = None
        for index, label in enumerate(labels):
            lowered = label.lower()
            if hour_index is None and "hora" in lowered:
                hour_index = index
            elif date_index is None and "fecha" in lowered:
                date_index = index

        if hour_index is None:
            continue

        stations: Dict[str, int] = {}
        for index in range(hour_index + 1, len(labels)):
            label = labels[index]
            if not label or index == date_index:
                continue
            if specific_station is not None and label != specific_station:
                continue
            if label in stations:
                logger.debug("Duplicate station column %r at %d ignored", label, index)
                continue
            stations[label] = index

        header = _Header(row_index, hour_index, date_index, stations)
        if stations:
            return header
        if fallback is None:
            fallback = header
    return fallback


def _day_context(year: int, month: int, specific_day: Optional[str], page_text: str) -> date:
    day: Optional[str] = None
    if specific_day is not None and str(specific_day).strip().isdigit():
        day = f"{int(str(specific_day).strip()):02d}"
    else:
        day = find_day_in_text(page_text)

    resolved = make_date(year, month, int(day)) if day else None
    if resolved is None:
        if day is not None:
            logger.warning("Day %s is not valid for %04d-%02d, using %s", day, year, month, DEFAULT_DAY)
        resolved = make_date(year, month, int(DEFAULT_DAY))
    return resolved


def _hour_of(now: datetime) -> datetime:
    if now.tzinfo is not None:
        now = now.astimezone(ZoneInfo(config.AIRE_TIMEZONE)).replace(tzinfo=None)
    return now.replace(minute=0, second=0, microsecond=0)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_with_status(
    markup: Union[str, bytes, None],
    parameter: str,
    year: str,
    month: str,
    specific_day: Optional[str] = None,
    specific_hour: Optional[int] = None,
    specific_station: Optional[str] = None,
    clock: Optional[Callable[[], datetime]] = None,
    strategies: Sequence[TableStrategy] = DEFAULT_TABLE_STRATEGIES,
) -> ExtractionResult:
    """
    Extract observations from a results page.

    Args:
        markup: Raw HTML as returned by the network (may be empty/truncated).
        parameter: Pollutant code the caller asked for; stored canonical.
        year: 4-digit year of the request.
        month: Month of the request ("3" or "03").
        specific_day: Day filter; also the date context when the table has
                      no date column.
        specific_hour: Keep only rows for this hour.
        specific_station: Keep only the column whose header equals this.
        clock: Returns "now" for the future-row filter. Read once.
        strategies: Table selection strategies in priority order.

    Returns:
        ExtractionResult; never raises.
    """
    year_text = str(year or "").strip()
    month_text = str(month or "").strip()
    if not _YEAR.match(year_text) or not month_text.isdigit() or not 1 <= int(month_text) <= 12:
        logger.error("Invalid request period year=%r month=%r", year, month)
        return ExtractionResult(
            status=ExtractionStatus.INVALID_REQUEST,
            reason=f"invalid year/month: {year!r}/{month!r}",
        )

    canonical = to_canonical_code(parameter)
    year_num, month_num = int(year_text), int(month_text)
    observations: List[Observation] = []
    result = ExtractionResult(status=ExtractionStatus.OK, observations=observations)

    try:
        now_hour = _hour_of((clock or config.network_now)())
        soup = BeautifulSoup(markup or "", "html.parser")
        tables = soup.find_all("table")
        if not tables:
            logger.warning("No tables found in the page (%s %s-%s)", canonical, year_text, month_text)
            result.status = ExtractionStatus.NO_TABLE
            result.reason = "no table elements in markup"
            return result

        table_index, strategy_name = select_table(tables, strategies)
        if table_index is None:
            logger.warning("Data table not found among %d tables", len(tables))
            result.status = ExtractionStatus.NO_TABLE
            result.reason = "no table selected by any strategy"
            return result
        result.table_index = table_index
        result.table_strategy = strategy_name

        header: Optional[_Header] = None
        rows: List[Tag] = []
        for index in candidate_order(tables, table_index):
            candidate_rows = table_rows(tables[index])
            candidate = _resolve_header(candidate_rows, specific_station)
            if candidate is None:
                continue
            if header is None or candidate.stations:
                header, rows = candidate, candidate_rows
                result.table_index = index
                result.table_strategy = strategy_name if index == table_index else NEXT_CANDIDATE
            if candidate.stations:
                break

        if header is None:
            logger.warning("No 'Hora' header in the first %d rows of any of %d tables", HEADER_SCAN_ROWS, len(tables))
            result.status = ExtractionStatus.NO_HEADER
            result.reason = "hour column not found"
            return result
        if result.table_index != table_index:
            logger.info("Table %d has no usable header, using table %d", table_index, result.table_index)
        table_index, strategy_name = result.table_index, result.table_strategy
        result.header_row_index = header.row_index
        result.stations = dict(header.stations)

        if not header.stations:
            if specific_station is not None:
                logger.warning("Station %r not present in table header", specific_station)
            else:
                logger.warning("No station headers found in the table")
            result.status = ExtractionStatus.NO_STATIONS
            result.reason = "no station columns"
            return result

        logger.info(
            "Table %d (%s): header row %d, %d stations: %s",
            table_index, strategy_name, header.row_index,
            len(header.stations), ", ".join(header.stations),
        )

        context = _day_context(year_num, month_num, specific_day, soup.get_text(" "))

        for row in rows[header.row_index + 1:]:
            cells = row_cells(row)
            if not cells:
                continue

            if header.date_index is not None and header.date_index < len(cells):
                row_date = parse_date_token(_cell_text(cells[header.date_index]))
                if row_date is not None:
                    context = row_date

            hour_text = _cell_text(cells[header.hour_index]) if header.hour_index < len(cells) else ""
            hour = parse_hour(hour_text)
            if hour is None:
                logger.debug("Skipping row with invalid hour %r", hour_text)
                result.skipped_rows += 1
                continue

            if specific_hour is not None and hour != int(specific_hour):
                result.skipped_rows += 1
                continue

            if datetime(context.year, context.month, context.day, hour) > now_hour:
                logger.debug("Skipping future row %s %02d:00", context.isoformat(), hour)
                result.skipped_rows += 1
                continue

            date_text = context.isoformat()
            hour_label = f"{hour:02d}"
            for station, column in header.stations.items():
                if column >= len(cells):
                    continue
                emit, value, raw_value = parse_cell(_cell_text(cells[column]))
                if not emit:
                    continue
                observations.append(Observation(
                    date=date_text,
                    hour=hour_label,
                    station=station,
                    parameter=canonical,
                    value=value,
                    raw_value=raw_value,
                ))
    except Exception as e:
        logger.error("Error parsing page after %d observations: %s", len(observations), e)
        result.status = ExtractionStatus.ERROR
        result.reason = str(e)
        return result

    if not observations:
        result.status = ExtractionStatus.NO_ROWS
        result.reason = "no data rows after filtering"

    logger.info("Extracted %d observations for %s %s-%s", len(observations), canonical, year_text, month_text)
    return result


def extract(
    markup: Union[str, bytes, None],
    parameter: str,
    year: str,
    month: str,
    specific_day: Optional[str] = None,
    specific_hour: Optional[int] = None,
    specific_station: Optional[str] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> List[Observation]:
    """Observations only; see ``extract_with_status`` for the outcome details."""
    return extract_with_status(
        markup, parameter, year, month,
        specific_day=specific_day,
        specific_hour=specific_hour,
        specific_station=specific_station,
        clock=clock,
    ).observations
