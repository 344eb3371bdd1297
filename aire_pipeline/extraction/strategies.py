"""
Table selection strategies.

The results page carries several tables (navigation, legends, the data grid)
and the grid's position changes between pollutants and over time. Each
strategy looks at every table and returns the index of its pick, or None to
let the next strategy try. ``select_table`` runs them in priority order.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from bs4 import Tag

logger = logging.getLogger(__name__)

WIDE_HEADER_MIN_TH = 5


@dataclass(frozen=True)
class TableStrategy:
    """A named table picker."""
    name: str
    pick: Callable[[Sequence[Tag]], Optional[int]]

    def __call__(self, tables: Sequence[Tag]) -> Optional[int]:
        return self.pick(tables)


def table_rows(table: Tag) -> List[Tag]:
    """Rows that belong to this table, not to tables nested inside it."""
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def row_cells(row: Tag) -> List[Tag]:
    """Direct th/td children of a row, in column order."""
    return row.find_all(["th", "td"], recursive=False)


def _most_rows(tables: Sequence[Tag]) -> Optional[int]:
    best_index, best_count = None, 0
    for index, table in enumerate(tables):
        count = len(table_rows(table))
        if count > best_count:
            best_index, best_count = index, count
    return best_index


def _wide_header(tables: Sequence[Tag]) -> Optional[int]:
    for index, table in enumerate(tables):
        first_row = table.find("tr")
        if first_row is not None and len([c for c in row_cells(first_row) if c.name == "th"]) > WIDE_HEADER_MIN_TH:
            return index
    return None


def _most_data_cells(tables: Sequence[Tag]) -> Optional[int]:
    best_index, best_count = None, 0
    for index, table in enumerate(tables):
        for row in table_rows(table):
            count = len([c for c in row_cells(row) if c.name == "td"])
            if count:
                if count > best_count:
                    best_index, best_count = index, count
                break
    return best_index


def _positional(tables: Sequence[Tag]) -> Optional[int]:
    if len(tables) > 1:
        return 1
    if tables:
        return 0
    return None


MOST_ROWS = TableStrategy("most_rows", _most_rows)
WIDE_HEADER = TableStrategy("wide_header", _wide_header)
MOST_DATA_CELLS = TableStrategy("most_data_cells", _most_data_cells)
POSITIONAL = TableStrategy("positional", _positional)

DEFAULT_TABLE_STRATEGIES: Tuple[TableStrategy, ...] = (
    MOST_ROWS,
    WIDE_HEADER,
    MOST_DATA_CELLS,
    POSITIONAL,
)


def select_table(
    tables: Sequence[Tag],
    strategies: Sequence[TableStrategy] = DEFAULT_TABLE_STRATEGIES,
) -> Tuple[Optional[int], Optional[str]]:
    """
    Return (table index, strategy name) from the first strategy that picks a
    table, or (None, None) when none does.
    """
    for strategy in strategies:
        index = strategy(tables)
        if index is not None:
            logger.debug("Table %d selected by strategy %s", index, strategy.name)
            return index, strategy.name
    return None, None


def candidate_order(tables: Sequence[Tag], selected: int) -> List[int]:
    """
    The selected table first, then the others by own row count (largest
    first, document order on ties). Used when the selected table turns out to
    be a layout wrapper with no usable header.
    """
    others = sorted(
        (index for index in range(len(tables)) if index != selected),
        key=lambda index: -len(table_rows(tables[index])),
    )
    return [selected] + others
