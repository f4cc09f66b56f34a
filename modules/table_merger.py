"""
Portfolio Capture - Table Extraction & Symbol Merge

Turns rendered portfolio HTML into per-tab row records and merges them
into one entry per ticker symbol. Field names are prefixed by the
lowercased tab name so tabs never collide.

Everything here is pure: HTML in, dicts out, no browser or file access.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from bs4 import BeautifulSoup

# Module logger
merger_logger = logging.getLogger("portfolio_capture.table_merger")

# -----------------------------------------------------------------------------
# Selectors
# -----------------------------------------------------------------------------
TABLE_SELECTOR = 'table, [role="table"]'
HEADER_SELECTOR = 'th, [role="columnheader"]'
ROW_SELECTOR = 'tr, [role="row"]'
CELL_SELECTOR = 'td, [role="cell"]'

SYMBOL_FIELD = "Symbol"

Record = dict[str, str]
PortfolioEntry = dict[str, object]
PortfolioData = dict[str, PortfolioEntry]


# -----------------------------------------------------------------------------
# Data Models
# -----------------------------------------------------------------------------
@dataclass
class Table:
    """Header labels plus row cell text, both in document order."""
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def field_name(self, index: int) -> str:
        """Header at a column position, or a synthesized ``column_<i>``."""
        if index < len(self.headers) and self.headers[index]:
            return self.headers[index]
        return f"column_{index}"

    def records(self) -> list[Record]:
        """
        Map each row's cells onto headers by position.

        Rows with no cells produce no record; duplicate header labels
        let the later cell win.
        """
        results = []
        for cells in self.rows:
            if not cells:
                continue
            record: Record = {}
            for index, text in enumerate(cells):
                record[self.field_name(index)] = text
            results.append(record)
        return results


# -----------------------------------------------------------------------------
# Extraction
# -----------------------------------------------------------------------------
def _text(element) -> str:
    return element.get_text().strip()


def extract_tables(html: str) -> list[Table]:
    """
    Parse every table-like structure out of rendered page HTML.

    Header cells and data cells are collected with descendant selectors,
    so a table's headers include those of any nested table. A row with
    zero data cells (typically the header row) is skipped entirely.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "lxml")
    tables = []

    for node in soup.select(TABLE_SELECTOR):
        headers = [_text(cell) for cell in node.select(HEADER_SELECTOR)]
        rows = []
        for row in node.select(ROW_SELECTOR):
            cells = row.select(CELL_SELECTOR)
            if not cells:
                continue
            rows.append([_text(cell) for cell in cells])
        tables.append(Table(headers=headers, rows=rows))

    return tables


def extract_records(html: str) -> list[Record]:
    """Flatten all tables on a page into one list of row records."""
    records: list[Record] = []
    for table in extract_tables(html):
        records.extend(table.records())
    return records


# -----------------------------------------------------------------------------
# Symbol Merge
# -----------------------------------------------------------------------------
class TableMerger:
    """
    Accumulates per-tab records into symbol-keyed portfolio entries.

    Usage:
        merger = TableMerger()
        merger.merge("Summary", extract_records(summary_html))
        merger.merge("Holdings", extract_records(holdings_html))
        merger.data  # {"AAPL": {"symbol": "AAPL", "summary_Price": ...}}
    """

    def __init__(self, data: Optional[PortfolioData] = None):
        self.data: PortfolioData = data if data is not None else {}
        # Rows seen per tab, including ones dropped for lacking a symbol
        self.row_counts: dict[str, int] = {}
        self.dropped_counts: dict[str, int] = {}

    def merge(self, tab_name: str, records: Iterable[Mapping[str, str]]) -> int:
        """
        Merge one tab's records into the portfolio.

        Returns the number of records that carried a symbol.
        """
        prefix = tab_name.lower()
        seen = 0
        merged = 0

        for row in records:
            seen += 1
            symbol = row.get(SYMBOL_FIELD)
            if not symbol:
                continue

            entry = self.data.get(symbol)
            if entry is None:
                entry = {"symbol": symbol}
                self.data[symbol] = entry

            for key, value in row.items():
                if key == SYMBOL_FIELD:
                    continue
                entry[f"{prefix}_{key}"] = value
            merged += 1

        self.row_counts[tab_name] = self.row_counts.get(tab_name, 0) + seen
        self.dropped_counts[tab_name] = self.dropped_counts.get(tab_name, 0) + seen - merged

        if seen != merged:
            merger_logger.debug(f"{tab_name}: dropped {seen - merged} rows without a symbol")

        return merged

    def merge_html(self, tab_name: str, html: str) -> int:
        """Extract records from rendered HTML and merge them. Returns rows found."""
        records = extract_records(html)
        self.merge(tab_name, records)
        return len(records)

    def field_counts(self) -> dict[str, int]:
        """Fields per symbol, excluding the ``symbol`` key itself."""
        return {symbol: len(entry) - 1 for symbol, entry in self.data.items()}


def merge_tabs(tab_records: Mapping[str, Iterable[Mapping[str, str]]],
               tab_order: Optional[Iterable[str]] = None) -> PortfolioData:
    """
    Merge several tabs in one call.

    Tabs are processed in ``tab_order`` when given (names missing from
    ``tab_records`` are skipped), otherwise in mapping order.
    """
    merger = TableMerger()
    order = list(tab_order) if tab_order is not None else list(tab_records)
    for tab_name in order:
        if tab_name not in tab_records:
            continue
        merger.merge(tab_name, tab_records[tab_name])
    return merger.data
