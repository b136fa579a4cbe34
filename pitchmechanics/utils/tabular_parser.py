"""
Tabular text parsing for motion capture exports.

Capture software exports joint data as comma-separated, tab-separated or
whitespace-aligned text, sometimes with a header row and sometimes with
quoted cells. This module turns such a payload into an ordered list of rows of
cells. It never raises on content: rows that cannot be used simply end up with
fewer numeric values and are rejected by the extractors downstream.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np
import pandas as pd

from .diagnostics import DiagnosticEvent, DiagnosticKind

# Strict numeric literal: optional sign, digits with optional fraction (or a
# bare fraction), optional exponent.
_NUMERIC_LITERAL = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')

_CELL_SEPARATORS = (',', '\t')


class TableFormat(Enum):
    DELIMITED = 'delimited'
    WHITESPACE = 'whitespace'


@dataclass(frozen=True)
class FormatInfo:
    """Result of format detection."""
    format: TableFormat
    separator: Optional[str] = None

    @property
    def is_delimited(self) -> bool:
        return self.format == TableFormat.DELIMITED


@dataclass
class ParsedTable:
    """Rows of cells from one payload, header removed."""
    rows: List[List[str]]
    format_info: FormatInfo
    header: Optional[List[str]] = None
    line_count: int = 0

    @property
    def has_header(self) -> bool:
        return self.header is not None

    def to_dataframe(self) -> pd.DataFrame:
        """
        Numeric view of the table.

        Ragged rows are padded with NaN; header cells become column names when
        the header is as wide as the widest row.
        """
        if not self.rows:
            return pd.DataFrame()
        width = max(len(row) for row in self.rows)
        values = np.full((len(self.rows), width), np.nan)
        for i, row in enumerate(self.rows):
            for j, cell in enumerate(row):
                value = _to_float(cell)
                if value is not None:
                    values[i, j] = value
        columns = self.header if self.header and len(self.header) == width else None
        return pd.DataFrame(values, columns=columns)


def detect_format(content: str) -> FormatInfo:
    """
    Decide how a payload is separated by looking at its first line only.

    A comma selects comma-delimited, otherwise a tab selects tab-delimited,
    otherwise the payload is treated as whitespace-separated.
    """
    first_line = _normalize_newlines(content).strip().split('\n')[0]
    if ',' in first_line:
        return FormatInfo(TableFormat.DELIMITED, ',')
    if '\t' in first_line:
        return FormatInfo(TableFormat.DELIMITED, '\t')
    return FormatInfo(TableFormat.WHITESPACE)


def split_delimited_line(line: str) -> List[str]:
    """
    Split one delimited line into trimmed cells.

    Commas and tabs both separate cells outside quotes. A quoted cell may
    contain separators, and a doubled quote inside quotes is a literal quote.
    """
    cells = []
    current = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char in _CELL_SEPARATORS and not in_quotes:
            cells.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    cells.append(''.join(current).strip())
    return cells


def is_numeric_literal(cell: str) -> bool:
    return bool(_NUMERIC_LITERAL.match(cell.strip()))


def has_header_row(rows: List[List[str]]) -> bool:
    """A header is present when any non-empty cell of the first row is not a number."""
    if not rows:
        return False
    return any(cell and not is_numeric_literal(cell) for cell in rows[0])


def parse_table(content: str, format_info: Optional[FormatInfo] = None,
                diagnostics=None, source: str = "tabular_parser") -> ParsedTable:
    """
    Parse a raw payload into rows of cells.

    Args:
        content: Raw file text
        format_info: Pre-detected format; detected from ``content`` if None
        diagnostics: Optional sink receiving format and header events
        source: Stage name attached to emitted events

    Returns:
        ParsedTable with blank lines dropped and any header row removed
    """
    if format_info is None:
        format_info = detect_format(content)

    lines = [line for line in _normalize_newlines(content).strip().split('\n') if line.strip()]
    if format_info.is_delimited:
        rows = [split_delimited_line(line) for line in lines]
    else:
        rows = [line.split() for line in lines]

    header = None
    if has_header_row(rows):
        header = rows.pop(0)

    if diagnostics is not None:
        diagnostics.emit(DiagnosticEvent(
            DiagnosticKind.FORMAT_DETECTED, source,
            f"Detected {format_info.format.value} format"
            + (f" (separator {format_info.separator!r})" if format_info.separator else ""),
            details={'format': format_info.format.value, 'separator': format_info.separator,
                     'rows': len(rows)},
        ))
        if header is not None:
            diagnostics.emit(DiagnosticEvent(
                DiagnosticKind.HEADER_SKIPPED, source,
                f"Header row detected: {header[:5]}{'...' if len(header) > 5 else ''}",
                details={'header': list(header)},
            ))

    return ParsedTable(rows=rows, format_info=format_info, header=header, line_count=len(lines))


def to_numeric_values(row: List[str]) -> List[float]:
    """
    Numeric values of a row, in column order.

    Cells that ``float`` accepts are kept, including ``nan`` and ``inf`` so that
    later joints keep their column alignment; anything else is skipped.
    """
    values = []
    for cell in row:
        value = _to_float(cell)
        if value is not None:
            values.append(value)
    return values


def _to_float(cell: str) -> Optional[float]:
    try:
        return float(cell)
    except (TypeError, ValueError):
        return None


def _normalize_newlines(content: str) -> str:
    return content.replace('\r\n', '\n').replace('\r', '\n')
