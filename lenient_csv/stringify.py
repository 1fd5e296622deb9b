"""
Turn tables back into delimited text.

Accepts the same shapes ``parse`` produces (``ParsedTable`` or a mapping
with ``header``/``rows``/``mappedRows``) as well as a plain list of rows
whose first row is the header.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .models import StringifyOptions
from .rules import LINE_FEED

logger = logging.getLogger(__name__)


class InvalidTableError(TypeError):
    """Raised when stringify is handed something that is not a table."""


def _is_row(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _text(cell: Any) -> str:
    if cell is None:
        return ""
    return cell if isinstance(cell, str) else str(cell)


def _row(row: Any, position: int) -> List[str]:
    if not _is_row(row):
        raise InvalidTableError(f"Row {position} is {type(row).__name__}, expected a list of cells")
    return [_text(cell) for cell in row]


def _unpack(table: Any) -> Tuple[Sequence[Any], Sequence[Any], Sequence[Any]]:
    if isinstance(table, BaseModel):
        return (
            getattr(table, "header", []),
            getattr(table, "rows", []),
            getattr(table, "mapped_rows", []),
        )

    if isinstance(table, Mapping):
        mapped_rows = table.get("mappedRows", table.get("mapped_rows"))
        return table.get("header") or [], table.get("rows") or [], mapped_rows or []

    if _is_row(table):
        if not table:
            return [], [], []
        return table[0], table[1:], []

    raise InvalidTableError(
        f"Cannot stringify {type(table).__name__}; expected a list of rows "
        "or a mapping with header, rows and mappedRows"
    )


def collect_rows(table: Any) -> List[List[str]]:
    """
    Return header plus body rows as fresh lists of strings.

    When no body rows are given but mapped rows are, each mapped row is laid
    out in header order, missing keys becoming empty cells.
    """
    header, rows, mapped_rows = _unpack(table)

    header_row = _row(header, 0)
    if not rows and mapped_rows:
        body = []
        for position, mapped in enumerate(mapped_rows, start=1):
            if not isinstance(mapped, Mapping):
                raise InvalidTableError(
                    f"Mapped row {position} is {type(mapped).__name__}, expected a mapping"
                )
            body.append([_text(mapped.get(key, "")) for key in header_row])
    else:
        body = [_row(row, position) for position, row in enumerate(rows, start=1)]

    return [header_row] + body


def trim_empty(all_rows: List[List[str]], max_cell_count: int) -> int:
    """
    Drop trailing empty rows, then trailing empty columns, in place.

    Returns the column count left over.
    """
    while all_rows and all(cell == "" for cell in all_rows[-1]):
        all_rows.pop()

    while max_cell_count > 0 and all(
        len(row) < max_cell_count or row[max_cell_count - 1] == "" for row in all_rows
    ):
        for row in all_rows:
            del row[max_cell_count - 1:max_cell_count]
        max_cell_count -= 1

    return max_cell_count


def quote_cell(cell: str, quote: str, separator: str) -> str:
    if LINE_FEED in cell or quote in cell or separator in cell:
        return quote + cell.replace(quote, quote * 2) + quote
    return cell


def format_row(row: Sequence[str], max_cell_count: int, quote: str, separator: str) -> str:
    cells = (row[index] if index < len(row) else "" for index in range(max_cell_count))
    return separator.join(quote_cell(cell, quote, separator) for cell in cells)


def stringify(table: Any, options: Optional[StringifyOptions] = None, **overrides: Any) -> str:
    """
    Serialize ``table`` to text.

    Every row is padded to the widest row. Cells holding a line feed, the
    quote or the separator are quoted with inner quotes doubled.

    Raises:
        InvalidTableError: ``table`` is neither a list of rows nor a
            header/rows/mappedRows structure.
    """
    if options is None:
        options = StringifyOptions(**overrides)
    elif overrides:
        options = StringifyOptions(**{**options.model_dump(), **overrides})

    all_rows = collect_rows(table)
    max_cell_count = max((len(row) for row in all_rows), default=0)

    if options.trim_empty:
        max_cell_count = trim_empty(all_rows, max_cell_count)

    lines = [format_row(row, max_cell_count, options.quote, options.separator) for row in all_rows]
    text = options.line_end.join(lines)
    if options.trailing_line_end:
        text += options.line_end

    logger.debug("Stringified %d rows x %d columns", len(lines), max_cell_count)
    return text
