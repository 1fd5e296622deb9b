"""
Cell level cleanup after tokenizing, and header based row mapping.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, List, Optional, Pattern, Sequence

from .models import SpaceAroundQuotesPolicy
from .rules import SPACE

SPACE_QUOTED = re.compile(r" (.*) ", re.DOTALL)


@lru_cache(maxsize=32)
def _quoted_pattern(quote: str) -> Pattern[str]:
    q = re.escape(quote)
    return re.compile(rf" *{q}(.*){q}( *)", re.DOTALL)


def normalize_cell(
    cell: str,
    quote: Optional[str],
    policy: SpaceAroundQuotesPolicy = SpaceAroundQuotesPolicy.ignore,
) -> str:
    """
    Strip the quoting from one raw cell and undo doubled quotes.

    Only a cell that is quoted as a whole is touched. Leading spaces before
    the opening quote always go; trailing spaces after the closing quote are
    kept under the ``preserve`` policy. When the quote is a space the cell
    must start and end with exactly that one space.
    """
    if not quote:
        return cell

    if quote != SPACE:
        match = _quoted_pattern(quote).fullmatch(cell)
        if match is None:
            return cell
        content = match.group(1)
        if policy == SpaceAroundQuotesPolicy.preserve:
            content += match.group(2)
    else:
        match = SPACE_QUOTED.fullmatch(cell)
        if match is None:
            return cell
        content = match.group(1)

    return content.replace(quote * 2, quote)


def normalize_table(
    table: Sequence[Sequence[str]],
    quote: Optional[str],
    policy: SpaceAroundQuotesPolicy = SpaceAroundQuotesPolicy.ignore,
) -> List[List[str]]:
    return [[normalize_cell(cell, quote, policy) for cell in row] for row in table]


def map_row(header: Sequence[str], row: Sequence[str]) -> Dict[str, str]:
    """
    Key one body row by the header.

    Missing cells map to an empty string and cells past the header are left
    out. With duplicate header names the rightmost column wins.
    """
    mapped: Dict[str, str] = {}
    for index, key in enumerate(header):
        mapped[key] = row[index] if index < len(row) else ""
    return mapped


def map_rows(header: Sequence[str], rows: Sequence[Sequence[str]]) -> List[Dict[str, str]]:
    return [map_row(header, row) for row in rows]
