"""
Text to table.

``parse`` chains the pipeline: preprocess the text, tokenize it into raw
cells, strip the quoting off each cell, then split header from body and key
every body row by the header. Any text yields a table; there is no error
path for malformed input.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .cells import map_rows, normalize_table
from .models import ParsedTable, ParseOptions, TrailingLineFeedPolicy
from .normalize import preprocess
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def parse(text: str, options: Optional[ParseOptions] = None, **overrides: Any) -> ParsedTable:
    """
    Parse delimited text into header, rows and header-keyed mapped rows.

    Example:
        >>> table = parse("Country,Capital City\\nGermany,Berlin")
        >>> table.header
        ['Country', 'Capital City']
        >>> table.mapped_rows
        [{'Country': 'Germany', 'Capital City': 'Berlin'}]
    """
    if options is None:
        options = ParseOptions(**overrides)
    elif overrides:
        options = ParseOptions(**{**options.model_dump(), **overrides})

    prepared = preprocess(text, options.line_break_policy, options.trailing_line_feed_policy)
    raw = tokenize(
        prepared,
        quote=options.quote,
        separators=options.separators,
        keep_final_line_feed=options.trailing_line_feed_policy == TrailingLineFeedPolicy.require,
        taint_enabled=options.taint_active,
    )

    header, *rows = normalize_table(raw, options.quote, options.space_around_quotes_policy)
    logger.debug("Parsed %d body rows under a %d column header", len(rows), len(header))

    return ParsedTable(header=header, rows=rows, mapped_rows=map_rows(header, rows))
