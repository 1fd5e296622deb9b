from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .rules import (
    ALLOWED_LINE_ENDS,
    DEFAULT_LINE_END,
    DEFAULT_QUOTE,
    DEFAULT_SEPARATOR,
    DEFAULT_SEPARATORS,
    RESERVED_CHARACTERS,
)

logger = logging.getLogger(__name__)


def _is_dialect_character(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 1 and value not in RESERVED_CHARACTERS


class LineBreakPolicy(str, Enum):
    strict = "strict"  # \r\n and \r
    loose = "loose"  # additionally \n\r


class TrailingLineFeedPolicy(str, Enum):
    require = "require"
    ignore = "ignore"


class SpaceAroundQuotesPolicy(str, Enum):
    ignore = "ignore"
    preserve = "preserve"


class ParseOptions(BaseModel):
    """
    Dialect used for one parse call.

    Invalid quote or separator values are dropped instead of rejected, so
    building options from user input never fails on them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    quote: Optional[str] = Field(default=DEFAULT_QUOTE, examples=['"', "'"])
    separators: Tuple[str, ...] = Field(default=DEFAULT_SEPARATORS, examples=[[",", ";", "\t"]])
    line_break_policy: LineBreakPolicy = Field(default=LineBreakPolicy.strict, alias="lineBreakPolicy")
    trailing_line_feed_policy: TrailingLineFeedPolicy = Field(
        default=TrailingLineFeedPolicy.ignore, alias="trailingLineFeedPolicy"
    )
    space_around_quotes_policy: SpaceAroundQuotesPolicy = Field(
        default=SpaceAroundQuotesPolicy.ignore, alias="spaceAroundQuotesPolicy"
    )
    taint_emulation: bool = Field(default=False, alias="taintEmulation")

    @field_validator("quote", mode="before")
    @classmethod
    def _filter_quote(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not _is_dialect_character(value):
            logger.warning("Ignoring invalid quote %r; parsing without a quote character", value)
            return None
        return value

    @field_validator("separators", mode="before")
    @classmethod
    def _filter_separators(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if not isinstance(value, Iterable):
            logger.warning("Ignoring invalid separators %r", value)
            return ()
        candidates = list(value)

        kept: List[str] = []
        for candidate in candidates:
            if not _is_dialect_character(candidate):
                logger.warning("Ignoring invalid separator %r", candidate)
                continue
            if candidate not in kept:
                kept.append(candidate)
        return tuple(kept)

    @property
    def taint_active(self) -> bool:
        """Taint emulation only applies when the quote doubles as a separator."""
        return self.taint_emulation and self.quote is not None and self.quote in self.separators


class StringifyOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    quote: str = Field(default=DEFAULT_QUOTE)
    separator: str = Field(default=DEFAULT_SEPARATOR)
    line_end: str = Field(default=DEFAULT_LINE_END, alias="lineEnd", examples=["\n", "\r\n"])
    trim_empty: bool = Field(default=True, alias="trimEmpty")
    trailing_line_end: bool = Field(default=False, alias="trailingLineEnd")

    @field_validator("quote", mode="before")
    @classmethod
    def _fallback_quote(cls, value: Any) -> str:
        if not _is_dialect_character(value):
            logger.warning("Ignoring invalid quote %r; using %r", value, DEFAULT_QUOTE)
            return DEFAULT_QUOTE
        return value

    @field_validator("separator", mode="before")
    @classmethod
    def _fallback_separator(cls, value: Any) -> str:
        if not _is_dialect_character(value):
            logger.warning("Ignoring invalid separator %r; using %r", value, DEFAULT_SEPARATOR)
            return DEFAULT_SEPARATOR
        return value

    @field_validator("line_end", mode="before")
    @classmethod
    def _fallback_line_end(cls, value: Any) -> str:
        if value not in ALLOWED_LINE_ENDS:
            logger.warning("Unsupported line end %r; using %r", value, DEFAULT_LINE_END)
            return DEFAULT_LINE_END
        return value


class ParsedTable(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    header: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)
    mapped_rows: List[Dict[str, str]] = Field(default_factory=list, alias="mappedRows")


class TableDocument(BaseModel):
    """Loosely typed table accepted by the stringify endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    header: List[Any] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)
    mapped_rows: List[Dict[str, Any]] = Field(default_factory=list, alias="mappedRows")


class ParseTextRequest(BaseModel):
    text: str
    options: ParseOptions = Field(default_factory=ParseOptions)


class StringifyRequest(BaseModel):
    table: Union[List[List[Any]], TableDocument]
    options: StringifyOptions = Field(default_factory=StringifyOptions)


class StringifyResponse(BaseModel):
    text: str


class ReportSummary(BaseModel):
    rows: int = 0
    columns: int = 0
    encoding: Dict[str, Any] = Field(default_factory=dict)
    newlines: Dict[str, int] = Field(default_factory=dict)


class ParseResponse(BaseModel):
    table: ParsedTable
    report: ReportSummary


class HealthResponse(BaseModel):
    ok: bool = True
