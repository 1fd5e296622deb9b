"""
Character-level state machine that splits text into raw cells.

The tokenizer expects text that went through ``normalize.preprocess``: every
line break is a single line feed and the text ends with one. Cells come out
exactly as they appear in the input, quotes and padding included; stripping
those is ``cells.normalize_cell``'s job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from .rules import LINE_FEED, SPACE

logger = logging.getLogger(__name__)


class CharacterClass(str, Enum):
    line_feed = "line_feed"
    quote = "quote"
    separator = "separator"
    space = "space"
    other = "other"


class ReducedClass(str, Enum):
    line_feed = "line_feed"
    other = "other"
    quote = "quote"
    separator = "separator"
    space = "space"
    quote_separator = "quote_separator"


class ParserState(str, Enum):
    empty = "empty"  # nothing read for this cell yet
    unsettled = "unsettled"  # only spaces so far
    unquoted = "unquoted"
    open = "open"  # inside a quoted value
    waiting = "waiting"  # quote seen inside a quoted value: escape or close
    closed = "closed"  # quoted value closed, padding may follow
    finished = "finished"
    discarded = "discarded"


class LineTaint(str, Enum):
    none = "none"
    inactive = "inactive"
    active = "active"


S = ParserState
R = ReducedClass

# ``empty`` has no row: it behaves like ``unsettled`` except on a line feed.
TRANSITIONS: Dict[ParserState, Dict[ReducedClass, ParserState]] = {
    S.unsettled: {
        R.line_feed: S.finished,
        R.other: S.unquoted,
        R.quote: S.open,
        R.separator: S.finished,
        R.space: S.unsettled,
        R.quote_separator: S.open,
    },
    S.unquoted: {
        R.line_feed: S.finished,
        R.other: S.unquoted,
        R.quote: S.unquoted,
        R.separator: S.finished,
        R.space: S.unquoted,
        R.quote_separator: S.finished,
    },
    S.open: {
        R.line_feed: S.open,
        R.other: S.open,
        R.quote: S.waiting,
        R.separator: S.open,
        R.space: S.open,
        R.quote_separator: S.waiting,
    },
    S.waiting: {
        R.line_feed: S.finished,
        R.other: S.open,
        R.quote: S.open,
        R.separator: S.finished,
        R.space: S.closed,
        R.quote_separator: S.open,
    },
    S.closed: {
        R.line_feed: S.finished,
        R.other: S.open,
        R.quote: S.closed,
        R.separator: S.finished,
        R.space: S.closed,
        R.quote_separator: S.finished,
    },
}

del S, R


def classify(character: str, quote: Optional[str], separators: Iterable[str]) -> FrozenSet[CharacterClass]:
    """Return every class ``character`` belongs to; a line feed belongs to no other."""
    if character == LINE_FEED:
        return frozenset({CharacterClass.line_feed})

    classes = set()
    if character == quote:
        classes.add(CharacterClass.quote)
    if character in separators:
        classes.add(CharacterClass.separator)
    if character == SPACE:
        classes.add(CharacterClass.space)

    if not classes:
        classes.add(CharacterClass.other)
    return frozenset(classes)


def reduce_classes(classes: FrozenSet[CharacterClass]) -> ReducedClass:
    """
    Collapse overlapping classes to a single transition column.

    A space that is also a quote or a separator acts as that quote or
    separator; a character that is both quote and separator gets its own
    column whether or not it is also a space.
    """
    if len(classes) == 1:
        (only,) = classes
        return ReducedClass(only.value)

    if CharacterClass.quote in classes and CharacterClass.separator in classes:
        return ReducedClass.quote_separator
    # Only a space can overlap a lone quote or separator
    if CharacterClass.quote in classes:
        return ReducedClass.quote
    return ReducedClass.separator


def transition(state: ParserState, reduced: ReducedClass) -> ParserState:
    if state == ParserState.empty:
        if reduced == ReducedClass.line_feed:
            return ParserState.discarded
        state = ParserState.unsettled

    return TRANSITIONS[state][reduced]


@dataclass
class Aggregator:
    """
    Mutable tokenizing state for a single call.

    ``array`` holds rows of cells, each cell a list of text pieces; the last
    cell of the last row is the one under construction.
    """

    quote: Optional[str]
    separators: FrozenSet[str]
    keep_final_line_feed: bool = False
    taint_enabled: bool = False
    array: List[List[List[str]]] = field(default_factory=lambda: [[[]]])
    state: ParserState = ParserState.empty
    taint: LineTaint = LineTaint.none

    def consume(self, text: str) -> None:
        self.array[-1][-1].append(text)

    def discard_cell(self) -> None:
        row = self.array[-1]
        if len(row) > 1:
            row.pop()

        self.state = ParserState.finished
        self.taint = LineTaint.none

    def end_cell(self, reduced: ReducedClass) -> None:
        if reduced in (ReducedClass.separator, ReducedClass.quote_separator):
            self.array[-1].append([])
        elif reduced == ReducedClass.line_feed:
            self.array.append([[]])
            self.taint = LineTaint.none

        self.state = ParserState.empty

    def activate_taint(self, reduced: ReducedClass) -> None:
        if reduced == ReducedClass.quote_separator:
            self.taint = LineTaint.active
        elif reduced == ReducedClass.separator:
            self.taint = LineTaint.inactive

    def adjust_taint(self, reduced: ReducedClass, next_state: ParserState) -> ParserState:
        """
        Mimic the spreadsheet defect where a row whose quoted cell was closed
        by a quote-separator cannot hold a line feed in a later quoted cell.
        """
        if (
            next_state == ParserState.finished
            and reduced != ReducedClass.line_feed
            and self.state in (ParserState.closed, ParserState.waiting)
        ):
            self.activate_taint(reduced)
        elif next_state in (ParserState.finished, ParserState.discarded):
            if reduced == ReducedClass.line_feed:
                self.taint = LineTaint.none
            elif self.taint != LineTaint.none:
                self.activate_taint(reduced)

        if reduced == ReducedClass.line_feed and next_state == ParserState.open and self.taint == LineTaint.active:
            self.consume(self.quote)
            next_state = ParserState.finished
            self.taint = LineTaint.none

        return next_state

    def feed(self, character: str, is_last: bool) -> None:
        reduced = reduce_classes(classify(character, self.quote, self.separators))
        next_state = transition(self.state, reduced)

        if self.taint_enabled:
            next_state = self.adjust_taint(reduced, next_state)

        self.state = next_state

        if self.state == ParserState.discarded:
            self.discard_cell()

        if not is_last:
            if self.state == ParserState.finished:
                self.end_cell(reduced)
            else:
                self.consume(character)
        elif self.state == ParserState.open:
            # Unterminated quoted value at end of input
            if self.keep_final_line_feed:
                self.consume(character)
            self.consume(self.quote)

    def table(self) -> List[List[str]]:
        return [["".join(cell) for cell in row] for row in self.array]


def tokenize(
    text: str,
    quote: Optional[str] = None,
    separators: Iterable[str] = (),
    keep_final_line_feed: bool = False,
    taint_enabled: bool = False,
) -> List[List[str]]:
    """
    Split preprocessed text into rows of raw cells.

    Never fails: every input resolves to some table with at least one row.
    ``taint_enabled`` only has an effect when ``quote`` is one of
    ``separators``.
    """
    separators = frozenset(separators)
    aggregator = Aggregator(
        quote=quote,
        separators=separators,
        keep_final_line_feed=keep_final_line_feed,
        taint_enabled=taint_enabled and quote is not None and quote in separators,
    )

    last_index = len(text) - 1
    for index, character in enumerate(text):
        aggregator.feed(character, index == last_index)

    table = aggregator.table()
    logger.debug("Tokenized %d characters into %d rows", len(text), len(table))
    return table
