"""
Text preparation ahead of tokenizing.

Responsibilities:
- byte decoding for the service layer (encoding detection + fallbacks)
- line break normalization to a single line feed
- trailing line feed enforcement
- NUL stripping
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict

from charset_normalizer import from_bytes

from .models import LineBreakPolicy, TrailingLineFeedPolicy
from .rules import FALLBACK_ENCODING, LINE_FEED, NUL

logger = logging.getLogger(__name__)

# Alternation order matters: the longest break at the current position wins,
# and the scan never revisits characters it already replaced.
STRICT_LINE_BREAKS = re.compile(r"\r\n|\r")
LOOSE_LINE_BREAKS = re.compile(r"\r\n|\n\r|\r")


def decode_text(raw: bytes) -> tuple[str, Dict[str, Any]]:
    """
    Decode uploaded bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is consumed rather than kept as a leading character.
    - If decoding with the guess fails, try UTF-8, then decode with
      replacement characters so the caller always gets text.
    """
    detected = None

    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or FALLBACK_ENCODING
    if raw.startswith(b"\xef\xbb\xbf") and decode_used.lower().replace("-", "_") in ("utf_8", "utf8"):
        decode_used = "utf-8-sig"

    decode_fallback = False

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode(FALLBACK_ENCODING)
            decode_used = FALLBACK_ENCODING
        except UnicodeDecodeError:
            logger.warning("Input is not decodable as %s; replacing invalid bytes", decode_used)
            text = raw.decode(FALLBACK_ENCODING, errors="replace")
            decode_used = FALLBACK_ENCODING
        decode_fallback = True

    logger.debug("Decoded %d bytes using %s (detected %s)", len(raw), decode_used, detected)

    return text, {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }


def describe_line_breaks(text: str) -> Dict[str, int]:
    crlf = text.count("\r\n")
    return {
        "crlf": crlf,
        "cr": text.count("\r") - crlf,
        "lf": text.count("\n") - crlf,
    }


def normalize_line_breaks(text: str, policy: LineBreakPolicy = LineBreakPolicy.strict) -> str:
    pattern = LOOSE_LINE_BREAKS if policy == LineBreakPolicy.loose else STRICT_LINE_BREAKS
    return pattern.sub(LINE_FEED, text)


def preprocess(
    text: str,
    line_break_policy: LineBreakPolicy = LineBreakPolicy.strict,
    trailing_policy: TrailingLineFeedPolicy = TrailingLineFeedPolicy.ignore,
) -> str:
    """
    Prepare raw text for the tokenizer.

    The result always ends with a line feed. Under the ``require`` policy one
    is appended unconditionally, even when the text already ends with one.
    NUL characters are removed only after line breaks are normalized.
    """
    text = normalize_line_breaks(text, line_break_policy)

    if trailing_policy != TrailingLineFeedPolicy.ignore or not text.endswith(LINE_FEED):
        text += LINE_FEED

    nul_count = text.count(NUL)
    if nul_count:
        logger.debug("Stripping %d NUL characters", nul_count)
    return text.replace(NUL, "")
