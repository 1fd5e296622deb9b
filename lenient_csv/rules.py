"""
Dialect defaults and fixed characters.

Everything the parser and stringifier fall back to lives here.
"""

DEFAULT_QUOTE = '"'
DEFAULT_SEPARATORS = (",",)
DEFAULT_SEPARATOR = ","
DEFAULT_LINE_END = "\n"

LINE_FEED = "\n"
CARRIAGE_RETURN = "\r"
SPACE = " "
NUL = "\0"

# Characters that may never act as a quote or separator
RESERVED_CHARACTERS = frozenset({"", LINE_FEED, CARRIAGE_RETURN})

ALLOWED_LINE_ENDS = ("\n", "\r\n", "\r")

# Encoding used when the service layer has to guess
FALLBACK_ENCODING = "utf-8"

# Upload names accepted by the service
SUPPORTED_SUFFIXES = (".csv", ".tsv", ".txt")
