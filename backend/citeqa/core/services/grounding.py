from __future__ import annotations
import re

# Citation grammar shared by the encoder and the decoder.
#
#   ## Sources
#
#   1. [Title](doc://id) (Collections: a, b)
#   2. [Title](https://example.com/paper)

SOURCES_HEADING = "## Sources"
COLLECTIONS_LABEL = "Collections:"
ALL_COLLECTIONS_TAG = "all"

SOURCES_HEADING_RE = re.compile(r"^[ \t]*##[ \t]*Sources[ \t]*\r?$", re.IGNORECASE | re.MULTILINE)

SOURCE_LINE_RE = re.compile(
    r"^\s*([0-9]+)\.\s*\[([^\]]+)\]\(([^)]+)\)"
    r"(?:\s*\(" + re.escape(COLLECTIONS_LABEL) + r"\s*([^)]*)\))?"
)

FOOTNOTE_RE = re.compile(r"\[([0-9]+)\]")

# Longest entry or marker number read as an integer (CPython's default int digit limit)
MAX_NUMBER_DIGITS = 4300
