"""
Centralised configuration for the streaming workbook reader.

Default part names, relationship type suffixes and the read chunk size live
here so that the container and parsers stay free of hard-coded values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Package part names and relationship types
# ---------------------------------------------------------------------------

PACKAGE_RELS_PART = "_rels/.rels"
DEFAULT_WORKBOOK_PART = "xl/workbook.xml"
DEFAULT_SHARED_STRINGS_PART = "xl/sharedStrings.xml"

# Transitional and strict OOXML use different URIs but the same trailing segment.
REL_OFFICE_DOCUMENT = "/officeDocument"
REL_SHARED_STRINGS = "/sharedStrings"

# A shared-string cell must hold a plain non-negative integer.
SHARED_STRING_INDEX_RE = re.compile(r"^\d+$")

# Cell text is trimmed of U+0000..U+0020 only; U+00A0, U+3000 etc. are content.
CELL_TRIM_CHARS = "".join(chr(code) for code in range(0x21))


# ---------------------------------------------------------------------------
# ReaderConfig
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReaderConfig:
    """Immutable bag of tunables for the streaming reader."""

    # Bytes handed to the XML parser per feed() call
    chunk_size: int = 64 * 1024


# Singleton default config
DEFAULT_CONFIG = ReaderConfig()
