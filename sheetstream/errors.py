"""
Exception hierarchy for workbook extraction.

- ``OpenError``: the container cannot be used at all (fatal to the extraction).
- ``ParseError``: one sheet's row/cell markup is malformed (fatal to that sheet).
- ``ResolutionError``: a shared-string index is out of range; reported as a
  parse failure of the sheet that referenced it.

A sheet that is simply absent is not an error; it is reported through
``OutcomeStatus.NOT_FOUND``.
"""

from typing import Optional


class SheetStreamError(Exception):
    """Base class for all extraction errors."""


class OpenError(SheetStreamError):
    """The workbook file is missing, not a zip archive, or structurally unusable."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ParseError(SheetStreamError):
    """Malformed row/cell markup in a single sheet."""

    def __init__(self, message: str, sheet_name: Optional[str] = None):
        super().__init__(message)
        self.sheet_name = sheet_name


class ResolutionError(ParseError):
    """A shared-string index points outside the shared-string table."""

    def __init__(self, index: int, table_size: int):
        super().__init__(
            f"shared string index {index} out of range (table has {table_size} entries)"
        )
        self.index = index
        self.table_size = table_size
