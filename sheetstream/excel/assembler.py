"""
TableAssembler: turns a sheet's row stream into a rectangular ``Table``.

Rules:
- The first row that has at least one cell becomes the header; its length
  fixes the table width. Cell-less rows before it are skipped.
- Later rows shorter than the header are right-padded with ``""``.
- Later rows longer than the header are truncated to the header width.
- A sheet without any non-empty row yields an empty table (no columns, no rows).
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sheetstream.ir import Row, Table


class TableAssembler:
    """Accumulates rows for a single sheet."""

    def __init__(self) -> None:
        self._header: Optional[List[str]] = None
        self._rows: List[Row] = []
        self.skipped_leading_rows = 0
        self.padded_rows = 0
        self.truncated_rows = 0

    @property
    def has_header(self) -> bool:
        return self._header is not None

    @property
    def width(self) -> int:
        return len(self._header) if self._header is not None else 0

    def add_row(self, row: Row) -> None:
        if self._header is None:
            if not row:
                self.skipped_leading_rows += 1
                return
            self._header = list(row)
            return
        self._rows.append(self._normalise(row))

    def build(self) -> Table:
        return Table(header=list(self._header or []), rows=self._rows)

    def _normalise(self, row: Row) -> Row:
        width = self.width
        if len(row) < width:
            self.padded_rows += 1
            return list(row) + [""] * (width - len(row))
        if len(row) > width:
            self.truncated_rows += 1
            return list(row[:width])
        return list(row)


def assemble_table(rows: Iterable[Row]) -> Table:
    """Convenience wrapper: feed every row to a fresh assembler and build."""
    assembler = TableAssembler()
    for row in rows:
        assembler.add_row(row)
    return assembler.build()
