"""
Streaming xlsx subpackage.

Public API:
  - open_document / WorkbookContainer  (package I/O, sheet lookup, in container.py)
  - SheetStream / SheetRef             (single-use sheet part streams)
  - SharedStringTable                  (document string pool)
  - CellValueResolver                  (raw cell text -> final string)
  - iter_rows                          (streaming row parser)
  - TableAssembler / assemble_table    (header + rectangular rows)
  - ReaderConfig                       (tunable chunk size)
"""

from sheetstream.excel.config import ReaderConfig, DEFAULT_CONFIG
from sheetstream.excel.shared_strings import CellValueResolver, SharedStringTable, parse_shared_strings
from sheetstream.excel.container import SheetRef, SheetStream, WorkbookContainer, open_document
from sheetstream.excel.row_parser import ParserState, iter_rows
from sheetstream.excel.assembler import TableAssembler, assemble_table

__all__ = [
    "ReaderConfig",
    "DEFAULT_CONFIG",
    "CellValueResolver",
    "SharedStringTable",
    "parse_shared_strings",
    "SheetRef",
    "SheetStream",
    "WorkbookContainer",
    "open_document",
    "ParserState",
    "iter_rows",
    "TableAssembler",
    "assemble_table",
]
