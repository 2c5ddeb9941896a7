"""
Streaming row parser for worksheet parts.

Walks ``<sheetData>`` with a pull parser and yields one list of resolved cell
strings per ``<row>``. The parse is an explicit state machine::

    IDLE --<row>--> IN_ROW --<c>--> IN_CELL --</c>--> IN_ROW --</row>--> IDLE

State, the text buffer and the current row are locals of the generator, so
two parses never share anything except the read-only resolver. Every element
is detached from the tree as soon as its end tag has been handled, including
trailing sections such as ``<hyperlinks>`` or ``<mergeCells>``, which bounds
memory by one row (plus one read chunk) regardless of sheet size.

Cell text is the content of ``<v>``, or for inline strings the ``<t>`` runs
under ``<is>`` joined in order (phonetic ``<rPh>`` runs excluded). Formula
text (``<f>``) is ignored; cells keep their cached value.
"""

from __future__ import annotations

from enum import Enum
from typing import BinaryIO, Iterator, List, Optional
from xml.etree import ElementTree as ET

from sheetstream.errors import ParseError
from sheetstream.excel.config import DEFAULT_CONFIG
from sheetstream.excel.markup import attribute, detach, iter_events, local_name
from sheetstream.excel.shared_strings import CellValueResolver
from sheetstream.ir import CellType, Row
from sheetstream.logger import get_logger

logger = get_logger(__name__)


class ParserState(Enum):
    IDLE = "idle"
    IN_ROW = "in_row"
    IN_CELL = "in_cell"


def iter_rows(
    stream: BinaryIO,
    resolver: CellValueResolver,
    chunk_size: int = DEFAULT_CONFIG.chunk_size,
    sheet_name: Optional[str] = None,
) -> Iterator[Row]:
    """
    Yield the rows of one worksheet part, in document order.

    Raises :class:`~sheetstream.errors.ParseError` (or its subclass
    ``ResolutionError``) on malformed markup, unbalanced row/cell nesting,
    a non-numeric shared-string index or an index outside the table.
    Rows yielded before the failure are the caller's to discard.
    """
    state = ParserState.IDLE
    stack: List[ET.Element] = []
    in_sheet_data = False
    row: Row = []
    parts: List[str] = []
    cell_type = CellType.NUMBER
    in_inline = False
    phonetic_depth = 0
    row_number = 0

    def fail(message: str) -> ParseError:
        where = f" (row {row_number})" if row_number else ""
        return ParseError(f"{message}{where}", sheet_name=sheet_name)

    try:
        for event, elem in iter_events(stream, chunk_size):
            name = local_name(elem.tag)

            if event == "start":
                stack.append(elem)
                if name == "sheetData":
                    in_sheet_data = True
                elif not in_sheet_data:
                    continue
                elif name == "row":
                    if state is not ParserState.IDLE:
                        raise fail("<row> opened inside an unfinished row")
                    row_number += 1
                    row = []
                    state = ParserState.IN_ROW
                elif name == "c":
                    if state is ParserState.IDLE:
                        raise fail("<c> outside of a <row>")
                    if state is ParserState.IN_CELL:
                        raise fail("<c> opened inside another cell")
                    parts = []
                    cell_type = CellType.from_attribute(attribute(elem, "t"))
                    in_inline = False
                    phonetic_depth = 0
                    state = ParserState.IN_CELL
                elif state is ParserState.IN_CELL:
                    if name == "is":
                        in_inline = True
                    elif name == "rPh":
                        phonetic_depth += 1
                continue

            stack.pop()
            completed: Optional[Row] = None
            if name == "sheetData":
                in_sheet_data = False
            elif not in_sheet_data:
                pass
            elif state is ParserState.IN_CELL:
                if name == "v":
                    parts = [elem.text or ""]
                elif name == "t" and in_inline and phonetic_depth == 0:
                    parts.append(elem.text or "")
                elif name == "rPh":
                    phonetic_depth -= 1
                elif name == "is":
                    in_inline = False
                elif name == "c":
                    try:
                        row.append(resolver.resolve_cell("".join(parts), cell_type))
                    except ParseError as exc:
                        exc.sheet_name = exc.sheet_name or sheet_name
                        raise
                    state = ParserState.IN_ROW
            elif name == "row" and state is ParserState.IN_ROW:
                completed = row
                row = []
                state = ParserState.IDLE

            # Every finished element is dropped, inside sheetData or not.
            detach(elem, stack)
            if completed is not None:
                yield completed
    except ET.ParseError as exc:
        raise ParseError(f"malformed sheet markup: {exc}", sheet_name=sheet_name) from exc

    logger.debug("Parsed %d rows from sheet %s", row_number, sheet_name)
