"""
Shared-string table and cell value resolution.

The shared-strings part (``<sst>``) is parsed once per workbook with the same
incremental pull parser the sheets use. Each ``<si>`` contributes one entry:
its direct ``<t>`` text or the concatenation of its rich-text ``<r><t>`` runs.
Phonetic hints (``<rPh>``) are not part of the cell text and are skipped.
"""

from __future__ import annotations

from typing import BinaryIO, Iterable, List, Tuple
from xml.etree import ElementTree as ET

from sheetstream.errors import ParseError, ResolutionError
from sheetstream.excel.config import CELL_TRIM_CHARS, DEFAULT_CONFIG, SHARED_STRING_INDEX_RE
from sheetstream.excel.markup import detach, iter_events, local_name
from sheetstream.ir import CellType
from sheetstream.logger import get_logger

logger = get_logger(__name__)


class SharedStringTable:
    """Read-only, zero-indexed sequence of workbook strings."""

    __slots__ = ("_strings",)

    def __init__(self, strings: Iterable[str] = ()):
        self._strings: Tuple[str, ...] = tuple(strings)

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self):
        return iter(self._strings)

    def __repr__(self) -> str:
        return f"SharedStringTable({len(self._strings)} entries)"

    def resolve(self, index: int) -> str:
        """Return the string at *index*; out-of-range indices raise ``ResolutionError``."""
        if index < 0 or index >= len(self._strings):
            raise ResolutionError(index, len(self._strings))
        return self._strings[index]


class CellValueResolver:
    """
    Turns a cell's raw text into its final string value.

    Shared-string cells are dereferenced through the table; every other
    cell type is returned as literal text, trimmed of ASCII control characters
    and spaces only (non-breaking and ideographic spaces are kept). The
    resolver holds no state besides the table, so one instance can serve
    any number of sheet parses.
    """

    def __init__(self, table: SharedStringTable):
        self._table = table

    @property
    def table(self) -> SharedStringTable:
        return self._table

    def resolve(self, index: int) -> str:
        return self._table.resolve(index)

    def resolve_cell(self, raw: str, cell_type: CellType) -> str:
        value = raw.strip(CELL_TRIM_CHARS)
        if not cell_type.is_shared_string:
            return value
        if not SHARED_STRING_INDEX_RE.match(value):
            raise ParseError(f"shared string cell holds non-numeric index {value!r}")
        return self.resolve(int(value))


def parse_shared_strings(
    stream: BinaryIO,
    chunk_size: int = DEFAULT_CONFIG.chunk_size,
) -> SharedStringTable:
    """
    Stream-parse an ``<sst>`` part into a :class:`SharedStringTable`.

    Raises ``xml.etree.ElementTree.ParseError`` on malformed markup; the
    container turns that into an ``OpenError``.
    """
    strings: List[str] = []
    stack: List[ET.Element] = []
    runs: List[str] = []
    in_item = False
    phonetic_depth = 0

    for event, elem in iter_events(stream, chunk_size):
        name = local_name(elem.tag)
        if event == "start":
            stack.append(elem)
            if name == "si":
                in_item = True
                runs = []
            elif name == "rPh":
                phonetic_depth += 1
            continue

        stack.pop()
        if name == "rPh":
            phonetic_depth -= 1
        elif name == "t" and in_item and phonetic_depth == 0:
            runs.append(elem.text or "")
        elif name == "si":
            strings.append("".join(runs))
            in_item = False
        # Finished elements are dropped, so <extLst> and friends cost nothing.
        detach(elem, stack)

    logger.debug("Parsed %d shared strings", len(strings))
    return SharedStringTable(strings)
