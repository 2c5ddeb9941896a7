"""
WorkbookContainer: low-level package I/O and sheet lookup.

Encapsulates everything the extraction needs from the ``.xlsx`` zip package:
- locating the workbook part through the package relationships
- enumerating ``<sheet>`` entries in workbook order and mapping them to parts
- building the shared-string table once per document
- handing out single-use, forward-only streams for worksheet parts

Only the small metadata parts (relationships, ``workbook.xml``) are parsed as
whole documents; shared strings and sheets are always streamed.
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from sheetstream.errors import OpenError
from sheetstream.excel.config import (
    DEFAULT_CONFIG,
    DEFAULT_SHARED_STRINGS_PART,
    DEFAULT_WORKBOOK_PART,
    PACKAGE_RELS_PART,
    REL_OFFICE_DOCUMENT,
    REL_SHARED_STRINGS,
    ReaderConfig,
)
from sheetstream.excel.markup import attribute, local_name, rels_part_for, resolve_part_name
from sheetstream.excel.shared_strings import SharedStringTable, parse_shared_strings
from sheetstream.logger import get_logger

logger = get_logger(__name__)

# rId -> (relationship type, resolved part name)
Relationships = Dict[str, Tuple[str, str]]


@dataclass(frozen=True)
class SheetRef:
    """One ``<sheet>`` entry of the workbook part."""

    index: int
    name: str
    part_name: str
    relationship_id: str


class SheetStream:
    """
    Forward-only byte stream over one worksheet part.

    The stream can be read through exactly once: reading after it has
    returned end-of-data, or after ``close()``, raises ``ValueError``.
    """

    def __init__(self, ref: SheetRef, raw: BinaryIO):
        self.ref = ref
        self._raw = raw
        self._closed = False
        self._exhausted = False

    @property
    def name(self) -> str:
        return self.ref.name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def read(self, size: int = -1) -> bytes:
        if self._closed:
            raise ValueError(f"sheet stream {self.name!r} is closed")
        if self._exhausted:
            raise ValueError(f"sheet stream {self.name!r} has already been consumed")
        data = self._raw.read(size)
        if not data and size != 0:
            self._exhausted = True
        return data

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._raw.close()

    def __enter__(self) -> "SheetStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SheetStream(name={self.name!r}, part={self.ref.part_name!r}, closed={self._closed})"


class WorkbookContainer:
    """
    Open ``.xlsx`` package. Use :func:`open_document` to create one.

    The name -> part mapping is built once when the container is opened;
    every lookup walks it in workbook order.
    """

    def __init__(self, path: str, archive: zipfile.ZipFile, cfg: ReaderConfig = DEFAULT_CONFIG):
        self.path = path
        self._zf = archive
        self._cfg = cfg
        self._members = set(archive.namelist())
        self.workbook_part = self._locate_workbook_part()
        self._workbook_rels = self._load_relationships(rels_part_for(self.workbook_part), self.workbook_part)
        self._sheet_refs = self._read_sheet_refs()
        self._shared_strings: Optional[SharedStringTable] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def iter_sheets(self) -> Iterator[SheetRef]:
        """Sheet entries in workbook order."""
        return iter(self._sheet_refs)

    def sheet_names(self) -> List[str]:
        return [ref.name for ref in self._sheet_refs]

    def find_sheet(self, name: str) -> Optional[SheetStream]:
        """
        Open the first sheet whose name equals *name* exactly (case-sensitive).

        Returns ``None`` when no sheet matches. The caller owns the returned
        stream and must close it.
        """
        for ref in self.iter_sheets():
            if ref.name == name:
                logger.debug("Sheet %r -> %s", name, ref.part_name)
                return self.open_sheet(ref)
        return None

    def open_sheet(self, ref: SheetRef) -> SheetStream:
        return SheetStream(ref, self._zf.open(ref.part_name, "r"))

    def shared_strings(self) -> SharedStringTable:
        """
        Build (once) and return the document's shared-string table.

        A workbook without a shared-strings part gets an empty table.
        """
        if self._shared_strings is not None:
            return self._shared_strings

        part = self._shared_strings_part()
        if part is None:
            logger.debug("No shared strings part in %s", self.path)
            self._shared_strings = SharedStringTable()
            return self._shared_strings

        try:
            with self._zf.open(part, "r") as fh:
                self._shared_strings = parse_shared_strings(fh, self._cfg.chunk_size)
        except (ET.ParseError, zipfile.BadZipFile, OSError) as exc:
            raise OpenError(f"unreadable shared strings part {part}: {exc}", path=self.path) from exc

        logger.info("Loaded %d shared strings from %s", len(self._shared_strings), Path(self.path).name)
        return self._shared_strings

    def close(self) -> None:
        self._zf.close()

    def __enter__(self) -> "WorkbookContainer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_xml(self, part: str) -> ET.Element:
        try:
            return ET.fromstring(self._zf.read(part))
        except (ET.ParseError, zipfile.BadZipFile, OSError, KeyError) as exc:
            raise OpenError(f"unreadable package part {part}: {exc}", path=self.path) from exc

    def _load_relationships(self, rels_part: str, source_part: str) -> Relationships:
        if rels_part not in self._members:
            return {}
        rels: Relationships = {}
        for rel in self._read_xml(rels_part):
            if local_name(rel.tag) != "Relationship":
                continue
            rel_id = rel.attrib.get("Id")
            target = rel.attrib.get("Target")
            if not rel_id or not target or rel.attrib.get("TargetMode") == "External":
                continue
            rels[rel_id] = (rel.attrib.get("Type", ""), resolve_part_name(source_part, target))
        return rels

    def _locate_workbook_part(self) -> str:
        for rel_type, part in self._load_relationships(PACKAGE_RELS_PART, "").values():
            if rel_type.endswith(REL_OFFICE_DOCUMENT) and part in self._members:
                return part
        if DEFAULT_WORKBOOK_PART in self._members:
            return DEFAULT_WORKBOOK_PART
        raise OpenError(f"no workbook part found in {self.path}", path=self.path)

    def _read_sheet_refs(self) -> List[SheetRef]:
        root = self._read_xml(self.workbook_part)
        refs: List[SheetRef] = []
        entries = [
            elem
            for sheets in root if local_name(sheets.tag) == "sheets"
            for elem in sheets if local_name(elem.tag) == "sheet"
        ]
        for elem in entries:
            name = elem.attrib.get("name")
            rel_id = attribute(elem, "id")
            if name is None or rel_id is None:
                logger.warning("Skipping sheet entry without name or r:id in %s", self.path)
                continue
            rel = self._workbook_rels.get(rel_id)
            if rel is None or rel[1] not in self._members:
                logger.warning("Skipping sheet %r: no part for relationship %s", name, rel_id)
                continue
            refs.append(SheetRef(index=len(refs), name=name, part_name=rel[1], relationship_id=rel_id))
        logger.debug("Workbook %s has sheets: %s", self.path, [r.name for r in refs])
        return refs

    def _shared_strings_part(self) -> Optional[str]:
        for rel_type, part in self._workbook_rels.values():
            if rel_type.endswith(REL_SHARED_STRINGS) and part in self._members:
                return part
        if DEFAULT_SHARED_STRINGS_PART in self._members:
            return DEFAULT_SHARED_STRINGS_PART
        return None


def open_document(path: str, cfg: ReaderConfig = DEFAULT_CONFIG) -> WorkbookContainer:
    """
    Open an ``.xlsx`` package for streaming extraction.

    Raises ``OpenError`` when the file does not exist, is not a zip archive,
    or has no readable workbook part.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise OpenError(f"workbook not found: {path}", path=str(path))
    try:
        archive = zipfile.ZipFile(file_path, "r")
    except (zipfile.BadZipFile, OSError) as exc:
        raise OpenError(f"not a readable xlsx package: {path}: {exc}", path=str(path)) from exc
    try:
        return WorkbookContainer(str(path), archive, cfg)
    except OpenError:
        archive.close()
        raise
