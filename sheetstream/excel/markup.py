"""
Incremental XML helpers shared by the shared-strings and sheet parsers.

Both parsers read a zip member chunk by chunk through
``xml.etree.ElementTree.XMLPullParser`` and match elements by local name, so
default-namespace, prefixed (``x:row``) and strict OOXML parts all look the
same to them.
"""

from __future__ import annotations

import posixpath
from typing import BinaryIO, Iterator, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

PULL_EVENTS = ("start", "end")


def local_name(tag: str) -> str:
    """``{namespace}row`` -> ``row``."""
    return tag.rsplit("}", 1)[-1]


def attribute(elem: ET.Element, name: str) -> Optional[str]:
    """Look up an attribute by local name, ignoring any namespace."""
    value = elem.attrib.get(name)
    if value is not None:
        return value
    for key, val in elem.attrib.items():
        if local_name(key) == name:
            return val
    return None


def iter_events(stream: BinaryIO, chunk_size: int) -> Iterator[Tuple[str, ET.Element]]:
    """
    Feed *stream* to a pull parser and yield ``(event, element)`` pairs.

    Raises ``xml.etree.ElementTree.ParseError`` on malformed or truncated
    markup; callers translate it into their own error type.
    """
    parser = ET.XMLPullParser(events=PULL_EVENTS)
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        parser.feed(chunk)
        yield from parser.read_events()
    parser.close()
    yield from parser.read_events()


def detach(elem: ET.Element, stack: Sequence[ET.Element]) -> None:
    """Drop a fully processed element from its parent (top of *stack*)."""
    elem.clear()
    if stack:
        stack[-1].remove(elem)


def resolve_part_name(source_part: str, target: str) -> str:
    """
    Resolve a relationship target against the part that owns the relationship.

    ``("xl/workbook.xml", "worksheets/sheet1.xml")`` -> ``xl/worksheets/sheet1.xml``;
    absolute targets (``/xl/worksheets/sheet1.xml``) are taken from the package root.
    """
    if target.startswith("/"):
        return posixpath.normpath(target.lstrip("/"))
    base = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base, target))


def rels_part_for(part_name: str) -> str:
    """``xl/workbook.xml`` -> ``xl/_rels/workbook.xml.rels``."""
    parent, file_name = posixpath.split(part_name)
    return posixpath.join(parent, "_rels", f"{file_name}.rels")
