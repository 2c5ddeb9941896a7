"""
Pytest configuration and shared fixtures.
"""
import os
import sys
import zipfile
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape, quoteattr

import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sheetstream.config import reset_settings  # noqa: E402

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
DOC_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
REL_TYPE_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


def sheet_xml(sheet_data: str) -> str:
    """Wrap ``<row>`` markup into a complete worksheet part."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{MAIN_NS}" xmlns:r="{DOC_REL_NS}">'
        '<dimension ref="A1"/>'
        f"<sheetData>{sheet_data}</sheetData>"
        "</worksheet>"
    )


def shared_strings_xml(strings: Sequence[str]) -> str:
    items = "".join(f'<si><t xml:space="preserve">{escape(s)}</t></si>' for s in strings)
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<sst xmlns="{MAIN_NS}" count="{len(strings)}" uniqueCount="{len(strings)}">{items}</sst>'
    )


def row(*cells: str) -> str:
    return f"<row>{''.join(cells)}</row>"


def s(index) -> str:
    """Shared-string cell."""
    return f'<c t="s"><v>{index}</v></c>'


def n(value) -> str:
    """Numeric cell."""
    return f"<c><v>{value}</v></c>"


def inline(text: str) -> str:
    return f'<c t="inlineStr"><is><t>{escape(text)}</t></is></c>'


def write_xlsx(
    path: str,
    sheets: Sequence[Tuple[str, str]],
    shared_strings: Optional[Sequence[str]] = None,
    raw_shared_strings: Optional[str] = None,
    absolute_targets: bool = False,
) -> str:
    """
    Write a minimal .xlsx package.

    ``sheets`` holds ``(sheet name, worksheet xml)`` pairs in workbook order.
    """
    sheet_entries: List[str] = []
    rels: List[str] = []
    content_overrides: List[str] = []
    parts = {}
    for idx, (name, xml) in enumerate(sheets, start=1):
        rid = f"rId{idx}"
        target = f"worksheets/sheet{idx}.xml"
        sheet_entries.append(f'<sheet name={quoteattr(name)} sheetId="{idx}" r:id="{rid}"/>')
        rels.append(
            f'<Relationship Id="{rid}" Type="{REL_TYPE_BASE}/worksheet" '
            f'Target="{"/xl/" + target if absolute_targets else target}"/>'
        )
        parts[f"xl/{target}"] = xml
        content_overrides.append(
            f'<Override PartName="/xl/{target}" ContentType="application/'
            'vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"/>'
        )

    sst = raw_shared_strings
    if sst is None and shared_strings is not None:
        sst = shared_strings_xml(shared_strings)
    if sst is not None:
        rels.append(
            f'<Relationship Id="rId{len(sheets) + 1}" Type="{REL_TYPE_BASE}/sharedStrings" '
            'Target="sharedStrings.xml"/>'
        )
        parts["xl/sharedStrings.xml"] = sst

    parts["[Content_Types].xml"] = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        f"{''.join(content_overrides)}</Types>"
    )
    parts["_rels/.rels"] = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="{PKG_REL_NS}">'
        f'<Relationship Id="rId1" Type="{REL_TYPE_BASE}/officeDocument" Target="xl/workbook.xml"/>'
        "</Relationships>"
    )
    parts["xl/workbook.xml"] = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<workbook xmlns="{MAIN_NS}" xmlns:r="{DOC_REL_NS}">'
        f"<sheets>{''.join(sheet_entries)}</sheets></workbook>"
    )
    parts["xl/_rels/workbook.xml.rels"] = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="{PKG_REL_NS}">{"".join(rels)}</Relationships>'
    )

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for part_name, content in parts.items():
            zf.writestr(part_name, content)
    return str(path)


@pytest.fixture
def make_xlsx(tmp_path):
    """Factory: ``make_xlsx(sheets, shared_strings=None, ...)`` -> path of a new workbook."""
    counter = {"n": 0}

    def _make(sheets, shared_strings=None, **kwargs) -> str:
        counter["n"] += 1
        path = tmp_path / f"book{counter['n']}.xlsx"
        return write_xlsx(str(path), sheets, shared_strings=shared_strings, **kwargs)

    return _make


@pytest.fixture
def antennas_workbook(make_xlsx):
    """Workbook with an 'Antennas' sheet: header, one full row, one short row."""
    strings = ["Name", "Value", "Cell1", "Cell2"]
    antennas = sheet_xml(
        row(s(0), s(1))
        + row(s(2), n(10))
        + row(s(3))
    )
    other = sheet_xml(row(inline("unused")))
    return make_xlsx([("Summary", other), ("Antennas", antennas)], shared_strings=strings)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Every test sees settings read from its own environment."""
    reset_settings()
    yield
    reset_settings()
