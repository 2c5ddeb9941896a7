import io
import tracemalloc

import pytest

from sheetstream.errors import ParseError, ResolutionError
from sheetstream.excel.shared_strings import CellValueResolver, SharedStringTable, parse_shared_strings
from sheetstream.ir import CellType

from conftest import MAIN_NS, shared_strings_xml


def _parse(xml: str, chunk_size: int = 64 * 1024) -> SharedStringTable:
    return parse_shared_strings(io.BytesIO(xml.encode("utf-8")), chunk_size)


def test_parse_plain_strings_in_order():
    table = _parse(shared_strings_xml(["Name", "Value", "天线"]))
    assert list(table) == ["Name", "Value", "天线"]
    assert len(table) == 3


def test_parse_rich_text_runs_are_concatenated_and_phonetic_skipped():
    xml = (
        f'<sst xmlns="{MAIN_NS}">'
        "<si><r><rPr><b/></rPr><t>Sector</t></r><r><t xml:space=\"preserve\"> A</t></r></si>"
        "<si><t>東京</t><rPh sb=\"0\" eb=\"2\"><t>トウキョウ</t></rPh></si>"
        "<si><t/></si>"
        "</sst>"
    )
    table = _parse(xml)
    assert list(table) == ["Sector A", "東京", ""]


def test_parse_keeps_surrounding_whitespace():
    table = _parse(shared_strings_xml(["  padded  "]))
    assert table.resolve(0) == "  padded  "


def test_parse_with_tiny_chunks_matches_whole_parse():
    xml = shared_strings_xml([f"value-{i}" for i in range(50)])
    assert list(_parse(xml, chunk_size=7)) == list(_parse(xml))


def test_resolve_is_idempotent():
    table = SharedStringTable(["a", "b"])
    assert table.resolve(1) == table.resolve(1) == "b"


@pytest.mark.parametrize("index", [2, 100, -1])
def test_resolve_out_of_range_raises(index):
    table = SharedStringTable(["a", "b"])
    with pytest.raises(ResolutionError) as excinfo:
        table.resolve(index)
    assert excinfo.value.index == index
    assert excinfo.value.table_size == 2


def test_resolution_error_is_a_parse_error():
    with pytest.raises(ParseError):
        SharedStringTable().resolve(0)


def test_resolver_dereferences_shared_string_cells():
    resolver = CellValueResolver(SharedStringTable(["Name", "Value"]))
    assert resolver.resolve_cell(" 1 ", CellType.SHARED_STRING) == "Value"
    assert resolver.resolve(0) == "Name"


def test_resolver_returns_trimmed_literal_for_other_types():
    resolver = CellValueResolver(SharedStringTable(["unused"]))
    assert resolver.resolve_cell(" 10 ", CellType.NUMBER) == "10"
    assert resolver.resolve_cell("0", CellType.BOOLEAN) == "0"
    assert resolver.resolve_cell("abc", CellType.INLINE_STRING) == "abc"


@pytest.mark.parametrize("raw", ["abc", "", "1.0", "-1", "0x1"])
def test_resolver_rejects_non_numeric_index(raw):
    resolver = CellValueResolver(SharedStringTable(["a", "b"]))
    with pytest.raises(ParseError) as excinfo:
        resolver.resolve_cell(raw, CellType.SHARED_STRING)
    assert not isinstance(excinfo.value, ResolutionError)


def test_cell_type_from_attribute():
    assert CellType.from_attribute("s") is CellType.SHARED_STRING
    assert CellType.from_attribute("inlineStr") is CellType.INLINE_STRING
    assert CellType.from_attribute(None) is CellType.NUMBER
    assert CellType.from_attribute("something-else") is CellType.NUMBER
    assert CellType.SHARED_STRING.is_shared_string
    assert not CellType.FORMULA_STRING.is_shared_string


def test_extension_sections_do_not_accumulate():
    count = 100_000
    xml = (
        f'<sst xmlns="{MAIN_NS}"><si><t>Name</t></si><si><t>Value</t></si>'
        "<extLst>" + '<ext uri="{00000000-0000-0000-0000-000000000000}"/>' * count + "</extLst></sst>"
    ).encode("utf-8")

    tracemalloc.start()
    try:
        table = parse_shared_strings(io.BytesIO(xml), 16 * 1024)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert list(table) == ["Name", "Value"]
    assert peak < 4 * 1024 * 1024


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("\xa0Cell\u3000", "\xa0Cell\u3000"),
        ("\u2003Cell\u2003", "\u2003Cell\u2003"),
        (" \t\r\nCell\x00\x1f ", "Cell"),
    ],
)
def test_literal_cells_trim_only_ascii_whitespace_and_controls(raw, expected):
    resolver = CellValueResolver(SharedStringTable())
    assert resolver.resolve_cell(raw, CellType.NUMBER) == expected
    assert resolver.resolve_cell(raw, CellType.INLINE_STRING) == expected


def test_shared_string_index_with_non_ascii_space_is_rejected():
    resolver = CellValueResolver(SharedStringTable(["Name", "Value"]))
    assert resolver.resolve_cell("\n 1 \t", CellType.SHARED_STRING) == "Value"
    with pytest.raises(ParseError):
        resolver.resolve_cell("\xa01", CellType.SHARED_STRING)
