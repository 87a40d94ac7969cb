"""Tests for turning uploaded bytes into raw records."""

import pytest

from conftest import to_xlsx
from drilldash.errors import DecodeError, ParseError
from drilldash.parser import (
    decode_text,
    file_extension,
    parse_delimited_text,
    parse_workbook,
    read_records,
)


class TestDelimitedText:
    """Tab-delimited text parsing."""

    def test_zips_header_with_cells(self):
        text = "StandIndex\tStartDepth(ft)\n1\t6500\n2\t6530\n"
        records = parse_delimited_text(text)
        assert records == [
            {"StandIndex": "1", "StartDepth(ft)": "6500"},
            {"StandIndex": "2", "StartDepth(ft)": "6530"},
        ]

    def test_missing_trailing_cells_become_empty_string(self):
        records = parse_delimited_text("A\tB\tC\n1\n")
        assert records == [{"A": "1", "B": "", "C": ""}]

    def test_surplus_cells_are_ignored(self):
        records = parse_delimited_text("A\tB\n1\t2\t3\n")
        assert records == [{"A": "1", "B": "2"}]

    def test_blank_lines_are_skipped(self):
        records = parse_delimited_text("A\n1\n\n   \n2\n")
        assert [r["A"] for r in records] == ["1", "2"]

    def test_windows_line_endings(self):
        records = parse_delimited_text("A\tB\r\n1\t2\r\n")
        assert records == [{"A": "1", "B": "2"}]

    def test_leading_empty_cell_keeps_column_position(self):
        records = parse_delimited_text("A\tB\n\t2\n")
        assert records == [{"A": "", "B": "2"}]

    def test_empty_text_has_no_records(self):
        assert parse_delimited_text("") == []

    def test_header_only(self):
        assert parse_delimited_text("A\tB\n") == []


class TestDecode:
    def test_utf8_with_bom(self):
        assert decode_text("\ufeffA\tB".encode("utf-8")) == "A\tB"

    def test_invalid_bytes_raise_decode_error(self):
        with pytest.raises(DecodeError):
            decode_text(b"\xff\xfe\xfa\x00StandIndex")

    def test_parse_error_is_decode_error(self):
        assert ParseError is DecodeError


class TestWorkbook:
    """Excel parsing keeps native cell types."""

    def test_first_sheet_rows_become_records(self):
        content = to_xlsx(
            [{"StandIndex": 1, "WellId": "W-1"}, {"StandIndex": 2, "WellId": "W-1"}],
            headers=["StandIndex", "WellId"],
        )
        records = parse_workbook(content)
        assert len(records) == 2
        assert records[0]["StandIndex"] == 1
        assert isinstance(records[0]["StandIndex"], int)
        assert records[1]["WellId"] == "W-1"

    def test_empty_cells_are_absent(self):
        content = to_xlsx(
            [{"StandIndex": 1, "OnBottomRop(ft/h)": None}],
            headers=["StandIndex", "OnBottomRop(ft/h)"],
        )
        records = parse_workbook(content)
        assert "OnBottomRop(ft/h)" not in records[0]

    def test_corrupt_workbook_raises_decode_error(self):
        with pytest.raises(DecodeError):
            parse_workbook(b"PK\x03\x04 definitely not a workbook")


class TestReadRecords:
    def test_dispatches_excel_by_extension(self):
        content = to_xlsx([{"StandIndex": 7}], headers=["StandIndex"])
        assert read_records("stands.XLSX", content) == [{"StandIndex": 7}]

    def test_other_extensions_read_as_text(self):
        assert read_records("stands.csv", b"StandIndex\n7\n") == [{"StandIndex": "7"}]

    def test_excel_extension_with_text_content_fails(self):
        with pytest.raises(DecodeError):
            read_records("stands.xlsx", b"StandIndex\n7\n")

    @pytest.mark.parametrize("name,expected", [
        ("data.TXT", "txt"),
        ("archive.v2.xls", "xls"),
        ("noextension", ""),
    ])
    def test_file_extension(self, name, expected):
        assert file_extension(name) == expected
