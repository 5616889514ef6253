"""
Workbook codec tests against the real spreadsheet engines.
"""

import io
import pytest
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent))

from tablediff.adapters.file_reader import TabularParser
from tablediff.adapters.workbook import PandasWorkbookCodec, SheetData, get_workbook_codec
from tablediff.core.errors import CodecUnavailableError
from tablediff.core.models import ParsedTable
from tablediff.core.reconciler import diff
from tablediff.reporting.exporter import ReportExporter


def xlsx_bytes(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


class TestWorkbookReading:

    def test_first_sheet_becomes_records(self):
        content = xlsx_bytes(pd.DataFrame({"id": [1, 2], "name": ["a", None]}))

        table = TabularParser().parse("book.xlsx", content)

        assert table.field_names == ["id", "name"]
        assert table.records[0] == {"id": 1, "name": "a"}
        assert table.records[1]["name"] == ""
        assert table.format_meta["format"] == "workbook"

    def test_blank_header_gets_synthetic_name(self):
        frame = pd.DataFrame([[1, "a", "x"]], columns=["id", "name", ""])

        sheet = PandasWorkbookCodec().read_workbook(xlsx_bytes(frame), "book.xlsx")

        assert sheet.columns == ["id", "name", "col3"]
        assert sheet.rows == [{"id": 1, "name": "a", "col3": "x"}]

    def test_blank_header_next_to_real_col_name(self):
        frame = pd.DataFrame([[1, 2, 3]], columns=["col3", "b", ""])

        sheet = PandasWorkbookCodec().read_workbook(xlsx_bytes(frame), "book.xlsx")

        assert sheet.columns == ["col3", "b", "col3_2"]
        assert sheet.rows == [{"col3": 1, "b": 2, "col3_2": 3}]

    def test_garbage_bytes_raise_codec_error(self):
        with pytest.raises(CodecUnavailableError, match="convert the file to CSV"):
            PandasWorkbookCodec().read_workbook(b"not a workbook", "book.xlsx")


class TestWorkbookWriting:

    def test_sheets_written_in_order(self):
        sheets = [
            SheetData("added", ["__status", "__key", "R.id"], [{"__status": "added", "__key": 3, "R.id": 3}]),
            SheetData("deleted", ["__status", "__key"], []),
        ]

        content = PandasWorkbookCodec().write_workbook(sheets)
        book = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object)

        assert list(book) == ["added", "deleted"]
        assert list(book["deleted"].columns) == ["__status", "__key"]
        assert book["deleted"].empty
        assert book["added"].iloc[0]["__key"] == 3

    def test_formula_text_stays_text(self):
        pytest.importorskip("xlsxwriter")
        sheets = [SheetData("same", ["v"], [{"v": "=SUM(A1:A2)"}])]

        content = PandasWorkbookCodec(write_engine="xlsxwriter").write_workbook(sheets)
        frame = pd.read_excel(io.BytesIO(content), dtype=object)

        assert frame.iloc[0]["v"] == "=SUM(A1:A2)"

    def test_nested_values_written_as_json(self):
        sheets = [SheetData("changed", ["v"], [{"v": {"a": 1}}])]

        content = PandasWorkbookCodec().write_workbook(sheets)
        frame = pd.read_excel(io.BytesIO(content), dtype=object)

        assert frame.iloc[0]["v"] == '{"a": 1}'

    def test_missing_writer_raises(self):
        codec = PandasWorkbookCodec()
        codec.write_engine = None

        with pytest.raises(CodecUnavailableError):
            codec.write_workbook([SheetData("same", ["v"], [])])


class TestWorkbookExport:

    def test_four_sheet_report(self):
        left = ParsedTable([{"id": 1, "name": "a"}, {"id": 2, "name": "b"}], ["id", "name"], "l")
        right = ParsedTable([{"id": 2, "name": "b"}, {"id": 3, "name": "c"}], ["id", "name"], "r")

        artifact = ReportExporter(codec=get_workbook_codec()).export(diff(left, right, "id"), "report")
        book = pd.read_excel(io.BytesIO(artifact.content), sheet_name=None, dtype=object)

        assert artifact.filename == "report.xlsx"
        assert list(book) == ["added", "deleted", "changed", "same"]
        assert list(book["same"].columns) == ["__status", "__key", "L.id", "L.name", "R.id", "R.name"]
        assert book["added"].iloc[0]["R.name"] == "c"
