"""Readers and codecs for source formats."""

from .file_reader import TabularParser, decode_content
from .dialect import detect_delimiter, split_rows, write_delimited
from .workbook import WorkbookCodec, PandasWorkbookCodec, get_workbook_codec

__all__ = [
    "TabularParser",
    "decode_content",
    "detect_delimiter",
    "split_rows",
    "write_delimited",
    "WorkbookCodec",
    "PandasWorkbookCodec",
    "get_workbook_codec",
]
