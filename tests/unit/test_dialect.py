"""
Unit tests for delimiter detection, quoted-field tokenizing and cell escaping.
"""

import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from tablediff.adapters.dialect import (
    delimiter_for,
    detect_delimiter,
    escape_cell,
    format_row,
    split_rows,
    write_delimited,
)


class TestDetectDelimiter:
    """Counting heuristic with tab > comma > semicolon tie priority."""

    def test_detects_tab(self):
        assert detect_delimiter("a\tb\tc\n1\t2\t3") == "\t"

    def test_detects_comma(self):
        assert detect_delimiter("a,b,c\n1,2,3") == ","

    def test_detects_semicolon(self):
        assert detect_delimiter("a;b;c\n1;2;3") == ";"

    def test_tab_wins_tie_with_comma(self):
        assert detect_delimiter("a,b\tc") == "\t"

    def test_comma_wins_tie_with_semicolon(self):
        assert detect_delimiter("a,b;c") == ","

    def test_sample_without_separators_reports_tab(self):
        assert detect_delimiter("just one column") == "\t"

    def test_only_first_2000_characters_are_counted(self):
        sample = "a;b" + "x" * 2000 + "," * 50
        assert detect_delimiter(sample) == ";"

    def test_custom_sample_size(self):
        sample = "a;b" + "," * 10
        assert detect_delimiter(sample, max_chars=3) == ";"


class TestDelimiterFor:
    """Extension rules and overrides."""

    def test_tsv_forces_tab(self):
        assert delimiter_for("export.TSV", "a,b,c") == "\t"

    def test_csv_forces_comma(self):
        assert delimiter_for("export.csv", "a;b;c") == ","

    def test_txt_is_detected(self):
        assert delimiter_for("notes.txt", "a;b;c") == ";"

    def test_extensionless_is_detected(self):
        assert delimiter_for("upload", "a\tb") == "\t"

    def test_override_wins(self):
        assert delimiter_for("export.tsv", "a\tb", override="|") == "|"


class TestSplitRows:
    """Quoted-field tokenizing."""

    def test_quoted_delimiter(self):
        rows = split_rows('a,b\n1,"x,y"\n2,z', ",")
        assert rows == [["a", "b"], ["1", "x,y"], ["2", "z"]]

    def test_newline_inside_quotes_and_escaped_quotes(self):
        text = 'a,b\r\n1,"line1\r\nline2"\r\n2,"say ""hi"""'
        rows = split_rows(text, ",")
        assert rows == [["a", "b"], ["1", "line1\nline2"], ["2", 'say "hi"']]

    def test_bare_carriage_returns_are_line_breaks(self):
        assert split_rows("a,b\r1,2\r", ",") == [["a", "b"], ["1", "2"]]

    def test_blank_lines_are_dropped(self):
        rows = split_rows("a,b\n\n1,2\n   \n\n3,4\n", ",")
        assert rows == [["a", "b"], ["1", "2"], ["3", "4"]]

    def test_row_of_empty_cells_is_kept(self):
        assert split_rows("a,b\n,\n", ",") == [["a", "b"], ["", ""]]

    def test_tab_delimiter(self):
        assert split_rows("a\tb\n1\t2", "\t") == [["a", "b"], ["1", "2"]]


class TestEscaping:
    """Cell escaping used by writers and the text report."""

    @pytest.mark.parametrize("value,expected", [
        ("plain", "plain"),
        ("x,y", '"x,y"'),
        ('say "hi"', '"say ""hi"""'),
        ("two\nlines", '"two\nlines"'),
        (None, ""),
        (42, "42"),
        ("", ""),
    ])
    def test_escape_cell(self, value, expected):
        assert escape_cell(value) == expected

    def test_escape_uses_given_delimiter(self):
        assert escape_cell("a;b", delimiter=";") == '"a;b"'
        assert escape_cell("a;b") == "a;b"

    def test_format_row(self):
        assert format_row(["id", "x,y", None]) == 'id,"x,y",'

    def test_awkward_values_survive_escape_then_split(self):
        record = {"a": "x,y", "b": 'he said "no"', "c": "two\nlines"}
        text = write_delimited([record], ["a", "b", "c"])
        rows = split_rows(text, ",")
        assert rows == [["a", "b", "c"], ["x,y", 'he said "no"', "two\nlines"]]

    def test_write_delimited_fills_missing_fields(self):
        text = write_delimited([{"a": "1"}, {"b": "2"}], ["a", "b"])
        assert text == "a,b\n1,\n,2\n"
