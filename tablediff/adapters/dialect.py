"""
Delimited-text dialect handling.
Single responsibility: infer separators, tokenize quoted fields and write cells back.
"""

import csv
import io
from pathlib import PurePath
from typing import Any, Iterable, List, Optional, Sequence

from ..core.models import Record


COMMA = ","
TAB = "\t"
SEMICOLON = ";"

DEFAULT_SAMPLE_CHARS = 2000


def detect_delimiter(sample: str, max_chars: int = DEFAULT_SAMPLE_CHARS) -> str:
    """
    Infer the field separator from the head of a delimited source.

    Counts commas, tabs and semicolons. Ties go to tab, then comma, then
    semicolon, so a sample without any of them reports tab.

    Args:
        sample: Leading text of the source
        max_chars: Only this many characters are inspected

    Returns:
        The detected delimiter character

    Examples:
        >>> detect_delimiter("a\\tb\\tc\\n1\\t2\\t3")
        '\\t'
        >>> detect_delimiter("a;b;c")
        ';'
    """
    head = sample[:max_chars]
    commas = head.count(COMMA)
    tabs = head.count(TAB)
    semicolons = head.count(SEMICOLON)

    if tabs >= commas and tabs >= semicolons:
        return TAB
    if commas >= semicolons:
        return COMMA
    return SEMICOLON


def delimiter_for(file_name: str, sample: str,
                  override: Optional[str] = None,
                  max_chars: int = DEFAULT_SAMPLE_CHARS) -> str:
    """
    Pick the delimiter for a source, honouring explicit extensions.

    Args:
        file_name: Source name, only its extension is used
        sample: Leading text used when detection is needed
        override: Caller supplied delimiter, wins over everything
        max_chars: Detection sample size

    Returns:
        Delimiter character
    """
    if override:
        return override

    suffix = PurePath(file_name or "").suffix.lower()
    if suffix == ".tsv":
        return TAB
    if suffix == ".csv":
        return COMMA
    return detect_delimiter(sample, max_chars=max_chars)


def normalize_newlines(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _is_blank(row: Sequence[str]) -> bool:
    return not row or (len(row) == 1 and not row[0].strip())


def split_rows(text: str, delimiter: str) -> List[List[str]]:
    """
    Tokenize delimited text into rows of raw cells.

    Quoted fields may contain the delimiter or line breaks, and ``""``
    inside a quoted field is an escaped quote. Blank lines are dropped.

    Args:
        text: Whole source text
        delimiter: Field separator

    Returns:
        List of rows, each a list of untrimmed cell strings

    Raises:
        csv.Error: If the text cannot be tokenized
    """
    reader = csv.reader(
        io.StringIO(normalize_newlines(text), newline=""),
        delimiter=delimiter,
        quotechar='"',
        doublequote=True,
    )
    return [row for row in reader if not _is_blank(row)]


def escape_cell(value: Any, delimiter: str = COMMA) -> str:
    """
    Render one value as a delimited-text cell.

    None becomes the empty string. Cells containing the delimiter, a quote
    or a line break are wrapped in quotes with embedded quotes doubled.

    Examples:
        >>> escape_cell('say "hi", then leave')
        '"say ""hi"", then leave"'
        >>> escape_cell(None)
        ''
    """
    if value is None:
        return ""
    text = str(value)
    if delimiter in text or '"' in text or "\n" in text or "\r" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def format_row(values: Iterable[Any], delimiter: str = COMMA) -> str:
    """Join escaped cells into one line (without terminator)."""
    return delimiter.join(escape_cell(v, delimiter) for v in values)


def write_delimited(records: Sequence[Record], field_names: Sequence[str],
                    delimiter: str = COMMA) -> str:
    """
    Serialize records as delimited text with a header row.

    Fields missing from a record are written as empty cells.

    Args:
        records: Records to write
        field_names: Column order; also the header
        delimiter: Field separator

    Returns:
        Text with one LF-terminated line per row
    """
    lines = [format_row(field_names, delimiter)]
    for record in records:
        lines.append(format_row((record.get(name) for name in field_names), delimiter))
    return "\n".join(lines) + "\n"
