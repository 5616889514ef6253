"""
Format-agnostic tabular parser.
Single responsibility: turn the raw content of one source file into a ParsedTable.
"""

import csv
import json
from pathlib import PurePath
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from .dialect import DEFAULT_SAMPLE_CHARS, delimiter_for, split_rows
from .workbook import (
    WORKBOOK_SUFFIXES,
    WorkbookCodec,
    get_workbook_codec,
    header_names,
    synthetic_column_name,
)
from ..core.errors import CodecUnavailableError, FormatError
from ..core.models import ParsedTable, Record
from ..utils.logger import get_logger


logger = get_logger()


DEFAULT_FIELD_SAMPLE = 1000

# Tried in order when no encoding is given; latin-1 never fails.
DEFAULT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")

_UNSET = object()


def decode_content(content: Union[bytes, str],
                   encoding: Optional[str] = None) -> Tuple[str, str]:
    """
    Decode raw bytes to text.

    A caller chosen encoding is tried first, then utf-8, then the default
    chain.

    Args:
        content: Raw bytes, or text which is only stripped of a leading BOM
        encoding: Preferred encoding

    Returns:
        Tuple of (text, encoding that worked)
    """
    if isinstance(content, str):
        # Text read without utf-8-sig keeps the byte-order mark
        if content.startswith("\ufeff"):
            content = content[1:]
        return content, "text"

    candidates: List[str] = []
    if encoding:
        candidates.extend([encoding, "utf-8"])
    candidates.extend(DEFAULT_ENCODINGS)

    for candidate in candidates:
        try:
            return content.decode(candidate), candidate
        except (UnicodeDecodeError, LookupError):
            if candidate == encoding:
                logger.warning("parser.encoding.fallback", requested=encoding)
            continue

    # latin-1 maps every byte, so the chain above always returns
    raise FormatError("[FORMAT ERROR] Could not decode content with any supported encoding.")


def sample_field_names(records: Iterable[Record],
                       limit: int = DEFAULT_FIELD_SAMPLE) -> List[str]:
    """
    Union of field names over the first records, in order of first appearance.

    Fields that only appear past the sample are not discovered.

    Args:
        records: Records to inspect
        limit: Number of leading records sampled

    Returns:
        Ordered list of unique field names
    """
    seen = {}
    for idx, record in enumerate(records):
        if idx >= limit:
            break
        for name in record:
            seen.setdefault(name, None)
    return list(seen)


def _suffix(file_name: str) -> str:
    return PurePath(file_name or "").suffix.lower()


class TabularParser:
    """
    Parses JSON, delimited text and workbooks into a uniform row model.
    """

    def __init__(self, codec: Any = _UNSET,
                 field_sample_size: int = DEFAULT_FIELD_SAMPLE,
                 delimiter_sample_chars: int = DEFAULT_SAMPLE_CHARS,
                 encoding: Optional[str] = None,
                 delimiter: Optional[str] = None):
        """
        Initialize parser.

        Args:
            codec: Spreadsheet codec; None disables workbook input. Looked up
                once when omitted.
            field_sample_size: Records sampled for field-name discovery
            delimiter_sample_chars: Characters inspected for delimiter detection
            encoding: Preferred encoding for byte input
            delimiter: Force this delimiter for delimited text
        """
        self.codec: Optional[WorkbookCodec] = (
            get_workbook_codec() if codec is _UNSET else codec
        )
        self.field_sample_size = field_sample_size
        self.delimiter_sample_chars = delimiter_sample_chars
        self.encoding = encoding
        self.delimiter = delimiter

    def parse(self, file_name: str, content: Union[bytes, str]) -> ParsedTable:
        """
        Parse one source.

        Args:
            file_name: Source name; its extension selects the format
            content: Raw bytes or already decoded text

        Returns:
            ParsedTable for the source

        Raises:
            FormatError: If content is not tabular data for its format
            CodecUnavailableError: If a workbook cannot be read
        """
        suffix = _suffix(file_name)
        logger.info("parser.starting", file=file_name, format=suffix or "unknown")

        if suffix in WORKBOOK_SUFFIXES:
            table = self.parse_workbook(file_name, content)
        elif suffix == ".json":
            table = self.parse_json(file_name, content)
        else:
            table = self.parse_delimited(file_name, content)

        logger.info("parser.completed",
                   file=file_name,
                   records=len(table.records),
                   fields=len(table.field_names))
        return table

    def parse_json(self, file_name: str, content: Union[bytes, str]) -> ParsedTable:
        """
        Parse a JSON array, or the first array-valued property of an object.

        Object elements become records as-is; anything else is wrapped as
        ``{"value": element}``.
        """
        text, encoding = decode_content(content, self.encoding)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(
                f"[FORMAT ERROR] '{file_name}' is not valid JSON: {e}. "
                f"Suggestion: check the file for truncation or trailing commas."
            ) from e

        meta = {"format": "json", "encoding": encoding}

        if isinstance(data, dict):
            prop = next((k for k, v in data.items() if isinstance(v, list)), None)
            if prop is None:
                raise FormatError(
                    f"[FORMAT ERROR] no array found in '{file_name}'. "
                    f"Suggestion: provide a JSON array or an object with an array property."
                )
            meta["array_property"] = prop
            data = data[prop]
        elif not isinstance(data, list):
            raise FormatError(
                f"[FORMAT ERROR] no array found in '{file_name}'. "
                f"Suggestion: provide a JSON array or an object with an array property."
            )

        records = [item if isinstance(item, dict) else {"value": item} for item in data]
        return self._table(records, file_name, meta)

    def parse_delimited(self, file_name: str, content: Union[bytes, str]) -> ParsedTable:
        """
        Parse CSV, TSV, TXT or extensionless delimited text.

        The first non-blank row is the header. Cells are trimmed, short rows
        are padded with empty strings and surplus cells get ``col{N}`` names.
        """
        text, encoding = decode_content(content, self.encoding)
        delimiter = delimiter_for(file_name, text,
                                  override=self.delimiter,
                                  max_chars=self.delimiter_sample_chars)

        logger.debug("parser.delimited.dialect", file=file_name, delimiter=repr(delimiter))

        try:
            rows = split_rows(text, delimiter)
        except csv.Error as e:
            raise FormatError(
                f"[FORMAT ERROR] Cannot tokenize '{file_name}': {e}."
            ) from e

        meta = {"format": "delimited", "delimiter": delimiter, "encoding": encoding}
        if not rows:
            return self._table([], file_name, meta)

        header = header_names(rows[0])
        records = [self._row_to_record(header, row) for row in rows[1:]]
        return self._table(records, file_name, meta, leading_fields=header)

    def parse_workbook(self, file_name: str, content: Union[bytes, str]) -> ParsedTable:
        """Parse the first sheet of a workbook through the codec."""
        if self.codec is None:
            raise CodecUnavailableError(
                f"[FORMAT ERROR] Spreadsheet support is not available for '{file_name}'. "
                f"Suggestion: convert the file to CSV."
            )
        if isinstance(content, str):
            raise FormatError(
                f"[FORMAT ERROR] Workbook '{file_name}' must be supplied as bytes."
            )

        sheet = self.codec.read_workbook(content, file_name)
        records = [{name: row.get(name, "") for name in sheet.columns} for row in sheet.rows]
        meta = {"format": "workbook", "sheet": 0}
        return self._table(records, file_name, meta, leading_fields=sheet.columns)

    @staticmethod
    def _row_to_record(header: Sequence[str], row: Sequence[str]) -> Record:
        record: Record = {}
        for idx, name in enumerate(header):
            record[name] = row[idx].strip() if idx < len(row) else ""
        for idx in range(len(header), len(row)):
            record[synthetic_column_name(idx, record)] = row[idx].strip()
        return record

    def _table(self, records: List[Record], file_name: str, meta: dict,
               leading_fields: Sequence[str] = ()) -> ParsedTable:
        sampled = sample_field_names(records, self.field_sample_size)
        field_names = list(dict.fromkeys([*leading_fields, *sampled]))
        return ParsedTable(records=records, field_names=field_names,
                           source_label=file_name, format_meta=meta)
