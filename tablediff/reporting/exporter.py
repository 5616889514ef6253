"""
Report export for classified diffs.
Single responsibility: serialize a DiffResult as a workbook, or as sectioned text when that fails.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from ..adapters.dialect import format_row
from ..adapters.workbook import SheetData, WorkbookCodec, cell_value, get_workbook_codec
from ..core.errors import CodecUnavailableError
from ..core.models import DiffEntry, DiffResult, DiffStatus, Record
from ..utils.logger import get_logger


logger = get_logger()


STATUS_COLUMN = "__status"
KEY_COLUMN = "__key"
LEFT_PREFIX = "L."
RIGHT_PREFIX = "R."

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"

_UNSET = object()


@dataclass
class ExportArtifact:
    """Downloadable export and how it was produced."""

    content: bytes
    filename: str
    format: str
    media_type: str
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    def __iter__(self) -> Iterator[Any]:
        # Allows ``content, filename = exporter.export(...)``
        yield self.content
        yield self.filename


def flatten_entry(entry: DiffEntry) -> Record:
    """
    One report row for a diff entry.

    Carries status and key, then left fields prefixed ``L.`` and right
    fields prefixed ``R.``. A missing side contributes no fields.
    """
    row: Record = {STATUS_COLUMN: entry.status.value, KEY_COLUMN: entry.key}
    if entry.left is not None:
        for name, value in entry.left.items():
            row[LEFT_PREFIX + name] = value
    if entry.right is not None:
        for name, value in entry.right.items():
            row[RIGHT_PREFIX + name] = value
    return row


def report_columns(rows: Sequence[Record]) -> List[str]:
    """Union of row columns, status and key first."""
    columns = {STATUS_COLUMN: None, KEY_COLUMN: None}
    for row in rows:
        for name in row:
            columns.setdefault(name, None)
    return list(columns)


def build_sheets(result: DiffResult) -> List[SheetData]:
    """One sheet per status, in export order, even when a group is empty."""
    sheets = []
    for status in DiffStatus:
        rows = [flatten_entry(e) for e in result.entries_by_status(status)]
        sheets.append(SheetData(name=status.value, columns=report_columns(rows), rows=rows))
    return sheets


def safe_base_name(base_name: Optional[str], default: str = "comparison") -> str:
    """Strip path separators and characters file systems reject."""
    name = re.sub(r'[\\/:*?"<>|]+', "_", (base_name or "").strip()).strip(" .")
    return name or default


class ReportExporter:
    """
    Writes a diff as a four-sheet workbook, degrading to flat text.

    Export never raises for codec problems: the reason for degrading is
    kept on the returned artifact.
    """

    def __init__(self, codec: Any = _UNSET):
        """
        Initialize exporter.

        Args:
            codec: Spreadsheet codec; None forces the text format. Looked
                up once when omitted.
        """
        self.codec: Optional[WorkbookCodec] = (
            get_workbook_codec() if codec is _UNSET else codec
        )

    def export(self, result: DiffResult, base_name: str) -> ExportArtifact:
        """
        Serialize a diff.

        Args:
            result: Classified diff
            base_name: File name without extension

        Returns:
            ExportArtifact with bytes and file name
        """
        base = safe_base_name(base_name)
        sheets = build_sheets(result)

        try:
            artifact = self.export_workbook(sheets, base)
        except Exception as e:
            # Any codec failure degrades to text
            reason = str(e) or type(e).__name__
            logger.warning("exporter.workbook_fallback", reason=reason)
            artifact = self.export_text(result, sheets, base)
            artifact.fallback_reason = reason

        logger.info("exporter.completed",
                   file=artifact.filename,
                   format=artifact.format,
                   bytes=len(artifact.content))
        return artifact

    def export_workbook(self, sheets: Sequence[SheetData], base: str) -> ExportArtifact:
        """
        Primary strategy.

        Raises:
            CodecUnavailableError: If no codec is configured or writing fails
        """
        if self.codec is None:
            raise CodecUnavailableError("[EXPORT ERROR] Spreadsheet codec is not available.")
        content = self.codec.write_workbook(sheets)
        return ExportArtifact(content=content, filename=f"{base}.xlsx",
                              format="xlsx", media_type=XLSX_MEDIA_TYPE)

    def export_text(self, result: DiffResult, sheets: Sequence[SheetData],
                    base: str) -> ExportArtifact:
        """
        Fallback strategy: one CSV section per status under ``##`` headers.
        """
        lines = [f"# key: {result.key_field}"]
        for sheet in sheets:
            lines.append(f"## {sheet.name}")
            lines.append(format_row(sheet.columns))
            for row in sheet.rows:
                lines.append(format_row(cell_value(row.get(c)) for c in sheet.columns))
            lines.append("")

        text = "\n".join(lines)
        return ExportArtifact(content=text.encode("utf-8-sig"), filename=f"{base}.csv",
                              format="csv", media_type=CSV_MEDIA_TYPE)
