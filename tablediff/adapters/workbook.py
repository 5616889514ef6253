"""
Spreadsheet codec behind a narrow read/write interface.
Single responsibility: move tables in and out of workbook files.
"""

import importlib.util
import io
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence

from ..core.errors import CodecUnavailableError
from ..core.models import Record
from ..utils.logger import get_logger


logger = get_logger()


READ_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
    ".xlsb": "pyxlsb",
}
WRITE_ENGINES = ("xlsxwriter", "openpyxl")
WORKBOOK_SUFFIXES = tuple(READ_ENGINES)

# Excel rejects longer sheet names.
MAX_SHEET_NAME = 31


@dataclass
class SheetData:
    """One worksheet worth of rows."""

    name: str
    columns: List[str]
    rows: List[Record] = field(default_factory=list)


class WorkbookCodec(ABC):
    """Read the first sheet of a workbook, or write several sheets to one."""

    @abstractmethod
    def read_workbook(self, content: bytes, file_name: str) -> SheetData:
        """
        Read the first sheet.

        Raises:
            CodecUnavailableError: If the workbook cannot be read
        """
        pass

    @abstractmethod
    def write_workbook(self, sheets: Sequence[SheetData]) -> bytes:
        """
        Write sheets in order into a single xlsx document.

        Raises:
            CodecUnavailableError: If the workbook cannot be written
        """
        pass


def has_module(name: str) -> bool:
    """True when the module can be imported in this environment."""
    return importlib.util.find_spec(name) is not None


def synthetic_column_name(index: int, taken: Collection[str] = ()) -> str:
    """
    Name for an unlabeled column at a 0-based position.

    A real column may already be called ``col3``; the synthetic name then
    gets a numeric suffix (``col3_2``) so no value is overwritten.
    """
    base = f"col{index + 1}"
    name, suffix = base, 2
    while name in taken:
        name = f"{base}_{suffix}"
        suffix += 1
    return name


def header_names(labels: Iterable[Any]) -> List[str]:
    """Trimmed header labels with blank ones replaced by synthetic names."""
    labels = [str(label).strip() for label in labels]
    taken = set(labels)
    names = []
    for idx, label in enumerate(labels):
        if not label:
            label = synthetic_column_name(idx, taken)
            taken.add(label)
        names.append(label)
    return names


def cell_value(value: Any) -> Any:
    """
    Make a record value safe to place in a worksheet cell.

    Nested containers are written as compact JSON text.
    """
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return value


class PandasWorkbookCodec(WorkbookCodec):
    """
    Workbook codec built on pandas.

    Reading uses openpyxl, xlrd or pyxlsb depending on the extension;
    writing prefers xlsxwriter and falls back to openpyxl.
    """

    def __init__(self, write_engine: Optional[str] = None):
        """
        Initialize codec.

        Args:
            write_engine: Engine used for writing; first installed one if omitted
        """
        if write_engine is None:
            write_engine = next((e for e in WRITE_ENGINES if has_module(e)), None)
        self.write_engine = write_engine

    def read_workbook(self, content: bytes, file_name: str) -> SheetData:
        suffix = PurePath(file_name or "").suffix.lower()
        engine = READ_ENGINES.get(suffix, "openpyxl")

        if not has_module(engine):
            raise CodecUnavailableError(
                f"[FORMAT ERROR] Cannot read '{file_name}': spreadsheet engine "
                f"'{engine}' is not installed. Suggestion: convert the file to CSV."
            )

        import pandas as pd

        logger.info("workbook.reading", file=file_name, engine=engine)

        try:
            frame = pd.read_excel(io.BytesIO(content), sheet_name=0,
                                  dtype=object, engine=engine)
        except Exception as e:
            raise CodecUnavailableError(
                f"[FORMAT ERROR] Cannot read workbook '{file_name}': {e}. "
                f"Suggestion: convert the file to CSV."
            ) from e

        # pandas labels blank header cells "Unnamed: N"
        columns = header_names(
            "" if str(name).startswith("Unnamed:") else str(name) for name in frame.columns
        )
        frame.columns = columns

        frame = frame.astype(object).where(pd.notna(frame), "")
        rows = frame.to_dict(orient="records")

        logger.info("workbook.loaded", file=file_name,
                   rows=len(rows), columns=len(columns))

        return SheetData(name=file_name, columns=columns, rows=rows)

    def write_workbook(self, sheets: Sequence[SheetData]) -> bytes:
        if self.write_engine is None:
            raise CodecUnavailableError(
                "[EXPORT ERROR] No spreadsheet writer is installed. "
                f"Suggestion: install one of {', '.join(WRITE_ENGINES)}."
            )

        import pandas as pd

        engine_kwargs: Dict[str, Any] = {}
        if self.write_engine == "xlsxwriter":
            # Cell text such as "=SUM(A1)" must stay text.
            engine_kwargs = {"options": {"strings_to_formulas": False,
                                         "strings_to_urls": False}}

        buffer = io.BytesIO()
        try:
            with pd.ExcelWriter(buffer, engine=self.write_engine,
                                engine_kwargs=engine_kwargs) as writer:
                for sheet in sheets:
                    rows = [{k: cell_value(v) for k, v in row.items()} for row in sheet.rows]
                    frame = pd.DataFrame(rows, columns=sheet.columns)
                    frame.to_excel(writer, sheet_name=sheet.name[:MAX_SHEET_NAME], index=False)
        except Exception as e:
            raise CodecUnavailableError(
                f"[EXPORT ERROR] Workbook write failed: {e}"
            ) from e

        return buffer.getvalue()


_codec: Optional[WorkbookCodec] = None
_codec_checked = False


def get_workbook_codec(refresh: bool = False) -> Optional[WorkbookCodec]:
    """
    Return the spreadsheet codec, or None when it cannot work here.

    Availability is checked once and cached.

    Args:
        refresh: Re-run the availability check

    Returns:
        Codec instance or None
    """
    global _codec, _codec_checked
    if _codec_checked and not refresh:
        return _codec

    _codec_checked = True
    if has_module("pandas") and any(has_module(e) for e in WRITE_ENGINES):
        _codec = PandasWorkbookCodec()
    else:
        _codec = None

    logger.debug("workbook.codec.checked", available=_codec is not None)
    return _codec
