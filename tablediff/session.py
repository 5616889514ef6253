"""
In-memory comparison session.
Single responsibility: hold both sides, enforce preconditions, and run diff and export.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .adapters.file_reader import TabularParser
from .core.errors import FormatError, SourceNotLoadedError
from .core.key_selector import KeySelector, require_key_field
from .core.models import DiffResult, ParsedTable
from .core.reconciler import Reconciler
from .reporting.exporter import ExportArtifact, ReportExporter
from .utils.logger import get_logger


logger = get_logger()


@dataclass
class SourceState:
    """Outcome of loading one side."""

    label: Optional[str] = None
    size: int = 0
    table: Optional[ParsedTable] = None
    error: Optional[FormatError] = None

    @property
    def is_loaded(self) -> bool:
        return self.table is not None


class ComparisonSession:
    """
    Compares two sources chosen by a caller.

    Each side is parsed independently: a format error on one side is kept
    on that side and never blocks loading or retrying the other.
    """

    SIDES = ("left", "right")

    def __init__(self, parser: Optional[TabularParser] = None,
                 right_parser: Optional[TabularParser] = None,
                 reconciler: Optional[Reconciler] = None,
                 exporter: Optional[ReportExporter] = None):
        """
        Initialize session.

        Args:
            parser: Parser for the left side (and the right one when
                right_parser is omitted)
            right_parser: Parser for the right side, e.g. with another encoding
            reconciler: Diff engine
            exporter: Report exporter
        """
        self.parser = parser or TabularParser()
        self.right_parser = right_parser or self.parser
        self.reconciler = reconciler or Reconciler()
        self.exporter = exporter or ReportExporter()
        self.key_selector = KeySelector()
        self.sources = {side: SourceState() for side in self.SIDES}
        self.result: Optional[DiffResult] = None

    def load(self, side: str, file_name: str,
             content: Union[bytes, str]) -> SourceState:
        """
        Parse one side, replacing whatever was loaded there before.

        Format errors are captured on the returned state, not raised.

        Args:
            side: "left" or "right"
            file_name: Source name; extension selects the format
            content: Raw bytes or text

        Returns:
            State of that side
        """
        if side not in self.SIDES:
            raise ValueError(f"Unknown side: {side!r}")

        parser = self.parser if side == "left" else self.right_parser
        state = SourceState(label=file_name, size=len(content))

        try:
            state.table = parser.parse(file_name, content)
        except FormatError as e:
            logger.error("session.load_failed", side=side, file=file_name, error=str(e))
            state.error = e

        self.sources[side] = state
        self.result = None
        return state

    def load_left(self, file_name: str, content: Union[bytes, str]) -> SourceState:
        return self.load("left", file_name, content)

    def load_right(self, file_name: str, content: Union[bytes, str]) -> SourceState:
        return self.load("right", file_name, content)

    def load_path(self, side: str, path: Union[str, Path]) -> SourceState:
        """Read a file from disk and load it on one side."""
        path = Path(path)
        return self.load(side, path.name, path.read_bytes())

    def clear(self):
        """Forget both sides and any result."""
        self.sources = {side: SourceState() for side in self.SIDES}
        self.result = None

    def _tables(self):
        missing = [side for side in self.SIDES if not self.sources[side].is_loaded]
        if missing:
            raise SourceNotLoadedError(
                f"[COMPARISON ERROR] No parsed table for: {', '.join(missing)}. "
                f"Suggestion: load a readable file on each side first."
            )
        return self.sources["left"].table, self.sources["right"].table

    def key_candidates(self) -> List[str]:
        """
        Key candidates for a selection control.

        Raises:
            SourceNotLoadedError: If either side is not parsed
        """
        left, right = self._tables()
        return self.key_selector.discover_key_candidates(left, right)

    def compare(self, key_field: Optional[str]) -> DiffResult:
        """
        Diff both sides on a key field.

        Raises:
            SourceNotLoadedError: If either side is not parsed
            KeyFieldMissingError: If no key field was chosen
        """
        left, right = self._tables()
        key_field = require_key_field(key_field)

        validation = self.key_selector.validate_key(left, right, key_field)
        for warning in validation.warnings:
            logger.warning("session.key_warning", key=key_field, detail=warning)

        self.result = self.reconciler.diff(left, right, key_field)
        return self.result

    def export(self, base_name: Optional[str] = None) -> ExportArtifact:
        """
        Export the last result.

        Raises:
            SourceNotLoadedError: If nothing has been compared yet
        """
        if self.result is None:
            raise SourceNotLoadedError(
                "[COMPARISON ERROR] Nothing to export. "
                "Suggestion: run a comparison first."
            )
        if base_name is None:
            left = Path(self.sources["left"].label or "left").stem
            right = Path(self.sources["right"].label or "right").stem
            base_name = f"{left}_vs_{right}"
        return self.exporter.export(self.result, base_name)
