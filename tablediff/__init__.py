"""
tablediff - key-based comparison of two tabular datasets.
"""

__version__ = "1.0.0"

from .core.models import ParsedTable, DiffEntry, DiffResult, DiffCounts, DiffStatus
from .core.errors import (
    TableDiffError,
    FormatError,
    CodecUnavailableError,
    ComparisonPreconditionError,
    KeyFieldMissingError,
    SourceNotLoadedError,
)
from .core.reconciler import Reconciler, diff
from .core.key_selector import KeySelector
from .adapters.file_reader import TabularParser
from .adapters.dialect import detect_delimiter
from .reporting.exporter import ReportExporter, ExportArtifact
from .session import ComparisonSession
from .config.manager import ConfigManager, ComparisonConfig
from .utils.logger import get_logger, configure_logger

__all__ = [
    "ParsedTable",
    "DiffEntry",
    "DiffResult",
    "DiffCounts",
    "DiffStatus",
    "TableDiffError",
    "FormatError",
    "CodecUnavailableError",
    "ComparisonPreconditionError",
    "KeyFieldMissingError",
    "SourceNotLoadedError",
    "Reconciler",
    "diff",
    "KeySelector",
    "TabularParser",
    "detect_delimiter",
    "ReportExporter",
    "ExportArtifact",
    "ComparisonSession",
    "ConfigManager",
    "ComparisonConfig",
    "get_logger",
    "configure_logger",
]
