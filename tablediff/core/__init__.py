"""Data model, errors, key selection and reconciliation."""

from .models import Record, ParsedTable, DiffEntry, DiffResult, DiffCounts, DiffStatus
from .reconciler import Reconciler, diff, records_equal
from .key_selector import KeySelector, KeyValidationResult

__all__ = [
    "Record",
    "ParsedTable",
    "DiffEntry",
    "DiffResult",
    "DiffCounts",
    "DiffStatus",
    "Reconciler",
    "diff",
    "records_equal",
    "KeySelector",
    "KeyValidationResult",
]
