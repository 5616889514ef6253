"""
Key discovery and validation.
Single responsibility: help the caller choose a key field shared by both tables.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import KeyFieldMissingError
from .models import ParsedTable
from .reconciler import index_token
from ..utils.logger import get_logger


logger = get_logger()


@dataclass
class KeyStats:
    """Key statistics for one table."""

    total_rows: int
    keyed_rows: int
    unique_values: int

    @property
    def missing_count(self) -> int:
        return self.total_rows - self.keyed_rows

    @property
    def duplicate_count(self) -> int:
        return self.keyed_rows - self.unique_values

    @property
    def is_unique(self) -> bool:
        return self.duplicate_count == 0


@dataclass
class KeyValidationResult:
    """Results from validating a key field against both tables."""

    key_field: str
    is_valid: bool
    left: KeyStats
    right: KeyStats
    warnings: List[str] = field(default_factory=list)


def key_stats(table: ParsedTable, key_field: str) -> KeyStats:
    """
    Count rows, keyed rows and distinct key values of one table.

    Empty strings count as keyed; only absent or None keys are missing.
    """
    tokens = set()
    keyed = 0
    for record in table.records:
        value = record.get(key_field)
        token = None if value is None else index_token(value)
        if token is None:
            continue
        keyed += 1
        tokens.add(token)
    return KeyStats(total_rows=len(table.records), keyed_rows=keyed,
                    unique_values=len(tokens))


def require_key_field(key_field: Optional[str]) -> str:
    """
    Check that a key field has been chosen.

    Raises:
        KeyFieldMissingError: If no key field was given
    """
    if key_field is None or not str(key_field).strip():
        raise KeyFieldMissingError(
            "[KEY SELECTION ERROR] No key field chosen. "
            "Suggestion: pick a field present in both tables."
        )
    return key_field


class KeySelector:
    """
    Discovers key candidates and validates a chosen key.
    """

    def common_fields(self, left: ParsedTable, right: ParsedTable) -> List[str]:
        """Field names present in both tables, in left order."""
        right_names = set(right.field_names)
        return [name for name in left.field_names if name in right_names]

    def discover_key_candidates(self, left: ParsedTable,
                                right: ParsedTable) -> List[str]:
        """
        Common fields ordered for a key-selection control.

        Fields that are unique and fully populated on both sides come
        first; the original left order is kept within each group.

        Args:
            left: Left table
            right: Right table

        Returns:
            Candidate field names; empty when the tables share no field
        """
        common = self.common_fields(left, right)

        def rank(name: str) -> int:
            stats = (key_stats(left, name), key_stats(right, name))
            if all(s.is_unique and s.missing_count == 0 for s in stats):
                return 0
            if all(s.is_unique for s in stats):
                return 1
            return 2

        candidates = sorted(common, key=rank)

        logger.info("key_selector.discover_complete",
                   common_fields=len(common),
                   top=candidates[:3])
        return candidates

    def validate_key(self, left: ParsedTable, right: ParsedTable,
                     key_field: Optional[str]) -> KeyValidationResult:
        """
        Validate a chosen key against both tables.

        A key that is missing from either table's field names is invalid.
        Duplicates and keyless rows only produce warnings, since the
        reconciler tolerates both.

        Raises:
            KeyFieldMissingError: If no key field was chosen
        """
        key_field = require_key_field(key_field)

        left_stats = key_stats(left, key_field)
        right_stats = key_stats(right, key_field)
        warnings: List[str] = []
        is_valid = True

        for side, table, stats in (("left", left, left_stats), ("right", right, right_stats)):
            if key_field not in table.field_names:
                is_valid = False
                warnings.append(f"'{key_field}' is not a field of the {side} table ({table.source_label})")
                continue
            if stats.missing_count:
                warnings.append(f"{stats.missing_count} {side} rows have no '{key_field}' value and will be skipped")
            if stats.duplicate_count:
                warnings.append(f"{stats.duplicate_count} duplicate '{key_field}' values in the {side} table; the last row wins")

        logger.info("key_selector.validate_complete",
                   key=key_field,
                   is_valid=is_valid,
                   warnings=len(warnings))

        return KeyValidationResult(key_field=key_field, is_valid=is_valid,
                                   left=left_stats, right=right_stats,
                                   warnings=warnings)
