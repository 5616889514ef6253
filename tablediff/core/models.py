"""
Shared data model for parsed tables and classified diffs.
Single responsibility: describe what flows between parser, reconciler and exporter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# Flat mapping from field name to a scalar or string value. Records of the
# same table may carry different field sets.
Record = Dict[str, Any]


class DiffStatus(str, Enum):
    """Classification of one key. Member order is the export order."""

    ADDED = "added"
    DELETED = "deleted"
    CHANGED = "changed"
    SAME = "same"


@dataclass
class ParsedTable:
    """Uniform row model produced from one source file."""

    records: List[Record]
    field_names: List[str]
    source_label: str
    format_meta: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.records)

    def preview(self, limit: int = 30) -> List[Record]:
        """
        First records of the table, for a quick look before choosing a key.

        Args:
            limit: Maximum number of records returned

        Returns:
            Leading records, unmodified
        """
        if limit < 0:
            raise ValueError("Preview limit cannot be negative")
        return self.records[:limit]


@dataclass
class DiffEntry:
    """Classification of a single key."""

    key: Any
    status: DiffStatus
    left: Optional[Record] = None
    right: Optional[Record] = None
    changed_fields: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Enforce which sides must be present for each status."""
        has_left = self.left is not None
        has_right = self.right is not None

        if self.status is DiffStatus.DELETED:
            valid = has_left and not has_right
        elif self.status is DiffStatus.ADDED:
            valid = has_right and not has_left
        else:
            valid = has_left and has_right

        if not valid:
            raise ValueError(
                f"Entry for key {self.key!r} with status '{self.status.value}' "
                f"has left={has_left}, right={has_right}"
            )


@dataclass
class DiffCounts:
    """Summary counts of a diff."""

    total: int = 0
    added: int = 0
    deleted: int = 0
    changed: int = 0
    same: int = 0

    def increment(self, status: DiffStatus):
        """Count one more entry of the given status."""
        setattr(self, status.value, getattr(self, status.value) + 1)
        self.total += 1

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "added": self.added,
            "deleted": self.deleted,
            "changed": self.changed,
            "same": self.same,
        }


@dataclass
class DiffResult:
    """Classified row-level diff of two tables keyed on one field."""

    key_field: str
    counts: DiffCounts = field(default_factory=DiffCounts)
    entries: List[DiffEntry] = field(default_factory=list)
    skipped: Dict[str, int] = field(default_factory=lambda: {"left": 0, "right": 0})
    duplicates: Dict[str, int] = field(default_factory=lambda: {"left": 0, "right": 0})

    def add(self, entry: DiffEntry):
        """Append an entry and keep the counts in step."""
        self.entries.append(entry)
        self.counts.increment(entry.status)

    def entries_by_status(self, status: DiffStatus) -> List[DiffEntry]:
        """Entries of one status, in result order."""
        return [e for e in self.entries if e.status is status]

    def mismatches(self) -> List[DiffEntry]:
        """Entries that are not ``same``; used for mismatch-only views."""
        return [e for e in self.entries if e.status is not DiffStatus.SAME]

    @property
    def has_differences(self) -> bool:
        return self.counts.same != self.counts.total
