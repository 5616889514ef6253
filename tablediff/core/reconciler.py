"""
Key-indexed reconciliation of two parsed tables.
Single responsibility: classify every key as added, deleted, changed or same.
"""

import math
from numbers import Number
from typing import Any, Dict, Hashable, List, Optional, Tuple

from .models import (
    DiffEntry,
    DiffResult,
    DiffStatus,
    ParsedTable,
    Record,
)
from ..utils.logger import get_logger


logger = get_logger()


def index_token(value: Any) -> Optional[Tuple[str, Hashable]]:
    """
    Hashable identity of a key value under strict comparison.

    Python treats ``True == 1`` and hashes them together, so values are
    tagged by kind first. Ints and floats share the numeric kind.
    Returns None for values that cannot be indexed.
    """
    if isinstance(value, bool):
        kind = "bool"
    elif isinstance(value, Number):
        kind = "number"
    else:
        kind = type(value).__name__
    try:
        hash(value)
    except TypeError:
        return None
    return kind, value


def values_equal(left: Any, right: Any) -> bool:
    """
    Strict first-level value comparison.

    No coercion between kinds: ``1`` differs from ``"1"`` and from ``True``.
    NaN never equals anything. Nested lists and objects follow the same
    rules element by element, so ``[1]`` differs from ``[True]``; they still
    count as one value and are never reported field by field.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, Number) and isinstance(right, Number):
        if isinstance(left, float) and math.isnan(left):
            return False
        return left == right
    if type(left) is not type(right):
        return False
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(
            values_equal(left[name], right[name]) for name in left
        )
    if isinstance(left, (list, tuple)):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    return left == right


def changed_fields(left: Record, right: Record) -> List[str]:
    """
    Field names whose presence or value differs between two records.

    Left fields come first in left order, then right-only fields.
    """
    names = list(dict.fromkeys([*left, *right]))
    return [
        name for name in names
        if name not in left or name not in right
        or not values_equal(left[name], right[name])
    ]


def records_equal(left: Record, right: Record) -> bool:
    """
    Shallow equality: same field-name set and every value strictly equal.
    """
    if left.keys() != right.keys():
        return False
    return all(values_equal(left[name], right[name]) for name in left)


class Reconciler:
    """
    Compares two tables keyed on a single field.

    Records whose key is absent or None are left out of the diff and only
    counted in ``DiffResult.skipped``. When a key repeats on one side, the
    last record wins and the entry keeps the position of the first one.
    """

    def diff(self, left: ParsedTable, right: ParsedTable, key_field: str) -> DiffResult:
        """
        Classify the union of keys of both tables.

        Entry order is left-table order, followed by right-only keys in
        right-table order.

        Args:
            left: Table treated as the old version
            right: Table treated as the new version
            key_field: Field identifying a row on both sides

        Returns:
            DiffResult with entries and counts
        """
        logger.info("reconciler.starting",
                   left=left.source_label,
                   right=right.source_label,
                   key=key_field)

        result = DiffResult(key_field=key_field)

        left_index = self._build_index(left, key_field, "left", result)
        right_index = self._build_index(right, key_field, "right", result)

        for token, (key, left_record) in left_index.items():
            match = right_index.get(token)
            if match is None:
                result.add(DiffEntry(key=key, status=DiffStatus.DELETED, left=left_record))
                continue

            right_record = match[1]
            if records_equal(left_record, right_record):
                result.add(DiffEntry(key=key, status=DiffStatus.SAME,
                                     left=left_record, right=right_record))
            else:
                result.add(DiffEntry(key=key, status=DiffStatus.CHANGED,
                                     left=left_record, right=right_record,
                                     changed_fields=changed_fields(left_record, right_record)))

        for token, (key, right_record) in right_index.items():
            if token not in left_index:
                result.add(DiffEntry(key=key, status=DiffStatus.ADDED, right=right_record))

        if result.skipped["left"] or result.skipped["right"]:
            logger.warning("reconciler.keyless_records_skipped",
                          key=key_field,
                          left=result.skipped["left"],
                          right=result.skipped["right"])

        logger.info("reconciler.completed", key=key_field, **result.counts.to_dict())
        return result

    def _build_index(self, table: ParsedTable, key_field: str, side: str,
                     result: DiffResult) -> Dict[Tuple[str, Hashable], Tuple[Any, Record]]:
        """
        Map key tokens to (key value, record) for one side.

        Args:
            table: Table to index
            key_field: Key field name
            side: "left" or "right", for the skip and duplicate counters
            result: Result receiving the counters

        Returns:
            Insertion-ordered index
        """
        index: Dict[Tuple[str, Hashable], Tuple[Any, Record]] = {}

        for record in table.records:
            key = record.get(key_field)
            token = None if key is None else index_token(key)
            if token is None:
                result.skipped[side] += 1
                continue
            if token in index:
                result.duplicates[side] += 1
            index[token] = (key, record)

        if result.duplicates[side]:
            logger.warning("reconciler.duplicate_keys",
                          side=side,
                          table=table.source_label,
                          duplicates=result.duplicates[side])

        return index


def diff(left: ParsedTable, right: ParsedTable, key_field: str) -> DiffResult:
    """Module-level shortcut for ``Reconciler().diff``."""
    return Reconciler().diff(left, right, key_field)
