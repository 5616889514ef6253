"""
Unit tests for KeySelector.
"""

import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from tablediff.core.errors import ComparisonPreconditionError, KeyFieldMissingError
from tablediff.core.key_selector import KeySelector, key_stats, require_key_field
from tablediff.core.models import ParsedTable


def table(records, field_names=None, label="t"):
    if field_names is None:
        field_names = list(dict.fromkeys(name for r in records for name in r))
    return ParsedTable(records=records, field_names=field_names, source_label=label)


class TestKeyStats:

    def test_counts(self):
        stats = key_stats(table([{"id": 1}, {"id": 1}, {"id": None}, {"id": ""}, {}]), "id")

        assert stats.total_rows == 5
        assert stats.keyed_rows == 3
        assert stats.unique_values == 2
        assert stats.missing_count == 2
        assert stats.duplicate_count == 1
        assert not stats.is_unique

    def test_number_and_string_values_are_distinct(self):
        stats = key_stats(table([{"id": 1}, {"id": "1"}]), "id")
        assert stats.is_unique


class TestKeyCandidates:
    """Candidate discovery for key selection."""

    def setup_method(self):
        self.selector = KeySelector()

    def test_common_fields_keep_left_order(self):
        left = table([{"b": 1, "a": 1, "only_left": 1}])
        right = table([{"a": 1, "b": 1, "only_right": 1}])

        assert self.selector.common_fields(left, right) == ["b", "a"]

    def test_unique_fields_rank_first(self):
        left = table([
            {"group": "x", "sku": "A", "id": 1},
            {"group": "x", "sku": "B", "id": 2},
        ])
        right = table([
            {"group": "y", "sku": "A", "id": 1},
            {"group": "y", "sku": None, "id": 3},
        ])

        candidates = self.selector.discover_key_candidates(left, right)

        assert candidates == ["id", "sku", "group"]

    def test_no_common_fields(self):
        assert self.selector.discover_key_candidates(table([{"a": 1}]), table([{"b": 1}])) == []


class TestValidateKey:

    def setup_method(self):
        self.selector = KeySelector()

    def test_valid_key(self):
        left = table([{"id": 1}, {"id": 2}])
        right = table([{"id": 2}])

        result = self.selector.validate_key(left, right, "id")

        assert result.is_valid
        assert result.warnings == []
        assert result.left.keyed_rows == 2

    def test_key_absent_on_one_side_is_invalid(self):
        left = table([{"id": 1}], label="a.csv")
        right = table([{"code": 1}], label="b.csv")

        result = self.selector.validate_key(left, right, "id")

        assert not result.is_valid
        assert any("b.csv" in w for w in result.warnings)

    def test_duplicates_and_missing_only_warn(self):
        left = table([{"id": 1}, {"id": 1}, {"id": None}])
        right = table([{"id": 1}])

        result = self.selector.validate_key(left, right, "id")

        assert result.is_valid
        assert len(result.warnings) == 2

    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_unchosen_key_raises(self, key):
        with pytest.raises(KeyFieldMissingError):
            self.selector.validate_key(table([{"id": 1}]), table([{"id": 1}]), key)

    def test_missing_key_is_a_precondition_error(self):
        with pytest.raises(ComparisonPreconditionError, match="No key field chosen"):
            require_key_field(None)

    def test_require_key_field_returns_key(self):
        assert require_key_field("id") == "id"
