"""Tests for utility functions."""

import pytest
from strata_config.exceptions import ConfigValidationError
from strata_config.utils import backfill_config
from strata_config.utils import coerce_value
from strata_config.utils import deep_merge
from strata_config.utils import get_path
from strata_config.utils import parse_json_value
from strata_config.utils import set_path
from strata_config.utils import union_list
from strata_config.utils import unset_path


class TestDeepMerge:
    """Test deep_merge function."""

    def test_empty_dicts(self):
        """Test merging empty dictionaries."""
        assert deep_merge({}, {}) == {}

    def test_overlay_wins(self):
        """Test overlay takes precedence for simple values."""
        base = {"a": 1, "b": 2}
        overlay = {"b": 20, "c": 3}
        assert deep_merge(base, overlay) == {"a": 1, "b": 20, "c": 3}

    def test_nested_merge(self):
        """Test merging nested dictionaries."""
        base = {"a": 1, "b": {"c": 2, "d": 3}}
        overlay = {"b": {"c": 20}, "e": 5}
        assert deep_merge(base, overlay) == {"a": 1, "b": {"c": 20, "d": 3}, "e": 5}

    def test_dict_replaces_non_dict(self):
        """Test dict in base gets replaced by non-dict in overlay."""
        assert deep_merge({"a": 1, "b": {"c": 2}}, {"b": "string"}) == {"a": 1, "b": "string"}

    def test_lists_replaced_without_strategy(self):
        """Test lists are replaced when no array strategy is given."""
        assert deep_merge({"a": [1, 2, 3]}, {"a": [4, 5]}) == {"a": [4, 5]}

    def test_lists_combined_with_strategy(self):
        """Test lists go through the array strategy when given."""
        result = deep_merge({"a": {"tags": ["x", "y"]}}, {"a": {"tags": ["y", "z"]}}, array_merge=union_list)
        assert result == {"a": {"tags": ["x", "y", "z"]}}

    def test_original_not_modified(self):
        """Test that original dicts are not modified."""
        base = {"a": {"b": 1}}
        overlay = {"a": {"c": 2}}
        result = deep_merge(base, overlay)

        assert result == {"a": {"b": 1, "c": 2}}
        assert base == {"a": {"b": 1}}
        assert overlay == {"a": {"c": 2}}

    def test_realistic_profiles_merge(self):
        """Test merging a user profile tree over a shared one."""
        shared = {"fruit": {"type": "fruit", "properties": {"origin": "California"}}}
        user = {"fruit": {"properties": {"color": "red"}}}
        result = deep_merge(shared, user, array_merge=union_list)
        assert result == {"fruit": {"type": "fruit", "properties": {"origin": "California", "color": "red"}}}


class TestUnionList:
    """Test union_list function."""

    def test_keeps_target_order(self):
        """Test target items come first and source items are appended."""
        assert union_list(["b", "a"], ["c", "a"]) == ["b", "a", "c"]

    def test_deduplicates_source(self):
        """Test repeated source items are added once."""
        assert union_list([], ["x", "x"]) == ["x"]

    def test_does_not_modify_target(self):
        """Test the target list is copied."""
        target = ["a"]
        union_list(target, ["b"])
        assert target == ["a"]


class TestPaths:
    """Test dotted path helpers."""

    def test_get_path(self):
        """Test reading nested values."""
        obj = {"a": {"b": {"c": 1}}}
        assert get_path(obj, "a.b.c") == 1
        assert get_path(obj, "a.x.c") is None
        assert get_path(obj, "a.b.c.d", default="none") == "none"

    def test_set_path_creates_intermediates(self):
        """Test setting a value creates missing objects."""
        obj = {}
        set_path(obj, "a.b.c", 1)
        assert obj == {"a": {"b": {"c": 1}}}

    def test_set_path_replaces_non_dict(self):
        """Test a scalar on the way is replaced by an object."""
        obj = {"a": "scalar"}
        set_path(obj, "a.b", 1)
        assert obj == {"a": {"b": 1}}

    def test_unset_path(self):
        """Test removing values and reporting whether anything was removed."""
        obj = {"a": {"b": 1, "c": 2}}
        assert unset_path(obj, "a.b") is True
        assert obj == {"a": {"c": 2}}
        assert unset_path(obj, "a.b") is False
        assert unset_path(obj, "x.y.z") is False


class TestCoerceValue:
    """Test coerce_value function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("true", True),
            ("false", False),
            ("2", 2),
            ("-15", -15),
            ("007", 7),
            ("3.14", 3),
            ("abc", "abc"),
            ("12abc", "12abc"),
            ("", ""),
        ],
    )
    def test_strings(self, value, expected):
        """Test command-line strings are coerced."""
        result = coerce_value(value)
        assert result == expected
        assert type(result) is type(expected)

    def test_non_strings_unchanged(self):
        """Test non-string values pass through."""
        assert coerce_value([1]) == [1]
        assert coerce_value(None) is None
        assert coerce_value(2.5) == 2.5


class TestBackfillConfig:
    """Test backfill_config function."""

    def test_adds_missing_sections(self):
        """Test missing and null sections are filled in."""
        doc = {"profiles": {"a": {}}, "plugins": None}
        backfill_config(doc)
        assert doc == {"profiles": {"a": {}}, "plugins": [], "defaults": {}, "secure": []}


class TestParseJsonValue:
    """Test parse_json_value function."""

    def test_valid(self):
        """Test valid JSON is parsed."""
        assert parse_json_value('{"a": [1, true]}') == {"a": [1, True]}

    def test_invalid(self):
        """Test invalid JSON raises a validation error."""
        with pytest.raises(ConfigValidationError, match="could not parse JSON value"):
            parse_json_value("{not json")
