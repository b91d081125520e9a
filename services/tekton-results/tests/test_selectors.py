"""Tests for parse_label_selector and matches_labels."""

from __future__ import annotations

import pytest

from tekton_results.exceptions import MalformedSelectorError
from tekton_results.selectors import matches_labels, parse_label_selector


class TestParseLabelSelector:
    def test_parses_pairs(self) -> None:
        """Well-formed pairs map to exactly those entries."""
        assert parse_label_selector("app=web,tier=backend") == {
            "app": "web",
            "tier": "backend",
        }

    def test_trims_whitespace_around_separators(self) -> None:
        """Whitespace around keys, values and commas is ignored."""
        assert parse_label_selector(" app = web , tier=backend ") == {
            "app": "web",
            "tier": "backend",
        }

    @pytest.mark.parametrize("selector", ["", "   ", None])
    def test_blank_input_is_empty(self, selector: str | None) -> None:
        """Blank or missing selectors mean no constraint."""
        assert parse_label_selector(selector) == {}

    def test_last_duplicate_wins(self) -> None:
        """A repeated key keeps its last value."""
        assert parse_label_selector("app=web,app=api") == {"app": "api"}

    def test_value_may_contain_equals(self) -> None:
        """Only the first '=' separates key from value."""
        assert parse_label_selector("expr=a=b") == {"expr": "a=b"}

    def test_skips_empty_segments(self) -> None:
        """Empty segments between commas are skipped."""
        assert parse_label_selector("app=web,,tier=db,") == {"app": "web", "tier": "db"}

    def test_missing_equals_names_pair(self) -> None:
        """A pair without '=' is reported by name."""
        with pytest.raises(MalformedSelectorError, match="'tier'"):
            parse_label_selector("app=web,tier")

    @pytest.mark.parametrize("selector", ["=web", "app=", " = "])
    def test_empty_side_fails(self, selector: str) -> None:
        """An empty key or value is rejected."""
        with pytest.raises(MalformedSelectorError, match="empty key or value"):
            parse_label_selector(selector)


class TestMatchesLabels:
    def test_empty_expected_always_matches(self) -> None:
        """No expected labels matches anything."""
        assert matches_labels(None, {}) is True
        assert matches_labels({"a": "b"}, {}) is True

    def test_containment(self) -> None:
        """Every expected pair must be present in the actual labels."""
        actual = {"app": "web", "tier": "backend", "team": "ci"}
        assert matches_labels(actual, {"app": "web", "tier": "backend"}) is True

    def test_value_mismatch(self) -> None:
        """A differing value does not match."""
        assert matches_labels({"app": "web"}, {"app": "api"}) is False

    def test_missing_labels(self) -> None:
        """A run without labels never matches a non-empty selector."""
        assert matches_labels(None, {"app": "web"}) is False
        assert matches_labels({}, {"app": "web"}) is False
