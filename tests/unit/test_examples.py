"""Tests for the example catalogue and the sample context."""

from __future__ import annotations

import pytest

from ghexpr.context import ContextSnapshot
from ghexpr.examples import (
    EXAMPLES,
    ExpressionExample,
    categories,
    examples_in,
    sample_context,
)
from ghexpr.expressions.result import evaluate


class TestCatalogue:
    """Tests for EXAMPLES and its helpers."""

    def test_categories_in_catalogue_order(self) -> None:
        assert categories() == [
            "Branch & Event",
            "Variables & Secrets",
            "String Functions",
            "JSON Functions",
            "Status Functions",
            "Deep Context Access",
            "Advanced JSON",
            "Complex Examples",
        ]

    def test_titles_are_unique(self) -> None:
        titles = [example.title for example in EXAMPLES]
        assert len(titles) == len(set(titles))

    def test_examples_in_is_case_insensitive(self) -> None:
        examples = examples_in("status functions")
        assert [example.expression for example in examples] == [
            "success()",
            "failure()",
            "always()",
            "cancelled()",
        ]

    def test_examples_in_without_category(self) -> None:
        assert examples_in() == list(EXAMPLES)

    def test_unknown_category_is_empty(self) -> None:
        assert examples_in("Nope") == []


class TestSampleContext:
    """Tests for sample_context()."""

    def test_fresh_snapshot_each_call(self, sample_snapshot: ContextSnapshot) -> None:
        assert sample_context() == sample_snapshot
        assert sample_context() is not sample_snapshot

    def test_scoped_variables_applied(self, sample_snapshot: ContextSnapshot) -> None:
        assert sample_snapshot.env["NODE_VERSION"] == "18"
        assert sample_snapshot.env["TEST_ENV"] == "test"
        assert sample_snapshot.secrets["DEPLOY_KEY"] == "secret-key-123"
        assert sample_snapshot.vars["BRANCH_NAME"] == "main"

    @pytest.mark.parametrize("example", EXAMPLES, ids=lambda e: e.title)
    def test_every_example_evaluates(
        self, example: ExpressionExample, sample_snapshot: ContextSnapshot
    ) -> None:
        """Each catalogued expression succeeds against the sample context."""
        result = evaluate(example.expression, sample_snapshot)
        assert result.error is None, result.error

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Main Branch Check", True),
            ("Environment Variable with Default", "18"),
            ("Join Commit Messages", "Add new feature"),
            ("First Matrix Entry", "16"),
            ("Version from Job Output", "v1.2.3-42"),
            ("Array Contains via JSON", True),
            ("Event Metadata Format", "🚀 owner/repo@abc123456789 by @github-user"),
            ("Ternary Idiom", "production"),
        ],
    )
    def test_selected_values(
        self, title: str, expected: object, sample_snapshot: ContextSnapshot
    ) -> None:
        (example,) = [e for e in EXAMPLES if e.title == title]
        assert evaluate(example.expression, sample_snapshot).value == expected
