"""Tests for operator normalization."""

import pytest

from simplees.exceptions import InvalidArgumentError
from simplees.query.clauses import BooleanType, ClauseKind
from simplees.query.operators import OPERATORS, is_operator, normalize


class TestIsOperator:
    """Test operator recognition."""

    @pytest.mark.parametrize("token", OPERATORS)
    def test_supported_operators(self, token):
        """Every supported operator is recognized."""
        assert is_operator(token)

    def test_case_insensitive(self):
        """Word operators are recognized in any case."""
        assert is_operator("TEXT")
        assert is_operator("Range")

    @pytest.mark.parametrize("token", ["like", "!=", "", None, 5])
    def test_unknown_tokens(self, token):
        """Anything else is not an operator."""
        assert not is_operator(token)


class TestNormalize:
    """Test normalization into clauses."""

    def test_equality_shorthand(self):
        """No operator means equality on the given value."""
        clause = normalize("status", None, "active")

        assert clause.kind == ClauseKind.TERM
        assert clause.column == "status"
        assert clause.value == "active"
        assert clause.boolean == BooleanType.MUST

    def test_explicit_equality(self):
        clause = normalize("status", "=", "active", BooleanType.SHOULD)

        assert clause.kind == ClauseKind.TERM
        assert clause.value == "active"
        assert clause.boolean == BooleanType.SHOULD

    def test_equality_allows_none(self):
        """Equality is satisfied even without a value."""
        clause = normalize("deleted_at", "=", None)

        assert clause.kind == ClauseKind.TERM
        assert clause.value is None

    @pytest.mark.parametrize(
        "operator,bound",
        [(">", "gt"), (">=", "gte"), ("<", "lt"), ("<=", "lte")],
    )
    def test_comparisons_become_single_bound_ranges(self, operator, bound):
        """Comparison operators wrap the value under one bound name."""
        clause = normalize("age", operator, 21)

        assert clause.kind == ClauseKind.RANGE
        assert clause.value == {bound: 21}

    def test_text_operator(self):
        clause = normalize("bio", "text", "search engines")

        assert clause.kind == ClauseKind.TEXT
        assert clause.value == "search engines"

    def test_text_operator_uppercase(self):
        clause = normalize("bio", "TEXT", "search")

        assert clause.kind == ClauseKind.TEXT

    def test_range_operator_takes_bounds(self):
        clause = normalize("age", "range", {"gte": 18, "lt": 65})

        assert clause.kind == ClauseKind.RANGE
        assert clause.value == {"gte": 18, "lt": 65}

    def test_range_operator_requires_mapping(self):
        with pytest.raises(InvalidArgumentError):
            normalize("age", "range", [18, 65])

    def test_range_operator_rejects_unknown_bounds(self):
        with pytest.raises(InvalidArgumentError, match="Unknown range bounds"):
            normalize("age", "range", {"from": 18})

    @pytest.mark.parametrize("operator", [">", ">=", "<", "<=", "text", "range", "TEXT"])
    def test_missing_value(self, operator):
        """Value-requiring operators fail without a value."""
        with pytest.raises(InvalidArgumentError, match="Value must be provided."):
            normalize("age", operator, None)

    def test_unknown_operator_becomes_value(self):
        """An unrecognized operator token is used as the equality value."""
        clause = normalize("status", "archived", "ignored")

        assert clause.kind == ClauseKind.TERM
        assert clause.value == "archived"

    def test_non_string_operator_becomes_value(self):
        clause = normalize("age", 42, None)

        assert clause.kind == ClauseKind.TERM
        assert clause.value == 42
