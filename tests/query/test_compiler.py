"""Tests for boolean compilation of clause lists."""

import pytest

from simplees.exceptions import UnsupportedOperatorError
from simplees.query.clauses import BooleanType, Clause
from simplees.query.compiler import compile_clause, compile_clauses
from simplees.query.nodes import BoolNode, MatchNode, RangeNode, TermNode

MUST = BooleanType.MUST
SHOULD = BooleanType.SHOULD
MUST_NOT = BooleanType.MUST_NOT


class TestCompileClause:
    """Test compilation of individual clauses."""

    def test_term(self):
        assert compile_clause(Clause.term("status", "active")) == TermNode(
            "status", "active"
        )

    def test_text(self):
        assert compile_clause(Clause.text("bio", "search")) == MatchNode("bio", "search")

    def test_range(self):
        assert compile_clause(Clause.range("age", {"gt": 3})) == RangeNode(
            "age", {"gt": 3}
        )

    def test_raw_is_returned_unchanged(self):
        fragment = {"exists": {"field": "email"}}

        assert compile_clause(Clause.raw_fragment(fragment, MUST)) is fragment

    def test_nested_compiles_children(self):
        nested = Clause.nested_group(
            [Clause.term("a", 1), Clause.term("b", 2, SHOULD)], MUST
        )

        assert compile_clause(nested) == BoolNode(
            should=[TermNode("a", 1), TermNode("b", 2)]
        )

    def test_unknown_kind(self):
        """A clause with an unknown kind is a contract violation."""
        bogus = Clause(kind="regexp", column="name", value="a.*")

        with pytest.raises(UnsupportedOperatorError) as exc_info:
            compile_clause(bogus)

        assert exc_info.value.kind == "regexp"
        assert "unsupported" in str(exc_info.value)


class TestCompileClauses:
    """Test combination of clause lists."""

    def test_empty(self):
        assert compile_clauses([]) is None

    def test_single_clause_is_not_wrapped(self):
        assert compile_clauses([Clause.term("a", 1)]) == TermNode("a", 1)

    def test_single_should_clause_is_not_wrapped(self):
        assert compile_clauses([Clause.term("a", 1, SHOULD)]) == TermNode("a", 1)

    def test_leading_must_inherits_second_tag(self):
        """[(A, must), (B, should)] puts both under should."""
        query = compile_clauses([Clause.term("a", 1), Clause.term("b", 2, SHOULD)])

        assert query == BoolNode(should=[TermNode("a", 1), TermNode("b", 2)])
        assert query.must == []

    def test_leading_should_is_unchanged(self):
        """[(A, should), (B, must)] keeps both tags."""
        query = compile_clauses([Clause.term("a", 1, SHOULD), Clause.term("b", 2)])

        assert query == BoolNode(must=[TermNode("b", 2)], should=[TermNode("a", 1)])

    def test_leading_must_inherits_must_not(self):
        query = compile_clauses([Clause.term("a", 1), Clause.term("b", 2, MUST_NOT)])

        assert query == BoolNode(must_not=[TermNode("a", 1), TermNode("b", 2)])

    def test_only_first_clause_inherits(self):
        """Where, where, or-where: the first clause takes the second's tag."""
        query = compile_clauses(
            [Clause.term("a", 1), Clause.term("b", 2), Clause.term("c", 3, SHOULD)]
        )

        assert query == BoolNode(
            must=[TermNode("a", 1), TermNode("b", 2)], should=[TermNode("c", 3)]
        )

    def test_order_is_preserved_within_groups(self):
        clauses = [
            Clause.term("a", 1, SHOULD),
            Clause.term("b", 2),
            Clause.term("c", 3, SHOULD),
            Clause.term("d", 4),
        ]

        query = compile_clauses(clauses)

        assert query.should == [TermNode("a", 1), TermNode("c", 3)]
        assert query.must == [TermNode("b", 2), TermNode("d", 4)]

    def test_clauses_are_not_modified(self):
        clauses = [Clause.term("a", 1), Clause.term("b", 2, SHOULD)]

        compile_clauses(clauses)

        assert clauses[0].boolean == MUST

    def test_compilation_is_repeatable(self):
        clauses = (
            Clause.term("a", 1),
            Clause.nested_group(
                [Clause.range("x", {"gt": 1}), Clause.text("y", "z", SHOULD)], SHOULD
            ),
        )

        assert compile_clauses(clauses).to_dict() == compile_clauses(clauses).to_dict()

    def test_nested_wire_form(self):
        clauses = [
            Clause.term("status", "active"),
            Clause.nested_group(
                [Clause.range("age", {"lt": 18}), Clause.range("age", {"gt": 40}, SHOULD)],
                MUST,
            ),
        ]

        assert compile_clauses(clauses).to_dict() == {
            "bool": {
                "must": [
                    {"term": {"status": "active"}},
                    {
                        "bool": {
                            "should": [
                                {"range": {"age": {"lt": 18}}},
                                {"range": {"age": {"gt": 40}}},
                            ]
                        }
                    },
                ]
            }
        }

    def test_raw_fragment_inside_bool(self):
        fragment = {"exists": {"field": "email"}}
        query = compile_clauses(
            [Clause.raw_fragment(fragment, MUST), Clause.term("a", 1)]
        )

        assert query.to_dict() == {
            "bool": {"must": [fragment, {"term": {"a": 1}}]}
        }
