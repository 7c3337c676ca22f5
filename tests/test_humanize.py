"""Tests for statement humanization."""

import ast

import pytest

from flowchart_ast.humanize import Shape, classify, humanize


class TestConditions:
    def test_negation(self, expr):
        assert humanize(expr("not ready")) == "ready is false"

    @pytest.mark.parametrize("src, expected", [
        ("a == b", "a equals b"),
        ("a != b", "a does not equal b"),
        ("a < b", "a is less than b"),
        ("a > b", "a is greater than b"),
        ("a <= b", "a is at most b"),
        ("a >= b", "a is at least b"),
    ])
    def test_comparisons(self, expr, src, expected):
        assert humanize(expr(src)) == expected

    def test_operands_are_not_humanized(self, expr):
        """Only the outer shape is described."""
        assert humanize(expr("len(items) > limit + 1")) == "len(items) is greater than limit + 1"
        assert humanize(expr("not a == b")) == "a == b is false"

    def test_chained_and_identity_comparisons_are_verbatim(self, expr):
        assert humanize(expr("0 < a < 10")) == "0 < a < 10"
        assert humanize(expr("item is None")) == "item is None"
        assert humanize(expr("key in cache")) == "key in cache"

    def test_bool_ops(self, expr):
        assert humanize(expr("a and b")) == "a AND b"
        assert humanize(expr("a or b or c")) == "a OR b OR c"


class TestStatements:
    def test_assignment(self, stmt):
        assert humanize(stmt("x = compute(y)")) == "Set x to compute(y)"
        assert humanize(stmt("self.count = 0")) == "Set self.count to 0"

    def test_annotated_assignment(self, stmt):
        assert humanize(stmt("x: int = 3")) == "Set x to 3"

    def test_multi_target_assignment_is_verbatim(self, stmt):
        assert humanize(stmt("a = b = 0")) == "a = b = 0"
        assert classify(stmt("a, b = pair")) is Shape.OTHER

    def test_increment_and_decrement(self, stmt):
        assert humanize(stmt("x += 1")) == "Increase x by 1"
        assert humanize(stmt("self.n -= 1")) == "Decrease self.n by 1"

    def test_other_augmented_assignments_are_verbatim(self, stmt):
        assert humanize(stmt("x += 2")) == "x += 2"
        assert humanize(stmt("x *= 1")) == "x *= 1"

    def test_returns(self, stmt):
        assert humanize(stmt("return")) == "Return"
        assert humanize(stmt("return x")) == "Return x"
        assert humanize(stmt("return a, b")) == "Return a, b"

    def test_call_falls_back_to_source(self, stmt):
        assert humanize(stmt("print('hi')")) == "print('hi')"


class TestBlockHeaders:
    def test_loop_header(self, stmt):
        assert humanize(stmt("for item in items:\n    pass")) == "For each item in items"

    def test_except_handlers(self, stmt):
        node = stmt("try:\n    pass\nexcept ValueError as e:\n    pass\nexcept:\n    pass")
        assert humanize(node.handlers[0]) == "ValueError raised as e"
        assert humanize(node.handlers[1]) == "Exception raised"

    def test_match_cases(self, stmt):
        node = stmt("match cmd:\n    case 'go':\n        pass\n    case x if x > 0:\n        pass")
        assert humanize(node.cases[0]) == "Case 'go'"
        assert humanize(node.cases[1]) == "Case x if x > 0"


class TestClassify:
    def test_every_node_has_a_shape(self):
        """Unrecognised nodes map to OTHER and still humanize."""
        node = ast.parse("import os").body[0]
        assert classify(node) is Shape.OTHER
        assert humanize(node) == "import os"
