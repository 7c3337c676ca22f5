"""
Turn a single statement or condition into a short English phrase.

Only the outermost shape is described; operands are shown as their source
text. Anything unrecognised is shown verbatim, so ``humanize`` never fails.
"""
import ast
from enum import Enum
from typing import Callable, Dict

from .cfg import source_text


class Shape(Enum):
    NEGATION = "negation"
    COMPARISON = "comparison"
    BOOL_OP = "bool_op"
    ASSIGNMENT = "assignment"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    RETURN = "return"
    LOOP_HEADER = "loop_header"
    EXCEPT_HANDLER = "except_handler"
    MATCH_CASE = "match_case"
    OTHER = "other"


COMPARISON_PHRASES = {
    ast.Eq: "equals",
    ast.NotEq: "does not equal",
    ast.Lt: "is less than",
    ast.Gt: "is greater than",
    ast.LtE: "is at most",
    ast.GtE: "is at least",
}


def _is_one(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and type(node.value) is int and node.value == 1


def classify(node: ast.AST) -> Shape:
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not):
        return Shape.NEGATION
    if isinstance(node, ast.Compare) and len(node.ops) == 1 and type(node.ops[0]) in COMPARISON_PHRASES:
        return Shape.COMPARISON
    if isinstance(node, ast.BoolOp):
        return Shape.BOOL_OP
    if isinstance(node, ast.Assign) and len(node.targets) == 1 and not isinstance(node.targets[0], (ast.Tuple, ast.List)):
        return Shape.ASSIGNMENT
    if isinstance(node, ast.AnnAssign) and node.value is not None:
        return Shape.ASSIGNMENT
    if isinstance(node, ast.AugAssign) and _is_one(node.value):
        if isinstance(node.op, ast.Add):
            return Shape.INCREMENT
        if isinstance(node.op, ast.Sub):
            return Shape.DECREMENT
    if isinstance(node, ast.Return):
        return Shape.RETURN
    if isinstance(node, (ast.For, ast.AsyncFor)):
        return Shape.LOOP_HEADER
    if isinstance(node, ast.ExceptHandler):
        return Shape.EXCEPT_HANDLER
    if isinstance(node, ast.match_case):
        return Shape.MATCH_CASE
    return Shape.OTHER


def _negation(node: ast.UnaryOp) -> str:
    return f"{source_text(node.operand)} is false"


def _comparison(node: ast.Compare) -> str:
    phrase = COMPARISON_PHRASES[type(node.ops[0])]
    return f"{source_text(node.left)} {phrase} {source_text(node.comparators[0])}"


def _bool_op(node: ast.BoolOp) -> str:
    joiner = " AND " if isinstance(node.op, ast.And) else " OR "
    return joiner.join(source_text(v) for v in node.values)


def _assignment(node) -> str:
    target = node.targets[0] if isinstance(node, ast.Assign) else node.target
    return f"Set {source_text(target)} to {source_text(node.value)}"


def _increment(node: ast.AugAssign) -> str:
    return f"Increase {source_text(node.target)} by 1"


def _decrement(node: ast.AugAssign) -> str:
    return f"Decrease {source_text(node.target)} by 1"


def _return(node: ast.Return) -> str:
    if node.value is None:
        return "Return"
    if isinstance(node.value, ast.Tuple) and node.value.elts:
        return "Return " + ", ".join(source_text(e) for e in node.value.elts)
    return f"Return {source_text(node.value)}"


def _loop_header(node) -> str:
    return f"For each {source_text(node.target)} in {source_text(node.iter)}"


def _except_handler(node: ast.ExceptHandler) -> str:
    if node.type is None:
        return "Exception raised"
    phrase = f"{source_text(node.type)} raised"
    return f"{phrase} as {node.name}" if node.name else phrase


def _match_case(node: ast.match_case) -> str:
    phrase = f"Case {source_text(node.pattern)}"
    return f"{phrase} if {source_text(node.guard)}" if node.guard is not None else phrase


PHRASERS: Dict[Shape, Callable[..., str]] = {
    Shape.NEGATION: _negation,
    Shape.COMPARISON: _comparison,
    Shape.BOOL_OP: _bool_op,
    Shape.ASSIGNMENT: _assignment,
    Shape.INCREMENT: _increment,
    Shape.DECREMENT: _decrement,
    Shape.RETURN: _return,
    Shape.LOOP_HEADER: _loop_header,
    Shape.EXCEPT_HANDLER: _except_handler,
    Shape.MATCH_CASE: _match_case,
}


def humanize(node: ast.AST) -> str:
    phraser = PHRASERS.get(classify(node), source_text)
    return phraser(node)
