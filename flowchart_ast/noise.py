import ast
import logging
from typing import AbstractSet, List, Optional, Sequence

from .config import NOISE_RECEIVERS


def _head_expr(node: ast.AST) -> Optional[ast.expr]:
    # expression statements, single-target assignments and with-items; awaited calls are unwrapped
    if isinstance(node, ast.Expr):
        expr = node.value
    elif isinstance(node, ast.withitem):
        expr = node.context_expr
    elif isinstance(node, ast.Assign) and len(node.targets) == 1 and not isinstance(node.targets[0], ast.Tuple):
        expr = node.value
    else:
        return None
    if isinstance(expr, ast.Await):
        expr = expr.value
    return expr


def is_noise(node: ast.AST, receivers: AbstractSet[str] = NOISE_RECEIVERS) -> bool:
    """True when ``node`` is a call like ``logger.info(...)`` on an instrumentation receiver."""
    call = _head_expr(node)
    if not isinstance(call, ast.Call):
        return False
    func = call.func
    return isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name) and func.value.id in receivers


def filter_noise(nodes: Sequence[ast.AST], receivers: AbstractSet[str] = NOISE_RECEIVERS) -> List[ast.AST]:
    keep = [n for n in nodes if not is_noise(n, receivers)]
    if len(keep) != len(nodes):
        logging.debug(f"Dropped {len(nodes) - len(keep)} instrumentation statements")
    return keep
