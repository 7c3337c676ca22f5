"""Shared fixtures for flowchart_ast tests."""

import ast
import textwrap

import pytest

from flowchart_ast.cfg import build_cfg


@pytest.fixture
def stmt():
    """Parse one statement as it would appear inside an async function body."""

    def _stmt(src: str) -> ast.AST:
        body = textwrap.indent(textwrap.dedent(src), "    ")
        tree = ast.parse(f"async def _wrapper():\n{body}")
        return tree.body[0].body[0]

    return _stmt


@pytest.fixture
def expr():
    def _expr(src: str) -> ast.expr:
        return ast.parse(src, mode="eval").body

    return _expr


@pytest.fixture
def cfg_of():
    """Build the CFG of the first function defined in ``src``."""

    def _cfg_of(src: str):
        tree = ast.parse(textwrap.dedent(src))
        func = next(n for n in tree.body if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef)))
        return build_cfg(func)

    return _cfg_of


@pytest.fixture
def source_tree(tmp_path):
    """Write ``{relative_path: source}`` under a temporary root and return the root."""

    def _write(files: dict) -> str:
        for rel, src in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(src), encoding="utf-8")
        return str(tmp_path)

    return _write
