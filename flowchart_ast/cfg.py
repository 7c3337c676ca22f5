"""
Control-flow graph provider.

Loads Python sources, resolves the function to diagram and splits its body
into basic blocks. Each block holds the statements (and branch conditions)
that run straight through, plus 0, 1 or 2 successors; for two successors the
first is the true/then branch and the second the false/else branch.
"""
import ast
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import AmbiguousFunctionError, FunctionNotFoundError, SourceLoadError

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]

IGNORED_DIRS = {
    ".git", ".hg", ".svn", "__pycache__", ".mypy_cache", ".pytest_cache", ".tox",
    "venv", ".venv", "env", "site-packages", "node_modules", "build", "dist",
}


def source_text(node: Optional[ast.AST]) -> str:
    if node is None:
        return ""
    try:
        return ast.unparse(node)
    except Exception:
        return node.__class__.__name__


# ------------------------------------------------------------
# Graph types
# ------------------------------------------------------------

@dataclass(eq=False)
class Block:
    index: int = -1
    nodes: List[ast.AST] = field(default_factory=list)
    succs: List["Block"] = field(default_factory=list, repr=False)


@dataclass
class FlowGraph:
    blocks: List[Block]

    @property
    def entry(self) -> Block:
        return self.blocks[0]

    def replace_nodes(self, fn: Callable[[Sequence[ast.AST]], List[ast.AST]]) -> "FlowGraph":
        """Copy the graph, giving each block ``fn(block.nodes)`` as its statements.

        Indices and successor structure are preserved; the original graph is
        left untouched.
        """
        copies = {b.index: Block(index=b.index, nodes=list(fn(b.nodes))) for b in self.blocks}
        for block in self.blocks:
            copies[block.index].succs = [copies[s.index] for s in block.succs]
        return FlowGraph(blocks=[copies[b.index] for b in self.blocks])


@dataclass
class SourceFile:
    path: str
    tree: ast.Module


@dataclass
class FunctionTarget:
    name: str
    qualname: str
    path: str
    lineno: int
    node: FunctionNode = field(repr=False)

    @property
    def location(self) -> str:
        return f"{self.path}:{self.lineno}"


# ------------------------------------------------------------
# Block builder
# ------------------------------------------------------------

class CFGBuilder(ast.NodeVisitor):
    """Split a function body into basic blocks.

    Blocks get their index when control first enters them, so indices follow
    source order; a successor that points to a lower (or equal) index than its
    source is a back edge. Blocks unreachable from the entry are dropped.
    """

    def __init__(self) -> None:
        self.blocks: List[Block] = []
        self.current: Optional[Block] = None
        self._next_index = 0
        self._loops: List[Tuple[Block, Block]] = []  # (header, after)
        self._last_exit: Optional[Block] = None

    def build(self, func: FunctionNode) -> FlowGraph:
        entry = self.new_block()
        self.enter(entry)
        body = func.body
        if ast.get_docstring(func, clean=False) is not None:
            body = body[1:]
        self.stmts(body)
        return self._finish(entry)

    # Block helpers
    def new_block(self) -> Block:
        block = Block()
        self.blocks.append(block)
        return block

    def enter(self, block: Block) -> None:
        if block.index < 0:
            block.index = self._next_index
            self._next_index += 1
        self.current = block

    def add(self, node: ast.AST) -> None:
        if self.current is None:
            # dead code after return/raise/break
            self.enter(self.new_block())
        self.current.nodes.append(node)

    def jump(self, target: Block) -> None:
        if self.current is not None:
            self.current.succs.append(target)
        self.current = None

    def branch(self, then: Block, orelse: Block) -> None:
        if self.current is not None:
            self.current.succs.extend([then, orelse])
        self.current = None

    def stmts(self, body: Sequence[ast.stmt]) -> None:
        for stmt in body:
            self.visit(stmt)

    def generic_visit(self, node: ast.AST) -> None:
        self.add(node)

    # Simple statements
    def visit_Pass(self, node: ast.Pass) -> None:
        pass

    def visit_Return(self, node: ast.Return) -> None:
        self.add(node)
        self._last_exit = self.current
        self.current = None

    visit_Raise = visit_Return

    def visit_Break(self, node: ast.Break) -> None:
        if self._loops:
            self._last_exit = None
            self.jump(self._loops[-1][1])
        else:
            self.add(node)

    def visit_Continue(self, node: ast.Continue) -> None:
        if self._loops:
            self._last_exit = None
            self.jump(self._loops[-1][0])
        else:
            self.add(node)

    # Branching
    def visit_If(self, node: ast.If) -> None:
        self.add(node.test)
        then = self.new_block()
        orelse = self.new_block() if node.orelse else None
        done = self.new_block()
        self.branch(then, orelse or done)

        self.enter(then)
        self.stmts(node.body)
        self.jump(done)
        if orelse is not None:
            self.enter(orelse)
            self.stmts(node.orelse)
            self.jump(done)
        self.enter(done)

    def visit_While(self, node: ast.While) -> None:
        header = self.new_block()
        self.jump(header)
        self.enter(header)
        self.add(node.test)
        self._loop(header, node)

    def visit_For(self, node: Union[ast.For, ast.AsyncFor]) -> None:
        header = self.new_block()
        self.jump(header)
        self.enter(header)
        self.add(node)
        self._loop(header, node)

    visit_AsyncFor = visit_For

    def _loop(self, header: Block, node: Union[ast.While, ast.For, ast.AsyncFor]) -> None:
        body = self.new_block()
        orelse = self.new_block() if node.orelse else None
        after = self.new_block()
        self.branch(body, orelse or after)

        self._loops.append((header, after))
        self.enter(body)
        self.stmts(node.body)
        self.jump(header)
        self._loops.pop()

        if orelse is not None:
            self.enter(orelse)
            self.stmts(node.orelse)
            self.jump(after)
        self.enter(after)

    def visit_With(self, node: Union[ast.With, ast.AsyncWith]) -> None:
        for item in node.items:
            self.add(item)
        self.stmts(node.body)

    visit_AsyncWith = visit_With

    def visit_Try(self, node: ast.Try) -> None:
        self._last_exit = None
        self.stmts(node.body)
        completed = self.current is not None
        if not completed and node.handlers and self._last_exit is not None and not self._last_exit.succs:
            # the body always leaves the function; hang the handlers off its exit
            self.current = self._last_exit

        finally_block = self.new_block() if node.finalbody else None
        after = self.new_block()
        exit_to = finally_block or after

        for handler in node.handlers:
            self.add(handler)
            handled = self.new_block()
            unhandled = self.new_block()
            self.branch(handled, unhandled)
            self.enter(handled)
            self.stmts(handler.body)
            self.jump(exit_to)
            self.enter(unhandled)

        if completed:
            self.stmts(node.orelse)
            self.jump(exit_to)
        elif self.current is not None:
            # no handler matched after an early exit: control leaves the function
            self.jump(self.new_block())

        if finally_block is not None:
            self.enter(finally_block)
            self.stmts(node.finalbody)
            self.jump(after)
        self.enter(after)

    visit_TryStar = visit_Try

    def visit_Match(self, node: ast.Match) -> None:
        after = self.new_block()
        for case in node.cases:
            self.add(case)
            matched = self.new_block()
            unmatched = self.new_block()
            self.branch(matched, unmatched)
            self.enter(matched)
            self.stmts(case.body)
            self.jump(after)
            self.enter(unmatched)
        self.jump(after)
        self.enter(after)

    # Finalisation
    def _finish(self, entry: Block) -> FlowGraph:
        for block in self.blocks:
            if block.index < 0:
                block.index = self._next_index
                self._next_index += 1

        reachable = {id(entry): entry}
        stack = [entry]
        while stack:
            for succ in stack.pop().succs:
                if id(succ) not in reachable:
                    reachable[id(succ)] = succ
                    stack.append(succ)

        live = sorted(reachable.values(), key=lambda b: b.index)
        for index, block in enumerate(live):
            block.index = index
        logging.debug(f"Built {len(live)} blocks ({len(self.blocks) - len(live)} unreachable dropped)")
        return FlowGraph(blocks=live)


def build_cfg(func: FunctionNode) -> FlowGraph:
    return CFGBuilder().build(func)


# ------------------------------------------------------------
# Source loading & function lookup
# ------------------------------------------------------------

def iter_python_files(root: str) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS and not d.endswith(".egg-info"))
        for filename in sorted(filenames):
            if filename.endswith(".py"):
                yield os.path.join(dirpath, filename)


def parse_source(code: Union[str, bytes], filename: str = "<memory>") -> SourceFile:
    """Parse ``code`` and run the compiler checks that ``ast.parse`` alone skips.

    Bytes are decoded the way the interpreter does it, honouring a BOM or a
    coding declaration.
    """
    try:
        tree = ast.parse(code, filename=filename)
        compile(tree, filename, "exec")
    except SyntaxError as e:
        raise SourceLoadError(f"SyntaxError: {e.msg} (line {e.lineno})", filename) from e
    except ValueError as e:
        # null bytes on older interpreters
        raise SourceLoadError(f"invalid source: {e}", filename) from e
    return SourceFile(path=filename, tree=tree)


def load_sources(root: str) -> List[SourceFile]:
    """Parse every Python file under ``root`` (or ``root`` itself if it is a file)."""
    if os.path.isfile(root):
        paths = [root]
    elif os.path.isdir(root):
        paths = list(iter_python_files(root))
    else:
        raise SourceLoadError("no such file or directory", root)

    sources: List[SourceFile] = []
    for path in paths:
        try:
            with open(path, "rb") as f:
                code = f.read()
        except OSError as e:
            raise SourceLoadError(f"cannot read source: {e}", path) from e
        sources.append(parse_source(code, filename=path))

    if not sources:
        raise SourceLoadError("no Python source files found", root)
    logging.debug(f"Loaded {len(sources)} source files from {root}")
    return sources


class FunctionCollector(ast.NodeVisitor):
    def __init__(self, path: str):
        self.path = path
        self.found: List[FunctionTarget] = []
        self._stack: List[str] = []

    def visit_ClassDef(self, node: ast.ClassDef):
        self._stack.append(node.name)
        self.generic_visit(node)
        self._stack.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef):
        qualname = ".".join(self._stack + [node.name])
        self.found.append(FunctionTarget(node.name, qualname, self.path, node.lineno, node))
        self._stack.append(node.name)
        self.generic_visit(node)
        self._stack.pop()

    visit_AsyncFunctionDef = visit_FunctionDef


def find_function(sources: Sequence[SourceFile], name: str) -> FunctionTarget:
    """Return the single function whose name (or dotted qualified name suffix) is ``name``."""
    matches: List[FunctionTarget] = []
    for source in sources:
        collector = FunctionCollector(source.path)
        collector.visit(source.tree)
        matches.extend(t for t in collector.found if t.qualname == name or t.qualname.endswith("." + name))

    if not matches:
        raise FunctionNotFoundError(name)
    if len(matches) > 1:
        raise AmbiguousFunctionError(name, [t.location for t in matches])
    return matches[0]
