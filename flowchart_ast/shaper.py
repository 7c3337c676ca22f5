"""
Whole-graph decisions made before drawing: which blocks disappear (empty
pass-throughs), which split into a setup step plus a condition, and what an
empty block is called.
"""
import ast
import logging
from dataclasses import dataclass
from typing import List, Set

from .cfg import Block, FlowGraph

START_LABEL = "Start"
END_LABEL = "End / Return"
BRANCH_LABEL = "Loop / Switch Entry"
MERGE_LABEL = "Merge Point"


def is_pass_through(block: Block) -> bool:
    return not block.nodes and len(block.succs) == 1


def resolve(block: Block) -> Block:
    """Follow empty single-successor blocks to the first block worth drawing.

    A cycle made only of pass-through blocks stops at the first block seen
    twice, which keeps ``resolve`` idempotent.
    """
    visited: Set[int] = set()
    current = block
    while is_pass_through(current):
        if current.index in visited:
            break
        visited.add(current.index)
        current = current.succs[0]
    return current


def is_split(block: Block) -> bool:
    return len(block.nodes) > 1 and len(block.succs) == 2


def structural_label(block: Block) -> str:
    if block.index == 0:
        return START_LABEL
    if not block.succs:
        return END_LABEL
    if len(block.succs) == 2:
        return BRANCH_LABEL
    return MERGE_LABEL


def node_id(block: Block) -> str:
    return f"B{block.index}"


def setup_id(block: Block) -> str:
    return f"B{block.index}_setup"


def entry_point(block: Block) -> str:
    target = resolve(block)
    return setup_id(target) if is_split(target) else node_id(target)


@dataclass
class ShapedBlock:
    block: Block
    split: bool
    targets: List[Block]

    @property
    def index(self) -> int:
        return self.block.index

    @property
    def setup(self) -> List[ast.AST]:
        return self.block.nodes[:-1] if self.split else []

    @property
    def condition(self) -> List[ast.AST]:
        return self.block.nodes[-1:] if self.split else []


@dataclass
class ShapedGraph:
    entry: Block
    blocks: List[ShapedBlock]


def shape_graph(graph: FlowGraph) -> ShapedGraph:
    shaped: List[ShapedBlock] = []
    for block in sorted(graph.blocks, key=lambda b: b.index):
        if is_pass_through(block):
            logging.debug(f"Eliding pass-through block B{block.index}")
            continue
        split = is_split(block)
        if split:
            logging.debug(f"Splitting B{block.index} into setup and condition")
        shaped.append(ShapedBlock(block=block, split=split, targets=[resolve(s) for s in block.succs]))
    return ShapedGraph(entry=resolve(graph.entry), blocks=shaped)
