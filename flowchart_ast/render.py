"""
Diagram rendering: shaped blocks -> typed nodes/edges -> Mermaid text.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .labels import format_label
from .shaper import ShapedBlock, ShapedGraph, entry_point, node_id, setup_id, structural_label
from .templates import render_template

ROOT_ID = "ROOT"
ROOT_STYLE = "root"
END_STYLE = "endNode"

PROLOGUE = (
    "    classDef root fill:#007acc,stroke:#fff,stroke-width:2px,color:#fff;\n"
    "    classDef endNode fill:#cc3300,stroke:#fff,stroke-width:2px,color:#fff;\n\n"
)


class NodeKind(str, Enum):
    ACTION = "action"
    DECISION = "decision"
    TERMINAL = "terminal"
    ROOT = "root"


class EdgeKind(str, Enum):
    FORWARD = "forward"
    LOOP = "loop"


@dataclass(frozen=True)
class RenderedNode:
    id: str
    kind: NodeKind
    label: str
    style: Optional[str] = None


@dataclass(frozen=True)
class RenderedEdge:
    source: str
    target: str
    kind: EdgeKind = EdgeKind.FORWARD
    label: Optional[str] = None


Element = Union[RenderedNode, RenderedEdge]


@dataclass
class Diagram:
    elements: List[Element] = field(default_factory=list)

    @property
    def nodes(self) -> List[RenderedNode]:
        return [e for e in self.elements if isinstance(e, RenderedNode)]

    @property
    def edges(self) -> List[RenderedEdge]:
        return [e for e in self.elements if isinstance(e, RenderedEdge)]

    def node(self, node_id: str) -> Optional[RenderedNode]:
        return next((n for n in self.nodes if n.id == node_id), None)


def classify_edge(source_index: int, target_index: int) -> EdgeKind:
    return EdgeKind.LOOP if target_index <= source_index else EdgeKind.FORWARD


def _block_nodes(shaped: ShapedBlock) -> List[Element]:
    block = shaped.block
    if shaped.split:
        return [
            RenderedNode(setup_id(block), NodeKind.ACTION, format_label(shaped.setup)),
            RenderedNode(node_id(block), NodeKind.DECISION, format_label(shaped.condition)),
            RenderedEdge(setup_id(block), node_id(block)),
        ]

    label = format_label(block.nodes) or structural_label(block)
    if len(block.succs) == 2:
        return [RenderedNode(node_id(block), NodeKind.DECISION, label)]
    if not block.succs:
        return [RenderedNode(node_id(block), NodeKind.TERMINAL, label, END_STYLE)]
    return [RenderedNode(node_id(block), NodeKind.ACTION, label)]


def _block_edges(shaped: ShapedBlock) -> List[Element]:
    source = node_id(shaped.block)
    branch_labels = ["True", "False"] if len(shaped.targets) == 2 else [None]
    return [
        RenderedEdge(source, entry_point(target), classify_edge(shaped.index, target.index), label)
        for target, label in zip(shaped.targets, branch_labels)
    ]


def render(graph: ShapedGraph, function_name: str) -> Diagram:
    diagram = Diagram()
    diagram.elements.append(RenderedNode(ROOT_ID, NodeKind.ROOT, f"def {function_name}", ROOT_STYLE))
    diagram.elements.append(RenderedEdge(ROOT_ID, entry_point(graph.entry)))
    for shaped in graph.blocks:
        diagram.elements.extend(_block_nodes(shaped))
        diagram.elements.extend(_block_edges(shaped))
    return diagram


# ------------------------------------------------------------
# Mermaid serialisation
# ------------------------------------------------------------

SHAPES = {
    NodeKind.ACTION: ('["', '"]'),
    NodeKind.DECISION: ('{"', '"}'),
    NodeKind.TERMINAL: ('["', '"]'),
    NodeKind.ROOT: ('(["', '"])'),
}


def _node_line(node: RenderedNode) -> str:
    start, end = SHAPES[node.kind]
    style = f":::{node.style}" if node.style else ""
    line = f"    {node.id}{start}{node.label}{end}{style}"
    return line if node.kind is NodeKind.ROOT else line + ";"


def _edge_line(edge: RenderedEdge) -> str:
    if edge.kind is EdgeKind.LOOP:
        arrow = f"-.->|Loop {edge.label}|" if edge.label else "-.->|Loop|"
    else:
        arrow = f"-->|{edge.label}|" if edge.label else "-->"
    return f"    {edge.source} {arrow} {edge.target};"


def to_mermaid(diagram: Diagram) -> str:
    lines = [_node_line(e) if isinstance(e, RenderedNode) else _edge_line(e) for e in diagram.elements]
    return PROLOGUE + "".join(line + "\n" for line in lines)


def to_markdown(body: str) -> str:
    return render_template("flow.md", body=body)
