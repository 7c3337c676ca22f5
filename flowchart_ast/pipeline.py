import logging
import sys
from functools import partial
from typing import AbstractSet, List, Optional

from pydantic import BaseModel

from .cfg import FlowGraph, FunctionTarget, build_cfg, find_function, load_sources, parse_source
from .config import NOISE_RECEIVERS, FlowConfig, OutputSink
from .errors import OutputWriteError
from .noise import filter_noise
from .render import render, to_markdown, to_mermaid
from .shaper import shape_graph


class NodeOut(BaseModel):
    id: str
    kind: str
    label: str
    style: Optional[str] = None


class EdgeOut(BaseModel):
    source: str
    target: str
    kind: str
    label: Optional[str] = None


class FlowReport(BaseModel):
    function: str
    qualname: str
    path: str
    lineno: int
    blocks: int
    nodes: List[NodeOut]
    edges: List[EdgeOut]
    mermaid: str
    markdown: str


def strip_noise(graph: FlowGraph, receivers: AbstractSet[str] = NOISE_RECEIVERS) -> FlowGraph:
    """First stage after building: returns a new graph without instrumentation calls.

    Shaping decisions (split, pass-through) depend on statement counts, so they
    must run on the graph this returns.
    """
    return graph.replace_nodes(partial(filter_noise, receivers=receivers))


def diagram_function(target: FunctionTarget, start: Optional[str] = None,
                     receivers: AbstractSet[str] = NOISE_RECEIVERS) -> FlowReport:
    graph = strip_noise(build_cfg(target.node), receivers)
    diagram = render(shape_graph(graph), start or target.name)
    body = to_mermaid(diagram)
    logging.info(f"Rendered {target.qualname} ({target.location}): {len(diagram.nodes)} nodes, {len(diagram.edges)} edges")
    return FlowReport(
        function=target.name,
        qualname=target.qualname,
        path=target.path,
        lineno=target.lineno,
        blocks=len(graph.blocks),
        nodes=[NodeOut(id=n.id, kind=n.kind.value, label=n.label, style=n.style) for n in diagram.nodes],
        edges=[EdgeOut(source=e.source, target=e.target, kind=e.kind.value, label=e.label) for e in diagram.edges],
        mermaid=body,
        markdown=to_markdown(body),
    )


def analyze_function(root: str, start: str = "main", receivers: AbstractSet[str] = NOISE_RECEIVERS) -> FlowReport:
    """Load every source under ``root`` and diagram the single function named ``start``."""
    target = find_function(load_sources(root), start)
    return diagram_function(target, start, receivers)


def analyze_source(code: str, start: str = "main", filename: str = "<memory>",
                   receivers: AbstractSet[str] = NOISE_RECEIVERS) -> FlowReport:
    target = find_function([parse_source(code, filename)], start)
    return diagram_function(target, start, receivers)


def write_output(document: str, out: str) -> None:
    if OutputSink.for_path(out) is OutputSink.STDOUT:
        sys.stdout.write(document)
        return
    try:
        with open(out, "w", encoding="utf-8") as f:
            f.write(document)
    except OSError as e:
        raise OutputWriteError(out, e) from e


def run(config: FlowConfig) -> FlowReport:
    report = analyze_function(config.root, config.start, config.noise_receivers)
    write_output(report.markdown, config.out)
    return report
