"""Auto-layout: instance graph to positioned nodes."""

from __future__ import annotations

import logging
import math

import networkx as nx

from diagr.ir.document import Document
from diagr.ir.graph import NormalizedGraph
from diagr.layout.sizing import node_size
from diagr.layout.sugiyama import SugiyamaLayout
from diagr.layout.types import PositionedNode

logger = logging.getLogger(__name__)

LABEL_FILL_RATIO: float = 0.90
LABEL_CHAR_WIDTH: float = 7
LABEL_PADDING: float = 24
LABEL_MIN_WIDTH: float = 48


def estimate_label_width(label: str) -> float:
    return max(LABEL_MIN_WIDTH, len(label) * LABEL_CHAR_WIDTH + LABEL_PADDING)


def min_len_for_label(label: str | None, ranksep: float) -> int:
    """Whole ranks an edge must span so its label fits along it."""
    if not label:
        return 1
    desired_span = estimate_label_width(label) / LABEL_FILL_RATIO
    return max(1, math.ceil(desired_span / max(1.0, ranksep)))


def separations(doc: Document) -> tuple[float, float]:
    """(ranksep, nodesep) for the document's direction."""
    layout = doc.layout
    if layout.direction.is_horizontal:
        return layout.x_gap, layout.y_gap
    return layout.y_gap, layout.x_gap


def build_layout_graph(graph: NormalizedGraph, ranksep: float) -> nx.DiGraph:
    g: nx.DiGraph = nx.DiGraph()
    for node in graph.nodes:
        width, height = node_size(node)
        g.add_node(node.instance_id, width=width, height=height)
    for edge in graph.edges:
        if edge.source not in g or edge.target not in g or g.has_edge(edge.source, edge.target):
            continue
        g.add_edge(
            edge.source,
            edge.target,
            minlen=min_len_for_label(edge.label, ranksep),
            weight=2 if edge.label else 1,
        )
    return g


def run_auto_layout(graph: NormalizedGraph, doc: Document) -> list[PositionedNode]:
    """Lay out every instance; manual overrides replace position, not size."""
    ranksep, nodesep = separations(doc)
    layout_graph = build_layout_graph(graph, ranksep)
    boxes = SugiyamaLayout(doc.direction, ranksep, nodesep).layout(layout_graph)

    positioned: list[PositionedNode] = []
    for node in graph.nodes:
        width, height = node_size(node)
        override = doc.layout.override_for(node.instance_id, node.def_id)
        if override is not None:
            x, y = override.x, override.y
        else:
            box = boxes[node.instance_id]
            x, y, width, height = box.left, box.top, box.width, box.height
        positioned.append(
            PositionedNode(
                id=node.instance_id,
                def_id=node.def_id,
                x=x,
                y=y,
                width=width,
                height=height,
                is_container=node.is_container,
                parent_instance_id=node.parent_instance_id,
                explicit_width=node.width,
                explicit_height=node.height,
                data=node.data,
            )
        )

    logger.debug("auto layout placed %d node(s) (%s)", len(positioned), doc.direction.value)
    return positioned
