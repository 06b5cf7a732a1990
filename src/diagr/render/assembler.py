"""Render-graph assembly: layout, rects, root relayout, descriptors, routing."""

from __future__ import annotations

import logging

from diagr.config import resolve_theme
from diagr.ir.document import Document
from diagr.ir.graph import NormalizedGraph
from diagr.layout.engine import run_auto_layout
from diagr.render.edges import DEFAULT_ROUTING, RoutingConstants, build_edge_descriptors
from diagr.render.graph import RenderGraph
from diagr.render.measure import SizeMap, apply_measured_node_sizes
from diagr.render.nodes import build_caption_descriptors, build_node_descriptors, build_title_descriptor
from diagr.render.rects import build_rects
from diagr.render.roots import RootResolver, relayout_roots
from diagr.render.types import Spacing

logger = logging.getLogger(__name__)


def build_render_graph(
    graph: NormalizedGraph,
    doc: Document,
    measured_sizes: SizeMap | None = None,
    routing: RoutingConstants = DEFAULT_ROUTING,
) -> RenderGraph:
    """Compose every render stage over a normalized graph.

    Node descriptors come out as: the diagram title (if any), instances
    ordered parents first, then container captions.
    """
    measured_graph = apply_measured_node_sizes(graph, measured_sizes)
    theme = resolve_theme(doc.theme)
    spacing = Spacing(
        padding_x=theme.group_padding_x,
        padding_top=theme.group_padding_top,
        padding_bottom=theme.group_padding_bottom,
    )

    positioned = run_auto_layout(measured_graph, doc)
    instance_by_id = measured_graph.instance_by_id()
    resolution = build_rects(positioned, instance_by_id, spacing)
    rects = dict(resolution.rects)
    root_of = RootResolver(instance_by_id)

    relayout_roots(graph, measured_graph, doc, rects, root_of)

    nodes = build_node_descriptors(
        measured_graph.nodes, doc, rects, resolution.local_positions, instance_by_id
    )
    captions = build_caption_descriptors(measured_graph.nodes, rects)
    title = build_title_descriptor(doc, measured_graph.nodes, rects)
    edges = build_edge_descriptors(
        graph, measured_graph.nodes, doc.direction, theme, rects, root_of, routing
    )

    render_graph = RenderGraph(nodes=([title] if title is not None else []) + nodes + captions, edges=edges)
    logger.debug("render graph: %d node(s), %d edge(s)", len(render_graph.nodes), len(render_graph.edges))
    return render_graph
