"""Render-graph stage: rects, root relayout, edge routing, descriptors."""

from __future__ import annotations

from diagr.render.assembler import build_render_graph
from diagr.render.edges import RoutingConstants, build_edge_descriptors, lane_pattern, select_sides_for_edge
from diagr.render.graph import EdgeDescriptor, NodeDescriptor, RenderGraph
from diagr.render.measure import apply_measured_node_sizes, has_material_size_changes
from diagr.render.rects import RectResolution, build_rects
from diagr.render.roots import RootResolver, relayout_roots
from diagr.render.types import LaneAssignment, Point, Rect, Spacing

__all__ = [
    "EdgeDescriptor",
    "LaneAssignment",
    "NodeDescriptor",
    "Point",
    "Rect",
    "RectResolution",
    "RenderGraph",
    "RootResolver",
    "RoutingConstants",
    "Spacing",
    "apply_measured_node_sizes",
    "build_edge_descriptors",
    "build_rects",
    "build_render_graph",
    "has_material_size_changes",
    "lane_pattern",
    "relayout_roots",
    "select_sides_for_edge",
]
