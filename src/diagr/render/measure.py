"""Measured node sizes reported back by a presentation layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from diagr.ir.graph import NormalizedGraph
from diagr.render.types import round_half_up

SIZE_TOLERANCE_PX: float = 1

# instance id -> (width, height)
SizeMap = Mapping[str, tuple[float, float]]


def apply_measured_node_sizes(graph: NormalizedGraph, measured_sizes: SizeMap | None) -> NormalizedGraph:
    """Copy of ``graph`` with measured sizes applied to leaf instances.

    Containers are always sized by their content, so measurements for them
    are ignored.
    """
    if not measured_sizes:
        return graph

    nodes = []
    for node in graph.nodes:
        measured = measured_sizes.get(node.instance_id)
        if measured is None or node.is_container or node.is_group_card:
            nodes.append(node)
            continue
        width, height = measured
        nodes.append(node.with_size(max(1, round_half_up(width)), max(1, round_half_up(height))))
    return replace(graph, nodes=nodes)


def has_material_size_changes(prev: SizeMap, next: SizeMap, tolerance: float = SIZE_TOLERANCE_PX) -> bool:
    """Whether ``next`` differs from ``prev`` enough to warrant recompiling."""
    if len(prev) != len(next):
        return True
    for key, (next_width, next_height) in next.items():
        if key not in prev:
            return True
        prev_width, prev_height = prev[key]
        if abs(prev_width - next_width) > tolerance or abs(prev_height - next_height) > tolerance:
            return True
    return False
