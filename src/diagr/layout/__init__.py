"""Layout engine public API."""

from __future__ import annotations

from diagr.layout.engine import min_len_for_label, run_auto_layout, separations
from diagr.layout.sizing import default_size_for_node, node_size
from diagr.layout.sugiyama import (
    AugmentedGraph,
    LayerAssignment,
    SugiyamaLayout,
    assign_coordinates,
    count_crossings,
    greedy_fas_ordering,
    insert_dummy_nodes,
    minimise_crossings,
    remove_cycles,
)
from diagr.layout.types import DUMMY_PREFIX, LayoutBox, PositionedNode

__all__ = [
    "DUMMY_PREFIX",
    "AugmentedGraph",
    "LayerAssignment",
    "LayoutBox",
    "PositionedNode",
    "SugiyamaLayout",
    "assign_coordinates",
    "count_crossings",
    "default_size_for_node",
    "greedy_fas_ordering",
    "insert_dummy_nodes",
    "min_len_for_label",
    "minimise_crossings",
    "node_size",
    "remove_cycles",
    "run_auto_layout",
    "separations",
]
