"""Root relayout: a second layout pass over top-level instances only.

The first layout pass sizes containers with placeholders; once rects are
resolved the true container sizes are known, so roots are laid out again and
each root's subtree is translated rigidly to the new position.
"""

from __future__ import annotations

import logging

from diagr.ir.document import Document
from diagr.ir.graph import NodeInstance, NormalizedEdge, NormalizedGraph
from diagr.layout.engine import run_auto_layout
from diagr.render.types import Rect, round_half_up

logger = logging.getLogger(__name__)


def make_child_map(nodes: list[NodeInstance]) -> dict[str, list[str]]:
    child_map: dict[str, list[str]] = {}
    for node in nodes:
        if node.parent_instance_id is None:
            continue
        child_map.setdefault(node.parent_instance_id, []).append(node.instance_id)
    return child_map


def shift_subtree(
    rects: dict[str, Rect],
    child_map: dict[str, list[str]],
    node_id: str,
    dx: float,
    dy: float,
) -> None:
    """Translate ``node_id`` and every descendant by (dx, dy), in place."""
    current = rects.get(node_id)
    if current is not None:
        rects[node_id] = current.translated(dx, dy)
    for child_id in child_map.get(node_id, []):
        shift_subtree(rects, child_map, child_id, dx, dy)


class RootResolver:
    """Maps any instance id to the id of its top-level ancestor (memoized).

    Unknown ids resolve to themselves.
    """

    def __init__(self, instance_by_id: dict[str, NodeInstance]) -> None:
        self.instance_by_id = instance_by_id
        self._cache: dict[str, str] = {}

    def __call__(self, instance_id: str) -> str:
        cached = self._cache.get(instance_id)
        if cached is not None:
            return cached

        current = self.instance_by_id.get(instance_id)
        if current is None:
            self._cache[instance_id] = instance_id
            return instance_id

        while current.parent_instance_id is not None:
            parent = self.instance_by_id.get(current.parent_instance_id)
            if parent is None:
                break
            current = parent

        self._cache[instance_id] = current.instance_id
        return current.instance_id


def build_root_graph(
    graph: NormalizedGraph,
    measured_graph: NormalizedGraph,
    rects: dict[str, Rect],
    root_of: RootResolver,
) -> NormalizedGraph:
    """Roots sized by their resolved rects, joined by deduplicated cross-root edges."""
    root_nodes: list[NodeInstance] = []
    for node in measured_graph.roots():
        rect = rects.get(node.instance_id)
        if rect is None:
            root_nodes.append(node)
            continue
        root_nodes.append(node.with_size(max(1, round_half_up(rect.width)), max(1, round_half_up(rect.height))))

    seen: set[tuple[str, str]] = set()
    root_edges: list[NormalizedEdge] = []
    for index, edge in enumerate(graph.edges):
        source_root = root_of(edge.source)
        target_root = root_of(edge.target)
        if source_root == target_root or (source_root, target_root) in seen:
            continue
        seen.add((source_root, target_root))
        root_edges.append(
            NormalizedEdge(
                id=f"root__{index}__{source_root}__{target_root}",
                source=source_root,
                target=target_root,
                label=edge.label,
            )
        )

    return NormalizedGraph(nodes=root_nodes, edges=root_edges)


def relayout_roots(
    graph: NormalizedGraph,
    measured_graph: NormalizedGraph,
    doc: Document,
    rects: dict[str, Rect],
    root_of: RootResolver,
) -> dict[str, Rect]:
    """Re-run auto layout over roots and shift each moved subtree in ``rects``."""
    root_graph = build_root_graph(graph, measured_graph, rects, root_of)
    positioned_roots = run_auto_layout(root_graph, doc)
    child_map = make_child_map(measured_graph.nodes)

    moved = 0
    for root in positioned_roots:
        current = rects.get(root.id)
        if current is None:
            continue
        dx = root.x - current.x
        dy = root.y - current.y
        if dx != 0 or dy != 0:
            shift_subtree(rects, child_map, root.id, dx, dy)
            moved += 1

    logger.debug("root relayout moved %d of %d root(s)", moved, len(positioned_roots))
    return rects
