"""Instance graph IR: mounted node instances and instance-level edges.

This module owns the canonical graph structure consumed by every downstream
phase (layout, rect resolution, routing). Instances are value records, one per
mount, so two mounts of the same definition never alias each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

import networkx as nx

from diagr.types import CONTAINER_RENDERER, StrokeType


@dataclass
class NodeInstance:
    instance_id: str
    def_id: str
    is_container: bool
    parent_instance_id: str | None = None
    renderer: str | None = None
    label: str | None = None
    width: float | None = None
    height: float | None = None
    data: dict[str, Any] | None = None

    @property
    def is_group_card(self) -> bool:
        return self.renderer == CONTAINER_RENDERER

    def with_size(self, width: float, height: float) -> NodeInstance:
        return replace(self, width=width, height=height)


@dataclass
class NormalizedEdge:
    id: str
    source: str
    target: str
    bidirectional: bool = False
    label: str | None = None
    color: str | None = None
    stroke_type: StrokeType | None = None


@dataclass
class NormalizedGraph:
    """Instances plus instance-level edges, with networkx topology helpers."""

    nodes: list[NodeInstance] = field(default_factory=list)
    edges: list[NormalizedEdge] = field(default_factory=list)

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def is_empty(self) -> bool:
        return not self.nodes

    def instance_by_id(self) -> dict[str, NodeInstance]:
        return {node.instance_id: node for node in self.nodes}

    def roots(self) -> list[NodeInstance]:
        return [node for node in self.nodes if node.parent_instance_id is None]

    def child_map(self) -> dict[str, list[str]]:
        """Parent instance id -> child instance ids, in mount order."""
        children: dict[str, list[str]] = {}
        for node in self.nodes:
            if node.parent_instance_id is None:
                continue
            children.setdefault(node.parent_instance_id, []).append(node.instance_id)
        return children

    def to_digraph(self) -> nx.DiGraph:
        """Build a networkx DiGraph keyed by instance id.

        Node attribute ``data`` holds the NodeInstance; edge attribute ``data``
        holds the first NormalizedEdge seen for that ordered pair.
        """
        digraph: nx.DiGraph = nx.DiGraph()
        for node in self.nodes:
            digraph.add_node(node.instance_id, data=node)
        for edge in self.edges:
            if digraph.has_edge(edge.source, edge.target):
                continue
            digraph.add_edge(edge.source, edge.target, data=edge)
        return digraph

