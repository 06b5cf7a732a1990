"""Render graph: the node and edge descriptors handed to a presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from diagr.render.types import Point, Rect
from diagr.types import Lane, Side, StrokeType

NODE_TYPE = "diagrNode"
GROUP_CARD_TYPE = "groupCard"
CAPTION_TYPE = "groupCaption"
TITLE_TYPE = "diagramTitle"

TITLE_NODE_ID = "__diagram_title__"
CAPTION_SUFFIX = "__caption"


@dataclass
class NodeDescriptor:
    """One drawable node.

    ``position`` is relative to the parent when ``parent_id`` is set and
    absolute otherwise; ``rect`` is always absolute.
    """

    id: str
    type: str
    position: Point
    rect: Rect
    parent_id: str | None = None
    renderer: str | None = None
    label: str = ""
    subtitle: str | None = None
    in_group_card: bool = False
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "parentId": self.parent_id,
            "position": {"x": self.position.x, "y": self.position.y},
            "rect": {
                "x": self.rect.x,
                "y": self.rect.y,
                "width": self.rect.width,
                "height": self.rect.height,
            },
            "renderer": self.renderer,
            "label": self.label,
            "subtitle": self.subtitle,
            "inGroupCard": self.in_group_card,
            "payload": self.payload,
        }


@dataclass
class EdgeDescriptor:
    """One drawable root-to-root edge with its anchor and lane hints."""

    id: str
    source: str
    target: str
    source_handle: str
    target_handle: str
    source_side: Side
    target_side: Side
    lane: Lane
    lane_index: int
    path_offset: float
    border_radius: float
    label_y: float
    stroke_color: str
    stroke_linecap: str
    label: str | None = None
    stroke_type: StrokeType | None = None
    stroke_dasharray: str | None = None
    marker_start: bool = False
    marker_end: bool = True
    source_bottom_clearance: float | None = None
    target_bottom_clearance: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "sourceHandle": self.source_handle,
            "targetHandle": self.target_handle,
            "sourceSide": self.source_side.value,
            "targetSide": self.target_side.value,
            "lane": self.lane.value,
            "laneIndex": self.lane_index,
            "pathOptions": {"offset": self.path_offset, "borderRadius": self.border_radius},
            "label": self.label,
            "labelY": self.label_y,
            "style": {
                "stroke": self.stroke_color,
                "strokeType": self.stroke_type.value if self.stroke_type is not None else None,
                "strokeDasharray": self.stroke_dasharray,
                "strokeLinecap": self.stroke_linecap,
            },
            "markerStart": self.marker_start,
            "markerEnd": self.marker_end,
            "sourceBottomClearance": self.source_bottom_clearance,
            "targetBottomClearance": self.target_bottom_clearance,
        }


@dataclass
class RenderGraph:
    nodes: list[NodeDescriptor] = field(default_factory=list)
    edges: list[EdgeDescriptor] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def node(self, node_id: str) -> NodeDescriptor | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edge(self, edge_id: str) -> EdgeDescriptor | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
