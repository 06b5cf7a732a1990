"""Edge router: root-to-root edges with anchor sides, lanes, and offsets.

Only edges that cross between two different roots are drawn; an edge inside
one container is subsumed by containment. Routing runs in two passes:

1. Every directed root pair becomes its own edge and gets sides and lanes.
   A bidirectional pair is "crowded" when some edge outside the pair shares
   one of its (root, side) anchors.
2. Crowded pairs collapse into a single double-headed edge; sides and lanes
   are then assigned again over the final edge set.

Every grouping iterates in insertion order or a total sort order, so equal
input always routes identically.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable

from diagr.config import ThemeTokens
from diagr.ir.graph import NodeInstance, NormalizedGraph
from diagr.render.graph import EdgeDescriptor
from diagr.render.types import (
    CAPTION_EDGE_CLEARANCE_PAD,
    CAPTION_GAP,
    CAPTION_HEIGHT,
    FALLBACK_RECT_SIZE,
    LaneAssignment,
    Point,
    Rect,
    RenderedEdgeDef,
    SideSelection,
)
from diagr.types import CENTER_LANE, LANES, SIDE_ORDER, Direction, Lane, Side, StrokeType

logger = logging.getLogger(__name__)

AnchorKey = tuple[str, Side]


@dataclass(frozen=True)
class RoutingConstants:
    """Visual tuning for side scoring and lane offsets."""

    facing_penalty: float = 36
    direction_penalty: float = 90
    lane_magnitude_base: float = 7
    lane_magnitude_step: float = 5
    lane_magnitude_index_step: float = 2
    lane_magnitude_index_cap: int = 4
    horizontal_offset_base: float = 24
    horizontal_offset_step: float = 14
    vertical_offset_base: float = 14
    vertical_offset_step: float = 8
    offset_index_cap: int = 5
    label_base_offset: float = 12
    label_positive_lane_shift: float = 4
    border_radius: float = 8
    dash_pattern: str = "7 5"
    dot_pattern: str = "2 6"


DEFAULT_ROUTING = RoutingConstants()


# ─── Geometry helpers ────────────────────────────────────────────────────────


def pair_key_of(a: str, b: str) -> str:
    return f"{a}::{b}" if a < b else f"{b}::{a}"


def lane_handle(side: Side, lane: Lane, role: str) -> str:
    """Connection-point handle name, e.g. ``r-p3-source``."""
    return f"{side.value}-{lane.value}-{role}"


def _rect_or_fallback(rect: Rect | None) -> Rect:
    return rect if rect is not None else Rect(0, 0, *FALLBACK_RECT_SIZE)


def side_anchor(rect: Rect, side: Side, bottom_clearance: float = 0) -> Point:
    """Midpoint of one face of ``rect``; bottom anchors drop by the clearance."""
    center = rect.center
    if side == Side.Left:
        return Point(rect.x, center.y)
    if side == Side.Right:
        return Point(rect.right, center.y)
    if side == Side.Top:
        return Point(center.x, rect.y)
    return Point(center.x, rect.bottom + max(0, bottom_clearance))


def preferred_facing_side(origin: Point, toward: Point) -> Side:
    dx = toward.x - origin.x
    dy = toward.y - origin.y
    if abs(dx) >= abs(dy):
        return Side.Right if dx >= 0 else Side.Left
    return Side.Bottom if dy >= 0 else Side.Top


def lane_pattern(total: int) -> list[int]:
    """Lane slots (indexes into LANES) for a group of ``total`` edges."""
    if total <= 1:
        return [2]
    if total == 2:
        return [1, 3]
    if total == 3:
        return [0, 2, 4]
    if total == 4:
        return [0, 1, 2, 3]
    return [0, 1, 2, 3, 4]


def lane_for_slot(slot: int) -> Lane:
    return LANES[slot % len(LANES)]


def _direction_penalty(source_side: Side, target_side: Side, direction: Direction, penalty: float) -> float:
    if direction.is_horizontal:
        return penalty if source_side.is_vertical or target_side.is_vertical else 0
    return penalty if not source_side.is_vertical or not target_side.is_vertical else 0


def select_sides_for_edge(
    source_rect: Rect | None,
    target_rect: Rect | None,
    direction: Direction = Direction.LR,
    source_bottom_clearance: float = 0,
    target_bottom_clearance: float = 0,
    constants: RoutingConstants = DEFAULT_ROUTING,
) -> SideSelection:
    """Score all 16 side combinations; the first lowest score wins."""
    s_rect = _rect_or_fallback(source_rect)
    t_rect = _rect_or_fallback(target_rect)
    preferred_source = preferred_facing_side(s_rect.center, t_rect.center)
    preferred_target = preferred_facing_side(t_rect.center, s_rect.center)

    best_score = math.inf
    best_source, best_target = SIDE_ORDER[0], SIDE_ORDER[0]
    for source_side in SIDE_ORDER:
        for target_side in SIDE_ORDER:
            source_point = side_anchor(s_rect, source_side, source_bottom_clearance)
            target_point = side_anchor(t_rect, target_side, target_bottom_clearance)
            score = math.hypot(target_point.x - source_point.x, target_point.y - source_point.y)
            if source_side != preferred_source:
                score += constants.facing_penalty
            if target_side != preferred_target:
                score += constants.facing_penalty
            score += _direction_penalty(source_side, target_side, direction, constants.direction_penalty)
            if score < best_score:
                best_score, best_source, best_target = score, source_side, target_side

    return SideSelection(source_side=best_source, target_side=best_target)


def build_bottom_clearance_by_root(nodes: list[NodeInstance]) -> dict[str, float]:
    """Extra bottom space for root containers that carry a caption."""
    clearance: dict[str, float] = {}
    for node in nodes:
        if node.parent_instance_id is not None or not node.is_container:
            continue
        caption = (node.data or {}).get("caption")
        if isinstance(caption, str) and caption.strip():
            clearance[node.instance_id] = CAPTION_GAP + CAPTION_HEIGHT + CAPTION_EDGE_CLEARANCE_PAD
    return clearance


# ─── Direction aggregation ───────────────────────────────────────────────────


@dataclass
class DirectionState:
    """Whether one direction of a root pair exists, and its first-seen style."""

    present: bool = False
    label: str | None = None
    color: str | None = None
    stroke_type: StrokeType | None = None

    def observe(self, label: str | None, color: str | None, stroke_type: StrokeType | None) -> None:
        self.present = True
        if not self.label and label is not None:
            self.label = label
        if not self.color and color is not None:
            self.color = color
        if self.stroke_type is None and stroke_type is not None:
            self.stroke_type = stroke_type


@dataclass
class RootPairState:
    left: str
    right: str
    forward: DirectionState = field(default_factory=DirectionState)
    reverse: DirectionState = field(default_factory=DirectionState)

    @property
    def key(self) -> str:
        return f"{self.left}::{self.right}"

    @property
    def is_bidirectional(self) -> bool:
        return self.forward.present and self.reverse.present


def build_root_pair_state(graph: NormalizedGraph, root_of: Callable[[str], str]) -> dict[str, RootPairState]:
    """Unordered root pairs keyed ``left::right``, in first-seen order."""
    pairs: dict[str, RootPairState] = {}
    for edge in graph.edges:
        source_root = root_of(edge.source)
        target_root = root_of(edge.target)
        if source_root == target_root:
            continue
        left, right = sorted((source_root, target_root))
        state = pairs.setdefault(f"{left}::{right}", RootPairState(left=left, right=right))
        direction = state.forward if source_root == left else state.reverse
        direction.observe(edge.label, edge.color, edge.stroke_type)
    return pairs


def directional_edge_defs(pairs: dict[str, RootPairState], merged: set[str] | None = None) -> list[RenderedEdgeDef]:
    """One def per present direction; pairs in ``merged`` become one two-headed def."""
    merged = merged or set()
    defs: list[RenderedEdgeDef] = []
    for index, pair in enumerate(pairs.values()):
        pair_key = pair_key_of(pair.left, pair.right)
        if pair.is_bidirectional and pair_key in merged:
            defs.append(
                RenderedEdgeDef(
                    id=f"root-edge-{index}-{pair.left}<->{pair.right}",
                    source_root=pair.left,
                    target_root=pair.right,
                    pair_key=pair_key,
                    label=pair.forward.label or pair.reverse.label,
                    color=pair.forward.color or pair.reverse.color,
                    stroke_type=pair.forward.stroke_type or pair.reverse.stroke_type,
                    bidirectional=True,
                )
            )
            continue
        if pair.forward.present:
            defs.append(
                RenderedEdgeDef(
                    id=f"root-edge-{index}-{pair.left}-to-{pair.right}",
                    source_root=pair.left,
                    target_root=pair.right,
                    pair_key=pair_key,
                    label=pair.forward.label,
                    color=pair.forward.color,
                    stroke_type=pair.forward.stroke_type,
                )
            )
        if pair.reverse.present:
            defs.append(
                RenderedEdgeDef(
                    id=f"root-edge-{index}-{pair.right}-to-{pair.left}",
                    source_root=pair.right,
                    target_root=pair.left,
                    pair_key=pair_key,
                    label=pair.reverse.label,
                    color=pair.reverse.color,
                    stroke_type=pair.reverse.stroke_type,
                )
            )
    return defs


# ─── Lane assignment ─────────────────────────────────────────────────────────


@dataclass
class _Endpoint:
    edge_id: str
    role: str
    opposite: Point

    def sort_key(self, side: Side) -> tuple[float, float, str]:
        if side.is_vertical:
            return (self.opposite.x, self.opposite.y, self.edge_id)
        return (self.opposite.y, self.opposite.x, self.edge_id)


@dataclass
class LaneArtifacts:
    ordered: list[RenderedEdgeDef]
    lane_assignments: dict[str, LaneAssignment]
    side_usage: dict[AnchorKey, int]

    def anchor_keys(self, edge: RenderedEdgeDef) -> tuple[AnchorKey, AnchorKey]:
        lane = self.lane_assignments[edge.id]
        return (edge.source_root, lane.source_side), (edge.target_root, lane.target_side)


def compute_lane_artifacts(
    defs: list[RenderedEdgeDef],
    rects: dict[str, Rect],
    direction: Direction,
    bottom_clearance_by_root: dict[str, float],
    constants: RoutingConstants = DEFAULT_ROUTING,
) -> LaneArtifacts:
    """Pick sides for every def, then spread each anchor group across lanes."""
    ordered = sorted(defs, key=lambda d: d.id)

    selections: dict[str, SideSelection] = {}
    for edge in ordered:
        selections[edge.id] = select_sides_for_edge(
            rects.get(edge.source_root),
            rects.get(edge.target_root),
            direction,
            bottom_clearance_by_root.get(edge.source_root, 0),
            bottom_clearance_by_root.get(edge.target_root, 0),
            constants,
        )

    groups: dict[AnchorKey, list[_Endpoint]] = {}
    for edge in ordered:
        selection = selections[edge.id]
        source_center = _rect_or_fallback(rects.get(edge.source_root)).center
        target_center = _rect_or_fallback(rects.get(edge.target_root)).center
        groups.setdefault((edge.source_root, selection.source_side), []).append(
            _Endpoint(edge.id, "source", target_center)
        )
        groups.setdefault((edge.target_root, selection.target_side), []).append(
            _Endpoint(edge.id, "target", source_center)
        )

    endpoint_lanes: dict[tuple[str, str], tuple[Lane, int]] = {}
    for (_, side), items in groups.items():
        members = sorted(items, key=lambda item: item.sort_key(side))
        pattern = lane_pattern(len(members))
        for index, item in enumerate(members):
            if len(members) == 1:
                endpoint_lanes[(item.edge_id, item.role)] = (CENTER_LANE, 0)
            else:
                endpoint_lanes[(item.edge_id, item.role)] = (lane_for_slot(pattern[index % len(pattern)]), index)

    lane_assignments: dict[str, LaneAssignment] = {}
    side_usage: dict[AnchorKey, int] = {}
    for edge in ordered:
        selection = selections[edge.id]
        source_lane, source_index = endpoint_lanes.get((edge.id, "source"), (CENTER_LANE, 0))
        target_lane, target_index = endpoint_lanes.get((edge.id, "target"), (CENTER_LANE, 0))
        lane_assignments[edge.id] = LaneAssignment(
            source_side=selection.source_side,
            target_side=selection.target_side,
            source_lane=source_lane,
            target_lane=target_lane,
            lane_index=max(source_index, target_index),
        )
        for key in ((edge.source_root, selection.source_side), (edge.target_root, selection.target_side)):
            side_usage[key] = side_usage.get(key, 0) + 1

    return LaneArtifacts(ordered=ordered, lane_assignments=lane_assignments, side_usage=side_usage)


# ─── Crowding ────────────────────────────────────────────────────────────────


def find_crowded_pairs(artifacts: LaneArtifacts) -> set[str]:
    """Pair keys whose anchors are shared with at least one edge outside the pair."""
    by_pair: dict[str, list[RenderedEdgeDef]] = {}
    for edge in artifacts.ordered:
        by_pair.setdefault(edge.pair_key, []).append(edge)

    crowded: set[str] = set()
    for pair_key, pair_edges in by_pair.items():
        if len(pair_edges) < 2:
            continue
        pair_ids = {edge.id for edge in pair_edges}
        pair_anchors: set[AnchorKey] = set()
        for edge in pair_edges:
            pair_anchors.update(artifacts.anchor_keys(edge))

        for other in artifacts.ordered:
            if other.id in pair_ids:
                continue
            if any(key in pair_anchors for key in artifacts.anchor_keys(other)):
                crowded.add(pair_key)
                break
    return crowded


# ─── Descriptors ─────────────────────────────────────────────────────────────


def _dasharray(stroke_type: StrokeType | None, constants: RoutingConstants) -> str | None:
    if stroke_type == StrokeType.Dash:
        return constants.dash_pattern
    if stroke_type == StrokeType.Dot:
        return constants.dot_pattern
    return None


def lane_offsets(lane: LaneAssignment, constants: RoutingConstants = DEFAULT_ROUTING) -> tuple[float, float]:
    """(path offset, label y offset) for a lane assignment."""
    lane_delta = lane.source_lane.index - CENTER_LANE.index
    if lane_delta == 0:
        lane_magnitude = 0.0
    else:
        lane_magnitude = (
            constants.lane_magnitude_base
            + abs(lane_delta) * constants.lane_magnitude_step
            + min(constants.lane_magnitude_index_cap, lane.lane_index) * constants.lane_magnitude_index_step
        )

    vertical = lane.source_side.is_vertical and lane.target_side.is_vertical
    base = constants.vertical_offset_base if vertical else constants.horizontal_offset_base
    step = constants.vertical_offset_step if vertical else constants.horizontal_offset_step
    path_offset = base + min(constants.offset_index_cap, lane.lane_index) * step

    shift = constants.label_positive_lane_shift if lane_delta > 0 else 0
    label_y = -(constants.label_base_offset + lane_magnitude + shift)
    return path_offset, label_y


def _edge_descriptor(
    edge: RenderedEdgeDef,
    lane: LaneAssignment,
    theme: ThemeTokens,
    bottom_clearance_by_root: dict[str, float],
    constants: RoutingConstants,
) -> EdgeDescriptor:
    path_offset, label_y = lane_offsets(lane, constants)
    stroke_color = edge.color or theme.edge_color
    source_clearance = bottom_clearance_by_root.get(edge.source_root, 0) if lane.source_side == Side.Bottom else 0
    target_clearance = bottom_clearance_by_root.get(edge.target_root, 0) if lane.target_side == Side.Bottom else 0

    return EdgeDescriptor(
        id=edge.id,
        source=edge.source_root,
        target=edge.target_root,
        source_handle=lane_handle(lane.source_side, lane.source_lane, "source"),
        target_handle=lane_handle(lane.target_side, lane.target_lane, "target"),
        source_side=lane.source_side,
        target_side=lane.target_side,
        lane=lane.source_lane,
        lane_index=lane.lane_index,
        path_offset=path_offset,
        border_radius=constants.border_radius,
        label=edge.label,
        label_y=label_y,
        stroke_color=stroke_color,
        stroke_type=edge.stroke_type,
        stroke_dasharray=_dasharray(edge.stroke_type, constants),
        stroke_linecap="round" if edge.stroke_type == StrokeType.Dot else "butt",
        marker_start=edge.bidirectional,
        source_bottom_clearance=source_clearance or None,
        target_bottom_clearance=target_clearance or None,
    )


def build_edge_descriptors(
    graph: NormalizedGraph,
    measured_nodes: list[NodeInstance],
    direction: Direction,
    theme: ThemeTokens,
    rects: dict[str, Rect],
    root_of: Callable[[str], str],
    constants: RoutingConstants = DEFAULT_ROUTING,
) -> list[EdgeDescriptor]:
    """Route every cross-root edge of ``graph`` over the final root rects."""
    bottom_clearance = build_bottom_clearance_by_root(measured_nodes)
    pairs = build_root_pair_state(graph, root_of)

    first_pass = compute_lane_artifacts(directional_edge_defs(pairs), rects, direction, bottom_clearance, constants)
    crowded = find_crowded_pairs(first_pass)

    final = compute_lane_artifacts(
        directional_edge_defs(pairs, crowded), rects, direction, bottom_clearance, constants
    )
    logger.debug(
        "routed %d edge(s) over %d root pair(s), %d crowded",
        len(final.ordered),
        len(pairs),
        len(crowded),
    )
    return [
        _edge_descriptor(edge, final.lane_assignments[edge.id], theme, bottom_clearance, constants)
        for edge in final.ordered
    ]
