"""Tests for diagr.render.edges: side scoring, lanes, crowding, offsets."""

from __future__ import annotations

from diagr.config import LIGHT_THEME
from diagr.ir.graph import NodeInstance, NormalizedEdge, NormalizedGraph
from diagr.render.edges import (
    RoutingConstants,
    build_bottom_clearance_by_root,
    build_edge_descriptors,
    build_root_pair_state,
    compute_lane_artifacts,
    directional_edge_defs,
    find_crowded_pairs,
    lane_handle,
    lane_offsets,
    lane_pattern,
    pair_key_of,
    preferred_facing_side,
    select_sides_for_edge,
    side_anchor,
)
from diagr.render.types import LaneAssignment, Point, Rect
from diagr.types import Direction, Lane, Side, StrokeType

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _root(node_id: str, **kwargs) -> NodeInstance:
    return NodeInstance(instance_id=node_id, def_id=node_id, is_container=kwargs.pop("is_container", False), **kwargs)


def _graph(*edges: tuple[str, str], labels: dict[tuple[str, str], str] | None = None) -> NormalizedGraph:
    labels = labels or {}
    node_ids: list[str] = []
    for src, tgt in edges:
        for node_id in (src, tgt):
            if node_id not in node_ids:
                node_ids.append(node_id)
    return NormalizedGraph(
        nodes=[_root(n) for n in node_ids],
        edges=[
            NormalizedEdge(id=f"{src}-{tgt}", source=src, target=tgt, label=labels.get((src, tgt)))
            for src, tgt in edges
        ],
    )


def _identity(instance_id: str) -> str:
    return instance_id


def _route(graph: NormalizedGraph, rects: dict[str, Rect], direction: Direction = Direction.LR, nodes=None):
    return build_edge_descriptors(graph, nodes or graph.nodes, direction, LIGHT_THEME, rects, _identity)


# ─── Geometry ─────────────────────────────────────────────────────────────────


class TestGeometry:
    def test_pair_key_is_order_independent(self):
        assert pair_key_of("b", "a") == pair_key_of("a", "b") == "a::b"

    def test_lane_handle(self):
        assert lane_handle(Side.Right, Lane.P3, "source") == "r-p3-source"
        assert lane_handle(Side.Top, Lane.P1, "target") == "t-p1-target"

    def test_side_anchor(self):
        rect = Rect(0, 0, 100, 50)
        assert side_anchor(rect, Side.Left) == Point(0, 25)
        assert side_anchor(rect, Side.Right) == Point(100, 25)
        assert side_anchor(rect, Side.Top) == Point(50, 0)
        assert side_anchor(rect, Side.Bottom) == Point(50, 50)
        assert side_anchor(rect, Side.Bottom, 48) == Point(50, 98)

    def test_preferred_facing_side(self):
        origin = Point(0, 0)
        assert preferred_facing_side(origin, Point(10, 3)) == Side.Right
        assert preferred_facing_side(origin, Point(-10, 3)) == Side.Left
        assert preferred_facing_side(origin, Point(3, 10)) == Side.Bottom
        assert preferred_facing_side(origin, Point(3, -10)) == Side.Top
        # Equal magnitudes prefer the horizontal axis.
        assert preferred_facing_side(origin, Point(5, 5)) == Side.Right


class TestSideSelection:
    def test_horizontal_neighbours_in_lr(self):
        selection = select_sides_for_edge(Rect(0, 0, 100, 50), Rect(300, 0, 100, 50), Direction.LR)
        assert (selection.source_side, selection.target_side) == (Side.Right, Side.Left)

    def test_reverse_direction_faces_back(self):
        selection = select_sides_for_edge(Rect(300, 0, 100, 50), Rect(0, 0, 100, 50), Direction.LR)
        assert (selection.source_side, selection.target_side) == (Side.Left, Side.Right)

    def test_vertical_neighbours_in_tb(self):
        selection = select_sides_for_edge(Rect(0, 0, 100, 50), Rect(0, 300, 100, 50), Direction.TB)
        assert (selection.source_side, selection.target_side) == (Side.Bottom, Side.Top)

    def test_horizontal_neighbours_in_tb_still_use_left_right(self):
        selection = select_sides_for_edge(Rect(0, 0, 100, 50), Rect(300, 0, 100, 50), Direction.TB)
        assert (selection.source_side, selection.target_side) == (Side.Right, Side.Left)

    def test_penalties_are_configurable(self):
        constants = RoutingConstants(direction_penalty=1000)
        selection = select_sides_for_edge(Rect(0, 0, 100, 50), Rect(300, 0, 100, 50), Direction.TB, constants=constants)
        assert (selection.source_side, selection.target_side) == (Side.Top, Side.Top)

    def test_lower_score_beats_enumeration_order(self):
        constants = RoutingConstants(direction_penalty=1000)
        selection = select_sides_for_edge(Rect(0, 0, 100, 50), Rect(300, -50, 100, 100), Direction.TB, constants=constants)
        assert (selection.source_side, selection.target_side) == (Side.Bottom, Side.Bottom)
    def test_missing_rects_fall_back(self):
        selection = select_sides_for_edge(None, None)
        assert selection.source_side in Side


# ─── Lanes ────────────────────────────────────────────────────────────────────


class TestLanes:
    def test_lane_pattern_table(self):
        assert lane_pattern(1) == [2]
        assert lane_pattern(2) == [1, 3]
        assert lane_pattern(3) == [0, 2, 4]
        assert lane_pattern(4) == [0, 1, 2, 3]
        assert lane_pattern(5) == [0, 1, 2, 3, 4]
        assert lane_pattern(9) == [0, 1, 2, 3, 4]

    def _fan_out(self, count: int) -> tuple[NormalizedGraph, dict[str, Rect]]:
        targets = [f"t{i}" for i in range(count)]
        graph = _graph(*(("s", t) for t in targets))
        rects = {"s": Rect(100, 260, 220, 108)}
        for i, t in enumerate(targets):
            rects[t] = Rect(700, 120 + i * 120, 244, 228)
        return graph, rects

    def test_group_sizes_follow_pattern(self):
        expected = {
            1: ["p3"],
            2: ["p2", "p4"],
            3: ["p1", "p3", "p5"],
            4: ["p1", "p2", "p3", "p4"],
            5: ["p1", "p2", "p3", "p4", "p5"],
        }
        for count, lanes in expected.items():
            graph, rects = self._fan_out(count)
            edges = _route(graph, rects)
            assert all(e.source_side == Side.Right for e in edges)
            assert sorted(e.lane.value for e in edges) == lanes

    def test_lanes_follow_opposite_endpoint_order(self):
        graph, rects = self._fan_out(3)
        by_target = {e.target: e for e in _route(graph, rects)}
        assert [by_target[t].source_handle for t in ("t0", "t1", "t2")] == [
            "r-p1-source",
            "r-p3-source",
            "r-p5-source",
        ]

    def test_lanes_cycle_beyond_five(self):
        graph, rects = self._fan_out(7)
        lanes = [e.lane for e in sorted(_route(graph, rects), key=lambda e: rects[e.target].y)]
        assert lanes == [Lane.P1, Lane.P2, Lane.P3, Lane.P4, Lane.P5, Lane.P1, Lane.P2]

    def test_single_member_groups_use_centre(self):
        graph, rects = self._fan_out(3)
        assert all(e.target_handle == "l-p3-target" for e in _route(graph, rects))

    def test_routing_is_deterministic(self):
        graph, rects = self._fan_out(5)
        first = [e.to_dict() for e in _route(graph, rects)]
        second = [e.to_dict() for e in _route(graph, dict(reversed(list(rects.items()))))]
        assert first == second


class TestOffsets:
    def test_centre_lane(self):
        lane = LaneAssignment(Side.Right, Side.Left, Lane.P3, Lane.P3, 0)
        assert lane_offsets(lane) == (24, -12)

    def test_outer_lanes(self):
        low = LaneAssignment(Side.Right, Side.Left, Lane.P1, Lane.P3, 0)
        high = LaneAssignment(Side.Right, Side.Left, Lane.P5, Lane.P3, 2)
        assert lane_offsets(low) == (24, -29)
        assert lane_offsets(high) == (52, -37)

    def test_vertical_connections_use_smaller_offsets(self):
        lane = LaneAssignment(Side.Bottom, Side.Top, Lane.P3, Lane.P3, 1)
        assert lane_offsets(lane) == (22, -12)

    def test_offset_index_is_capped(self):
        lane = LaneAssignment(Side.Right, Side.Left, Lane.P3, Lane.P3, 20)
        assert lane_offsets(lane)[0] == 24 + 5 * 14


# ─── Pairs and crowding ───────────────────────────────────────────────────────


class TestPairs:
    def test_pair_state_aggregates_directions(self):
        graph = _graph(("b", "a"), ("a", "b"), ("b", "a"), labels={("b", "a"): "back"})
        pairs = build_root_pair_state(graph, _identity)
        assert list(pairs) == ["a::b"]
        pair = pairs["a::b"]
        assert pair.forward.present and pair.reverse.present
        assert pair.reverse.label == "back"
        assert pair.forward.label is None

    def test_intra_root_edges_are_ignored(self):
        graph = NormalizedGraph(
            nodes=[_root("p", is_container=True), _root("c1", parent_instance_id="p"), _root("c2", parent_instance_id="p")],
            edges=[NormalizedEdge(id="e", source="c1", target="c2")],
        )
        root_of = {"p": "p", "c1": "p", "c2": "p"}.__getitem__
        assert build_root_pair_state(graph, root_of) == {}

    def test_directional_ids(self):
        pairs = build_root_pair_state(_graph(("a", "b"), ("b", "a")), _identity)
        assert [d.id for d in directional_edge_defs(pairs)] == ["root-edge-0-a-to-b", "root-edge-0-b-to-a"]
        merged = directional_edge_defs(pairs, {"a::b"})
        assert [d.id for d in merged] == ["root-edge-0-a<->b"]
        assert merged[0].bidirectional

    def test_merged_def_prefers_forward_style(self):
        graph = NormalizedGraph(
            nodes=[_root("a"), _root("b")],
            edges=[
                NormalizedEdge(id="1", source="a", target="b", color="red"),
                NormalizedEdge(id="2", source="b", target="a", label="back", stroke_type=StrokeType.Dash),
            ],
        )
        (merged,) = directional_edge_defs(build_root_pair_state(graph, _identity), {"a::b"})
        assert merged.color == "red"
        assert merged.label == "back"
        assert merged.stroke_type == StrokeType.Dash


class TestCrowding:
    RECTS = {
        "workers": Rect(0, 239, 293, 108),
        "warehouse": Rect(421, 0, 244, 228),
        "alerts": Rect(413, 318, 260, 130),
    }

    def _graph(self) -> NormalizedGraph:
        return _graph(
            ("workers", "warehouse"),
            ("workers", "alerts"),
            ("alerts", "workers"),
            labels={("workers", "warehouse"): "load", ("workers", "alerts"): "notify", ("alerts", "workers"): "notify"},
        )

    def test_shared_anchor_crowds_the_pair(self):
        pairs = build_root_pair_state(self._graph(), _identity)
        artifacts = compute_lane_artifacts(directional_edge_defs(pairs), self.RECTS, Direction.LR, {})
        assert find_crowded_pairs(artifacts) == {"alerts::workers"}

    def test_crowded_pair_renders_once_with_both_markers(self):
        edges = _route(self._graph(), self.RECTS)
        pair = [e for e in edges if {e.source, e.target} == {"workers", "alerts"}]
        assert len(pair) == 1
        assert pair[0].label == "notify"
        assert pair[0].marker_start and pair[0].marker_end

    def test_uncrowded_pair_keeps_two_labels(self):
        graph = _graph(("a", "b"), ("b", "a"), labels={("a", "b"): "sync", ("b", "a"): "sync"})
        rects = {"a": Rect(0, 60, 220, 108), "b": Rect(340, 0, 244, 228)}
        edges = _route(graph, rects)
        assert len(edges) == 2
        assert [e.label for e in edges] == ["sync", "sync"]
        assert not any(e.marker_start for e in edges)


# ─── Descriptors ──────────────────────────────────────────────────────────────


class TestDescriptors:
    def test_stroke_styles(self):
        graph = NormalizedGraph(
            nodes=[_root("a"), _root("b"), _root("c"), _root("d")],
            edges=[
                NormalizedEdge(id="1", source="a", target="b", stroke_type=StrokeType.Dash, color="tomato"),
                NormalizedEdge(id="2", source="c", target="d", stroke_type=StrokeType.Dot),
            ],
        )
        rects = {
            "a": Rect(0, 0, 100, 50),
            "b": Rect(300, 0, 100, 50),
            "c": Rect(0, 400, 100, 50),
            "d": Rect(300, 400, 100, 50),
        }
        by_source = {e.source: e for e in _route(graph, rects)}
        assert by_source["a"].stroke_dasharray == "7 5"
        assert by_source["a"].stroke_linecap == "butt"
        assert by_source["a"].stroke_color == "tomato"
        assert by_source["c"].stroke_dasharray == "2 6"
        assert by_source["c"].stroke_linecap == "round"
        assert by_source["c"].stroke_color == LIGHT_THEME.edge_color
        assert by_source["a"].border_radius == 8

    def test_bottom_clearance_only_for_captioned_root_containers(self):
        nodes = [
            _root("top", is_container=True, data={"caption": "Caption A"}),
            _root("blank", is_container=True, data={"caption": "   "}),
            _root("leaf", data={"caption": "ignored"}),
        ]
        assert build_bottom_clearance_by_root(nodes) == {"top": 48}

    def test_bottom_clearance_applies_to_bottom_anchor(self):
        nodes = [_root("top", is_container=True, data={"caption": "Caption A"}), _root("below", is_container=True)]
        graph = NormalizedGraph(nodes=nodes, edges=[NormalizedEdge(id="1", source="top", target="below")])
        rects = {"top": Rect(0, 0, 220, 160), "below": Rect(0, 250, 264, 174)}
        (edge,) = _route(graph, rects, Direction.TB)
        assert edge.source_handle == "b-p3-source"
        assert edge.target_handle == "t-p3-target"
        assert edge.source_bottom_clearance == 48
        assert edge.target_bottom_clearance is None
