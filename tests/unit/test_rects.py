"""Tests for diagr.render.rects: container sizing and child packing."""

from __future__ import annotations

from diagr.ir.graph import NodeInstance
from diagr.layout.types import PositionedNode
from diagr.render.rects import RectResolver, build_rects, pack_rows
from diagr.render.types import GROUPCARD_MIN_HEIGHT, GROUPCARD_MIN_WIDTH, Point, Rect, Spacing, round_half_up

SPACING = Spacing(padding_x=22, padding_top=12, padding_bottom=24)


def _positioned(
    node_id: str,
    x: float,
    y: float,
    width: float,
    height: float,
    parent: str | None = None,
    container: bool = False,
    explicit_width: float | None = None,
    explicit_height: float | None = None,
) -> PositionedNode:
    return PositionedNode(
        id=node_id,
        def_id=node_id,
        x=x,
        y=y,
        width=width,
        height=height,
        is_container=container,
        parent_instance_id=parent,
        explicit_width=explicit_width,
        explicit_height=explicit_height,
    )


def _instances(positioned: list[PositionedNode], group_cards: set[str]) -> dict[str, NodeInstance]:
    return {
        p.id: NodeInstance(
            instance_id=p.id,
            def_id=p.def_id,
            is_container=p.is_container,
            parent_instance_id=p.parent_instance_id,
            renderer="groupCard" if p.id in group_cards else None,
        )
        for p in positioned
    }


def _resolve(positioned: list[PositionedNode], group_cards: set[str] = frozenset()):
    return build_rects(positioned, _instances(positioned, set(group_cards)), SPACING)


class TestLeaves:
    def test_leaf_keeps_positioned_rect(self):
        result = _resolve([_positioned("a", 10, 20, 100, 50)])
        assert result.rects["a"] == Rect(10, 20, 100, 50)

    def test_childless_container_floors_to_minimum(self):
        result = _resolve([_positioned("g", 5, 5, 40, 40, container=True)], {"g"})
        assert result.rects["g"] == Rect(5, 5, GROUPCARD_MIN_WIDTH, GROUPCARD_MIN_HEIGHT)

    def test_childless_container_explicit_size(self):
        result = _resolve([_positioned("g", 0, 0, 40, 40, container=True, explicit_width=120, explicit_height=60)], {"g"})
        assert result.rects["g"] == Rect(0, 0, 120, 60)

    def test_unknown_id_falls_back(self):
        resolver = RectResolver([], {}, SPACING)
        assert resolver.resolve("ghost") == Rect(0, 0, 200, 120)


class TestGroupCard:
    def test_single_child_centred_with_padding(self):
        result = _resolve(
            [
                _positioned("panel", 0, 0, 40, 40, container=True),
                _positioned("img", 500, 500, 244, 228, parent="panel"),
            ],
            {"panel"},
        )
        panel = result.rects["panel"]
        assert panel == Rect(0, 0, 288, 294)
        assert result.local_positions["img"] == Point(22, 54)
        assert result.rects["img"] == Rect(22, 54, 244, 228)

    def test_rows_wrap_against_content_width(self):
        result = _resolve(
            [
                _positioned("panel", 10, 20, 40, 40, container=True, explicit_width=300),
                _positioned("a", 0, 0, 100, 50, parent="panel"),
                _positioned("b", 0, 0, 100, 50, parent="panel"),
                _positioned("c", 0, 0, 100, 50, parent="panel"),
            ],
            {"panel"},
        )
        assert result.rects["panel"] == Rect(10, 20, 300, 178)
        assert result.local_positions["a"] == Point(44, 54)
        assert result.local_positions["b"] == Point(156, 54)
        assert result.local_positions["c"] == Point(100, 116)
        assert result.rects["c"] == Rect(110, 136, 100, 50)

    def test_minimum_width_wraps_one_per_row(self):
        result = _resolve(
            [
                _positioned("panel", 0, 0, 40, 40, container=True),
                _positioned("a", 0, 0, 100, 50, parent="panel"),
                _positioned("b", 0, 0, 100, 50, parent="panel"),
            ],
            {"panel"},
        )
        assert result.local_positions["a"].x == result.local_positions["b"].x
        assert result.local_positions["b"].y == result.local_positions["a"].y + 62

    def test_wide_child_expands_panel(self):
        result = _resolve(
            [
                _positioned("panel", 0, 0, 40, 40, container=True),
                _positioned("wide", 0, 0, 520, 130, parent="panel"),
            ],
            {"panel"},
        )
        assert result.rects["panel"].width == 564

    def test_explicit_height_centres_vertically(self):
        result = _resolve(
            [
                _positioned("panel", 0, 0, 40, 40, container=True, explicit_height=400),
                _positioned("a", 0, 0, 100, 50, parent="panel"),
            ],
            {"panel"},
        )
        # content area is 400 - 42 - 12 - 12 = 334 high; (334 - 50) / 2 = 142
        assert result.rects["panel"].height == 400
        assert result.local_positions["a"].y == 42 + 12 + 142

    def test_half_pixel_centring_rounds_up(self):
        result = _resolve(
            [
                _positioned("panel", 0, 0, 40, 40, container=True),
                _positioned("a", 0, 0, 103, 50, parent="panel"),
            ],
            {"panel"},
        )
        assert result.local_positions["a"].x == 22 + 37

    def test_nested_subtree_moves_with_child(self):
        positioned = [
            _positioned("outer", 0, 0, 40, 40, container=True),
            _positioned("inner", 900, 900, 40, 40, container=True, parent="outer"),
            _positioned("leaf", 300, 300, 100, 50, parent="inner"),
        ]
        result = _resolve(positioned, {"outer", "inner"})
        outer, inner, leaf = (result.rects[k] for k in ("outer", "inner", "leaf"))
        assert outer.contains(inner)
        assert inner.contains(leaf)
        assert leaf.x - inner.x == result.local_positions["leaf"].x
        assert leaf.y - inner.y == result.local_positions["leaf"].y


class TestPlainContainer:
    def test_bounding_box_plus_padding(self):
        result = _resolve(
            [
                _positioned("box", 0, 0, 40, 40, container=True),
                _positioned("a", 100, 100, 50, 50, parent="box"),
                _positioned("b", 200, 150, 50, 50, parent="box"),
            ]
        )
        assert result.rects["box"] == Rect(78, 46, 220, 166)
        assert result.rects["a"] == Rect(100, 100, 50, 50)
        assert "a" not in result.local_positions

    def test_children_are_contained(self):
        result = _resolve(
            [
                _positioned("box", 0, 0, 40, 40, container=True),
                _positioned("a", 0, 0, 400, 300, parent="box"),
                _positioned("b", 500, 400, 280, 120, parent="box"),
            ]
        )
        box = result.rects["box"]
        assert box.contains(result.rects["a"])
        assert box.contains(result.rects["b"])


class TestPackRows:
    def test_greedy_wrap(self):
        items = [(k, Rect(0, 0, w, 10)) for k, w in (("a", 50), ("b", 50), ("c", 80))]
        rows = pack_rows(items, 120)
        assert [[i.id for i in row.items] for row in rows] == [["a", "b"], ["c"]]
        assert rows[0].width == 112
        assert [i.x for i in rows[0].items] == [0, 62]

    def test_empty(self):
        assert pack_rows([], 100) == []


class TestRoundHalfUp:
    def test_halves(self):
        assert round_half_up(36.5) == 37
        assert round_half_up(37.5) == 38
        assert round_half_up(-2.5) == -2

    def test_non_halves(self):
        assert round_half_up(2.4) == 2
        assert round_half_up(2.6) == 3
        assert round_half_up(-2.6) == -3
