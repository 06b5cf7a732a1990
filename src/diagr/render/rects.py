"""Rect resolution: bottom-up container sizing and child packing.

Resolution is memoized per call in a cache keyed by instance id. A
``groupCard`` container packs its children into wrapped, centred rows and
records each child's parent-relative position; a plain container is the
bounding box of its children plus padding. Whenever a child moves, its whole
resolved subtree moves with it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from diagr.ir.graph import NodeInstance
from diagr.layout.types import PositionedNode
from diagr.render.types import (
    FALLBACK_RECT_SIZE,
    GROUPCARD_MIN_HEIGHT,
    GROUPCARD_MIN_WIDTH,
    HEADER_CONTENT_OFFSET,
    NESTED_ITEM_GAP_X,
    NESTED_ITEM_GAP_Y,
    Point,
    Rect,
    Spacing,
    round_half_up,
)

logger = logging.getLogger(__name__)


@dataclass
class RectResolution:
    rects: dict[str, Rect] = field(default_factory=dict)
    local_positions: dict[str, Point] = field(default_factory=dict)


@dataclass
class _RowItem:
    id: str
    width: float
    height: float
    x: float


@dataclass
class _Row:
    width: float = 0.0
    height: float = 0.0
    items: list[_RowItem] = field(default_factory=list)


def to_rect(node: PositionedNode) -> Rect:
    return Rect(node.x, node.y, node.width, node.height)


def min_group_card_width(explicit_width: float | None) -> float:
    return explicit_width if explicit_width is not None else GROUPCARD_MIN_WIDTH


def min_group_card_height(explicit_height: float | None) -> float:
    return explicit_height if explicit_height is not None else GROUPCARD_MIN_HEIGHT


def pack_rows(items: list[tuple[str, Rect]], row_max_width: float) -> list[_Row]:
    """Greedy left-to-right row packing; a row wraps before exceeding the bound."""
    rows: list[_Row] = []
    current = _Row()
    for item_id, rect in items:
        next_width = rect.width if not current.items else current.width + NESTED_ITEM_GAP_X + rect.width
        if current.items and next_width > row_max_width:
            rows.append(current)
            current = _Row()
            next_width = rect.width
        x = 0.0 if not current.items else current.width + NESTED_ITEM_GAP_X
        current.items.append(_RowItem(id=item_id, width=rect.width, height=rect.height, x=x))
        current.width = next_width
        current.height = max(current.height, rect.height)
    if current.items:
        rows.append(current)
    return rows


class RectResolver:
    """Per-compile resolver; the cache lives and dies with the instance."""

    def __init__(
        self,
        positioned: list[PositionedNode],
        instance_by_id: dict[str, NodeInstance],
        spacing: Spacing,
    ) -> None:
        self.positioned = positioned
        self.by_id: dict[str, PositionedNode] = {node.id: node for node in positioned}
        self.instance_by_id = instance_by_id
        self.spacing = spacing
        self.child_map: dict[str, list[str]] = {}
        for node in positioned:
            if node.parent_instance_id is not None:
                self.child_map.setdefault(node.parent_instance_id, []).append(node.id)
        self.rects: dict[str, Rect] = {}
        self.local_positions: dict[str, Point] = {}

    def shift_subtree(self, node_id: str, dx: float, dy: float) -> None:
        current = self.rects.get(node_id)
        if current is not None:
            self.rects[node_id] = current.translated(dx, dy)
        for child_id in self.child_map.get(node_id, []):
            self.shift_subtree(child_id, dx, dy)

    def resolve_all(self) -> RectResolution:
        for node in self.positioned:
            self.resolve(node.id)
        logger.debug("resolved %d rect(s)", len(self.rects))
        return RectResolution(rects=dict(self.rects), local_positions=dict(self.local_positions))

    def resolve(self, node_id: str) -> Rect:
        existing = self.rects.get(node_id)
        if existing is not None:
            return existing

        current = self.by_id.get(node_id)
        if current is None:
            rect = Rect(0, 0, *FALLBACK_RECT_SIZE)
        else:
            children = self.child_map.get(node_id, [])
            if not children or not current.is_container:
                rect = self._resolve_leaf(current)
            elif self._is_group_card(node_id):
                rect = self._resolve_group_card(current, children)
            else:
                rect = self._resolve_plain_container(current, children)

        self.rects[node_id] = rect
        return rect

    def _is_group_card(self, node_id: str) -> bool:
        instance = self.instance_by_id.get(node_id)
        return instance is not None and instance.is_group_card

    def _resolve_leaf(self, current: PositionedNode) -> Rect:
        if not current.is_container:
            return to_rect(current)
        return Rect(
            current.x,
            current.y,
            max(current.width, min_group_card_width(current.explicit_width)),
            max(current.height, min_group_card_height(current.explicit_height)),
        )

    def _resolve_group_card(self, current: PositionedNode, children: list[str]) -> Rect:
        spacing = self.spacing
        bottom_padding = min(spacing.padding_bottom, spacing.padding_top)
        child_rects = [(child_id, self.resolve(child_id)) for child_id in children]

        min_content_width = max(0.0, min_group_card_width(current.explicit_width) - spacing.padding_x * 2)
        row_max_width = max(max(rect.width for _, rect in child_rects), min_content_width)
        rows = pack_rows(child_rects, row_max_width)

        used_width = max((row.width for row in rows), default=0.0)
        used_height = sum(row.height for row in rows) + NESTED_ITEM_GAP_Y * max(0, len(rows) - 1)

        computed_width = used_width + spacing.padding_x * 2
        computed_height = HEADER_CONTENT_OFFSET + spacing.padding_top + bottom_padding + used_height
        rect = Rect(
            current.x,
            current.y,
            max(computed_width, min_group_card_width(current.explicit_width)),
            max(computed_height, min_group_card_height(current.explicit_height)),
        )

        content_width = max(0.0, rect.width - spacing.padding_x * 2)
        content_height = max(0.0, rect.height - HEADER_CONTENT_OFFSET - spacing.padding_top - bottom_padding)
        vertical_offset = max(0, round_half_up((content_height - used_height) / 2))
        row_y = HEADER_CONTENT_OFFSET + spacing.padding_top + vertical_offset
        for row in rows:
            row_x = spacing.padding_x + max(0, round_half_up((content_width - row.width) / 2))
            for item in row.items:
                self.local_positions[item.id] = Point(row_x + item.x, row_y)
            row_y += row.height + NESTED_ITEM_GAP_Y

        self.rects[current.id] = rect
        for child_id, child_rect in child_rects:
            local = self.local_positions[child_id]
            dx = rect.x + local.x - child_rect.x
            dy = rect.y + local.y - child_rect.y
            if dx != 0 or dy != 0:
                self.shift_subtree(child_id, dx, dy)
        return rect

    def _resolve_plain_container(self, current: PositionedNode, children: list[str]) -> Rect:
        spacing = self.spacing
        child_rects = [self.resolve(child_id) for child_id in children]
        min_x = min(r.x for r in child_rects)
        min_y = min(r.y for r in child_rects)
        max_x = max(r.right for r in child_rects)
        max_y = max(r.bottom for r in child_rects)

        computed_width = max_x - min_x + spacing.padding_x * 2
        computed_height = max_y - min_y + spacing.padding_top * 2 + HEADER_CONTENT_OFFSET
        return Rect(
            min_x - spacing.padding_x,
            min_y - spacing.padding_top - HEADER_CONTENT_OFFSET,
            max(computed_width, min_group_card_width(current.explicit_width)),
            max(computed_height, min_group_card_height(current.explicit_height)),
        )


def build_rects(
    positioned: list[PositionedNode],
    instance_by_id: dict[str, NodeInstance],
    spacing: Spacing,
) -> RectResolution:
    """Resolve final rects and parent-relative child positions."""
    return RectResolver(positioned, instance_by_id, spacing).resolve_all()
