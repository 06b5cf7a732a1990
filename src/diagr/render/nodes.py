"""Node, caption, and title descriptors."""

from __future__ import annotations

from diagr.ir.document import Document
from diagr.ir.graph import NodeInstance
from diagr.render.graph import (
    CAPTION_SUFFIX,
    CAPTION_TYPE,
    GROUP_CARD_TYPE,
    NODE_TYPE,
    TITLE_NODE_ID,
    TITLE_TYPE,
    NodeDescriptor,
)
from diagr.render.types import (
    CAPTION_GAP,
    CAPTION_HEIGHT,
    TITLE_GAP,
    TITLE_HEIGHT,
    TITLE_MIN_WIDTH,
    Point,
    Rect,
    round_half_up,
)
from diagr.types import CONTAINER_RENDERER

DEFAULT_RENDERER = "default"
DEFAULT_NODE_RECT = Rect(0, 0, 280, 120)
DEFAULT_CAPTION_RECT = Rect(0, 0, 300, 200)
THEME_PAYLOAD_KEY = "__diagramTheme"


def order_by_depth(nodes: list[NodeInstance], instance_by_id: dict[str, NodeInstance]) -> list[NodeInstance]:
    """Stable sort so that every parent precedes its children."""
    depth_cache: dict[str, int] = {}

    def depth_of(instance: NodeInstance) -> int:
        cached = depth_cache.get(instance.instance_id)
        if cached is not None:
            return cached
        parent = instance_by_id.get(instance.parent_instance_id) if instance.parent_instance_id else None
        depth = 0 if parent is None else depth_of(parent) + 1
        depth_cache[instance.instance_id] = depth
        return depth

    return sorted(nodes, key=depth_of)


def build_node_descriptors(
    nodes: list[NodeInstance],
    doc: Document,
    rects: dict[str, Rect],
    local_positions: dict[str, Point],
    instance_by_id: dict[str, NodeInstance],
) -> list[NodeDescriptor]:
    has_children = {node.parent_instance_id for node in nodes if node.parent_instance_id is not None}
    theme_name = doc.theme if isinstance(doc.theme, str) else "light"

    descriptors: list[NodeDescriptor] = []
    for instance in order_by_depth(nodes, instance_by_id):
        rect = rects.get(instance.instance_id, DEFAULT_NODE_RECT)
        parent_rect = rects.get(instance.parent_instance_id) if instance.parent_instance_id else None
        local = local_positions.get(instance.instance_id)
        if local is not None:
            position = Point(round_half_up(local.x), round_half_up(local.y))
        elif parent_rect is not None:
            position = Point(round_half_up(rect.x - parent_rect.x), round_half_up(rect.y - parent_rect.y))
        else:
            position = Point(round_half_up(rect.x), round_half_up(rect.y))

        is_container = instance.is_group_card or instance.is_container or instance.instance_id in has_children
        parent = instance_by_id.get(instance.parent_instance_id) if instance.parent_instance_id else None
        descriptors.append(
            NodeDescriptor(
                id=instance.instance_id,
                type=GROUP_CARD_TYPE if is_container else NODE_TYPE,
                position=position,
                rect=rect,
                parent_id=instance.parent_instance_id,
                renderer=instance.renderer or (CONTAINER_RENDERER if is_container else DEFAULT_RENDERER),
                label=instance.label if isinstance(instance.label, str) else "",
                subtitle=instance.renderer,
                in_group_card=parent is not None and parent.is_group_card,
                payload={**(instance.data or {}), THEME_PAYLOAD_KEY: theme_name},
            )
        )
    return descriptors


def build_caption_descriptors(nodes: list[NodeInstance], rects: dict[str, Rect]) -> list[NodeDescriptor]:
    """A caption sits below each captioned container, spanning its width."""
    captions: list[NodeDescriptor] = []
    for node in nodes:
        caption = (node.data or {}).get("caption")
        if not node.is_container or not isinstance(caption, str):
            continue
        rect = rects.get(node.instance_id, DEFAULT_CAPTION_RECT)
        position = Point(rect.x, rect.bottom + CAPTION_GAP)
        captions.append(
            NodeDescriptor(
                id=f"{node.instance_id}{CAPTION_SUFFIX}",
                type=CAPTION_TYPE,
                position=position,
                rect=Rect(position.x, position.y, rect.width, CAPTION_HEIGHT),
                label=caption,
            )
        )
    return captions


def build_title_descriptor(
    doc: Document, nodes: list[NodeInstance], rects: dict[str, Rect]
) -> NodeDescriptor | None:
    title = doc.title.strip() if isinstance(doc.title, str) else ""
    if not title:
        return None

    root_rects = [rects[node.instance_id] for node in nodes if node.parent_instance_id is None and node.instance_id in rects]
    if not root_rects:
        return None

    min_x = min(r.x for r in root_rects)
    min_y = min(r.y for r in root_rects)
    max_x = max(r.right for r in root_rects)
    position = Point(round_half_up(min_x), round_half_up(min_y - TITLE_HEIGHT - TITLE_GAP))
    width = max(TITLE_MIN_WIDTH, round_half_up(max_x - min_x))
    return NodeDescriptor(
        id=TITLE_NODE_ID,
        type=TITLE_TYPE,
        position=position,
        rect=Rect(position.x, position.y, width, TITLE_HEIGHT),
        label=title,
    )
