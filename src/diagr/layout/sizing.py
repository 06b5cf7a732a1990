"""Default node sizes estimated from renderer-specific payload heuristics.

Renderer names are opaque keys: unknown renderers get the generic default.
"""

from __future__ import annotations

from typing import Any

from diagr.ir.graph import NodeInstance

CONTAINER_PLACEHOLDER: tuple[float, float] = (40, 40)
DEFAULT_SIZE: tuple[float, float] = (280, 120)
IMAGE_SIZE: tuple[float, float] = (244, 228)


def _cards_size(payload: dict[str, Any]) -> tuple[float, float]:
    cards = payload.get("cards")
    cards = cards if isinstance(cards, list) else []
    if not cards:
        return (150, 98)
    if len(cards) == 1:
        first = cards[0] if isinstance(cards[0], dict) else {}
        icons = first.get("icons")
        icon_count = icons if isinstance(icons, (int, float)) and not isinstance(icons, bool) else 12
        if icon_count <= 1:
            return (126, 94)
        if icon_count <= 4:
            return (162, 116)
        return (184, 132)
    if len(cards) == 2:
        return (212, 138)
    return (246, 160)


def _text_metrics(text: str, min_lines: int, min_longest: int) -> tuple[int, int]:
    lines = text.split("\n")
    return max(min_lines, len(lines)), max(min_longest, *(len(line) for line in lines))


def _code_size(payload: dict[str, Any]) -> tuple[float, float]:
    code = payload.get("code")
    lines, longest = _text_metrics(code if isinstance(code, str) else "", 1, 12)
    width = max(220, min(390, 76 + longest * 7))
    height = max(108, min(240, 38 + lines * 16))
    return (width, height)


def _markdown_size(payload: dict[str, Any]) -> tuple[float, float]:
    markdown = payload.get("markdown")
    lines, longest = _text_metrics(markdown if isinstance(markdown, str) else "", 3, 18)
    width = max(260, min(520, 92 + longest * 6))
    height = max(130, min(320, 58 + lines * 14))
    return (width, height)


def default_size_for_node(node: NodeInstance) -> tuple[float, float]:
    """Estimate (width, height) before any measurement or container packing."""
    if node.width and node.height:
        return (node.width, node.height)

    if node.is_container or node.is_group_card:
        return CONTAINER_PLACEHOLDER

    payload = node.data or {}
    if node.renderer == "cards":
        return _cards_size(payload)
    if node.renderer == "code":
        return _code_size(payload)
    if node.renderer == "image":
        return IMAGE_SIZE
    if node.renderer == "markdown":
        return _markdown_size(payload)
    return DEFAULT_SIZE


def node_size(node: NodeInstance) -> tuple[float, float]:
    """Explicit dimensions win per axis; the heuristic fills the rest."""
    default_w, default_h = default_size_for_node(node)
    width = node.width if node.width is not None else default_w
    height = node.height if node.height is not None else default_h
    return (width, height)
