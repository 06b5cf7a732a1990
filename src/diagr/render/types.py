"""Geometry types and constants shared by rect resolution and edge routing."""

from __future__ import annotations

import math
from dataclasses import dataclass

from diagr.types import Lane, Side, StrokeType

# ─── Geometry constants ──────────────────────────────────────────────────────

HEADER_HEIGHT: int = 56
HEADER_CONTENT_OFFSET: int = round(HEADER_HEIGHT * 0.75)
GROUPCARD_MIN_WIDTH: int = 220
GROUPCARD_MIN_HEIGHT: int = HEADER_HEIGHT + 24
NESTED_ITEM_GAP_X: int = 12
NESTED_ITEM_GAP_Y: int = 12

CAPTION_GAP: int = 22
CAPTION_HEIGHT: int = 18
CAPTION_EDGE_CLEARANCE_PAD: int = 8
TITLE_GAP: int = 18
TITLE_HEIGHT: int = 32
TITLE_MIN_WIDTH: int = 220

FALLBACK_RECT_SIZE: tuple[float, float] = (200, 120)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def translated(self, dx: float, dy: float) -> Rect:
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def contains(self, other: Rect) -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )


@dataclass(frozen=True)
class Spacing:
    """Container content padding, taken from the theme."""

    padding_x: float
    padding_top: float
    padding_bottom: float


@dataclass(frozen=True)
class SideSelection:
    source_side: Side
    target_side: Side


@dataclass(frozen=True)
class LaneAssignment:
    source_side: Side
    target_side: Side
    source_lane: Lane
    target_lane: Lane
    lane_index: int


@dataclass(frozen=True)
class RenderedEdgeDef:
    """One visual root-to-root edge before lane assignment."""

    id: str
    source_root: str
    target_root: str
    pair_key: str
    label: str | None = None
    color: str | None = None
    stroke_type: StrokeType | None = None
    bidirectional: bool = False
