"""Shared type definitions for diagr.

Enums used across the parser, validator, layout, and render-graph stages.
"""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    LR = "LR"
    TB = "TB"
    RL = "RL"
    BT = "BT"

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LR, Direction.RL)


class StrokeType(Enum):
    Solid = "solid"  # type=solid
    Dot = "dot"  # type=dot
    Dash = "dash"  # type=dash


class Side(Enum):
    Left = "l"
    Right = "r"
    Top = "t"
    Bottom = "b"

    @property
    def is_vertical(self) -> bool:
        return self in (Side.Top, Side.Bottom)


# Fixed enumeration order for side selection tie-breaking.
SIDE_ORDER: tuple[Side, ...] = (Side.Left, Side.Right, Side.Top, Side.Bottom)


class Lane(Enum):
    P1 = "p1"
    P2 = "p2"
    P3 = "p3"  # centre
    P4 = "p4"
    P5 = "p5"

    @property
    def index(self) -> int:
        return LANES.index(self)


LANES: tuple[Lane, ...] = (Lane.P1, Lane.P2, Lane.P3, Lane.P4, Lane.P5)
CENTER_LANE: Lane = Lane.P3

CONTAINER_RENDERER = "groupCard"
