"""Layout types shared by the layered layout, rect resolution, and routing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class LayoutBox:
    """A node placed by the layered layout; ``x``/``y`` are the centre."""

    id: str
    layer: int
    order: int
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2


@dataclass
class PositionedNode:
    """An instance with its computed top-left position and size."""

    id: str
    def_id: str
    x: float
    y: float
    width: float
    height: float
    is_container: bool
    parent_instance_id: str | None = None
    explicit_width: float | None = None
    explicit_height: float | None = None
    data: dict[str, Any] | None = None


# Prefix constant
DUMMY_PREFIX = "__dummy_"
