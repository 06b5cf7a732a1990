"""Document models: the structured form of a diagram source.

These pydantic models describe field shapes only. Composition rules (id
uniqueness, ``ids``/``nodes`` exclusivity, reference cycles) are enforced by
``diagr.validate.schema``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from diagr.config import DEFAULT_LAYOUT
from diagr.types import Direction


class OverridePoint(BaseModel):
    x: float
    y: float


class LayoutConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    direction: Direction = DEFAULT_LAYOUT.direction
    x_gap: float = Field(default=DEFAULT_LAYOUT.x_gap, gt=0, alias="xGap")
    y_gap: float = Field(default=DEFAULT_LAYOUT.y_gap, gt=0, alias="yGap")
    overrides: dict[str, OverridePoint] = Field(default_factory=dict)

    def override_for(self, instance_id: str, def_id: str) -> OverridePoint | None:
        """Manual position for an instance, falling back to its definition id."""
        return self.overrides.get(instance_id) or self.overrides.get(def_id)


class NodeSpec(BaseModel):
    """An author-specified node definition."""

    id: str = Field(min_length=1)
    renderer: str | None = None
    label: str | None = None
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    ids: list[str] | None = None
    nodes: list[NodeSpec] | None = None
    data: dict[str, Any] | None = None

    def composition_ids(self) -> list[str]:
        """Referenced definition ids, honouring the legacy ``data.ids`` list."""
        if self.ids is not None:
            return [ref for ref in self.ids if isinstance(ref, str) and ref]
        legacy = (self.data or {}).get("ids")
        if isinstance(legacy, list):
            return [ref for ref in legacy if isinstance(ref, str) and ref]
        return []

    def inline_nodes(self) -> list[NodeSpec]:
        return list(self.nodes or [])


NodeSpec.model_rebuild()


class Document(BaseModel):
    """A validated diagram document."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str | None = None
    filename: str | None = Field(default=None, min_length=1)
    theme: str | None = None
    nodes: list[NodeSpec] = Field(default_factory=list)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    edges: str = ""
    groups: Any = None

    @property
    def direction(self) -> Direction:
        return self.layout.direction
