"""Intermediate representation: document models and the instance graph."""

from diagr.ir.document import Document, LayoutConfig, NodeSpec, OverridePoint
from diagr.ir.graph import NodeInstance, NormalizedEdge, NormalizedGraph

__all__ = [
    "Document",
    "LayoutConfig",
    "NodeInstance",
    "NodeSpec",
    "NormalizedEdge",
    "NormalizedGraph",
    "OverridePoint",
]
