"""Transforms: instance expansion and graph normalization."""

from diagr.transform.graph import (
    build_normalized_graph,
    expand_document_edges,
    graph_diagnostics,
    to_normalized_graph,
)
from diagr.transform.instances import ExpansionResult, expand_node_instances, root_definition_ids

__all__ = [
    "ExpansionResult",
    "build_normalized_graph",
    "expand_document_edges",
    "expand_node_instances",
    "graph_diagnostics",
    "root_definition_ids",
    "to_normalized_graph",
]
