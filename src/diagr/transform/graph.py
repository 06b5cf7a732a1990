"""Graph normalization: definition-level edges to instance-level edges.

Each parsed edge is expanded over every mounted instance of its endpoint
definitions (the full cross product), deduplicated by ordered instance pair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from diagr.diagnostics import EDGE_REFERENCE_ERROR, Diagnostic
from diagr.ir.document import Document
from diagr.ir.graph import NormalizedEdge, NormalizedGraph
from diagr.parsers.edges import parse_edges_block
from diagr.transform.instances import ExpansionResult, expand_node_instances

logger = logging.getLogger(__name__)


@dataclass
class EdgeExpansion:
    edges: list[NormalizedEdge] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def expand_document_edges(doc: Document, mounted_by_definition: dict[str, list[str]]) -> EdgeExpansion:
    """Parse ``doc.edges`` and cross-expand over mounted instances."""
    parsed = parse_edges_block(doc.edges)
    expansion = EdgeExpansion(diagnostics=list(parsed.diagnostics))
    seen: set[tuple[str, str]] = set()

    for edge in parsed.edges:
        source_instances = mounted_by_definition.get(edge.source, [])
        target_instances = mounted_by_definition.get(edge.target, [])
        if not source_instances or not target_instances:
            expansion.diagnostics.append(
                Diagnostic(
                    code=EDGE_REFERENCE_ERROR,
                    message=f"Edges references unmapped node(s): {edge.source} -> {edge.target}",
                )
            )
            continue

        for source_instance in source_instances:
            for target_instance in target_instances:
                key = (source_instance, target_instance)
                if key in seen:
                    continue
                seen.add(key)
                expansion.edges.append(
                    NormalizedEdge(
                        id=f"{edge.id}__{source_instance}__{target_instance}",
                        source=source_instance,
                        target=target_instance,
                        bidirectional=edge.bidirectional,
                        label=edge.label,
                        color=edge.color,
                        stroke_type=edge.stroke_type,
                    )
                )

    return expansion


@dataclass
class GraphBuild:
    graph: NormalizedGraph
    diagnostics: list[Diagnostic]


def build_normalized_graph(doc: Document) -> GraphBuild:
    """Expand instances and edges; the graph is empty if anything failed."""
    expansion: ExpansionResult = expand_node_instances(doc.nodes)
    edge_expansion = expand_document_edges(doc, expansion.mounted_by_definition)
    diagnostics = [*expansion.diagnostics, *edge_expansion.diagnostics]

    if diagnostics:
        logger.debug("graph expansion produced %d diagnostic(s)", len(diagnostics))
        return GraphBuild(graph=NormalizedGraph(), diagnostics=diagnostics)

    graph = NormalizedGraph(nodes=expansion.instances, edges=edge_expansion.edges)
    logger.debug("normalized graph: %d instance(s), %d edge(s)", graph.node_count(), graph.edge_count())
    return GraphBuild(graph=graph, diagnostics=[])


def to_normalized_graph(doc: Document) -> NormalizedGraph:
    return build_normalized_graph(doc).graph


def graph_diagnostics(doc: Document) -> list[Diagnostic]:
    return build_normalized_graph(doc).diagnostics
