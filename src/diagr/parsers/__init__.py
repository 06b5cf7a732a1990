"""Parsers: YAML document loading and the edge-chain mini-language."""

from diagr.parsers.document import LoadResult, load_yaml_document
from diagr.parsers.edges import EdgeParseResult, parse_edge_line, parse_edges_block

__all__ = [
    "EdgeParseResult",
    "LoadResult",
    "load_yaml_document",
    "parse_edge_line",
    "parse_edges_block",
]
