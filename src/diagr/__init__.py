"""diagr: YAML diagram documents to positioned render graphs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from diagr.diagnostics import DiagramError, Diagnostic
from diagr.ir.document import Document
from diagr.parsers.document import load_yaml_document
from diagr.render import RenderGraph, build_render_graph
from diagr.render.measure import SizeMap
from diagr.transform.graph import build_normalized_graph
from diagr.validate.schema import validate_document

logger = logging.getLogger(__name__)

__all__ = [
    "CompileResult",
    "DiagramError",
    "Diagnostic",
    "Document",
    "ParseResult",
    "RenderGraph",
    "compile_document",
    "compile_source",
    "parse_document",
    "render_graph_from_source",
]


@dataclass
class ParseResult:
    ok: bool
    document: Document | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class CompileResult:
    ok: bool
    render_graph: RenderGraph = field(default_factory=RenderGraph)
    document: Document | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


def parse_document(source: str) -> ParseResult:
    """Load, validate, and graph-check a YAML diagram source.

    Stops at the first failing stage (YAML, schema, graph expansion) and
    returns every diagnostic that stage produced.
    """
    loaded = load_yaml_document(source)
    if not loaded.ok or loaded.raw is None:
        return ParseResult(ok=False, diagnostics=loaded.diagnostics)

    validation = validate_document(loaded.raw)
    if not validation.ok or validation.document is None:
        return ParseResult(ok=False, diagnostics=validation.diagnostics)

    graph_build = build_normalized_graph(validation.document)
    if graph_build.diagnostics:
        return ParseResult(ok=False, diagnostics=graph_build.diagnostics)

    return ParseResult(ok=True, document=validation.document)


def compile_document(doc: Document, measured_sizes: SizeMap | None = None) -> RenderGraph:
    """Expand, lay out, and route an already validated document.

    Returns an empty render graph when graph expansion reports diagnostics.
    """
    graph_build = build_normalized_graph(doc)
    if graph_build.diagnostics:
        return RenderGraph()
    return build_render_graph(graph_build.graph, doc, measured_sizes)


def compile_source(source: str, measured_sizes: SizeMap | None = None) -> CompileResult:
    parsed = parse_document(source)
    if not parsed.ok or parsed.document is None:
        logger.debug("compile failed with %d diagnostic(s)", len(parsed.diagnostics))
        return CompileResult(ok=False, diagnostics=parsed.diagnostics)
    return CompileResult(
        ok=True,
        render_graph=compile_document(parsed.document, measured_sizes),
        document=parsed.document,
    )


def render_graph_from_source(source: str) -> RenderGraph:
    """Strict variant of :func:`compile_source`.

    Raises:
        DiagramError: If the source produces any diagnostic.
    """
    result = compile_source(source)
    if not result.ok:
        raise DiagramError(result.diagnostics)
    return result.render_graph
