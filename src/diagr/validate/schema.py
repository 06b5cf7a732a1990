"""Document validation: structural schema plus composition rules.

Field shapes are checked by the pydantic models in ``diagr.ir.document``. This
module adds the rules a schema cannot express: id uniqueness, ``ids``/``nodes``
exclusivity, dangling ``ids`` references, and composition cycles among
top-level definitions. Every failure is collected; nothing short-circuits
except a structural failure, which makes the rule checks meaningless.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from pydantic import ValidationError

from diagr.diagnostics import NODE_ID_DUPLICATE, Diagnostic, schema_error
from diagr.ir.document import Document, NodeSpec

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    document: Document | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


# ─── Structural schema ───────────────────────────────────────────────────────


def _format_loc(loc: Iterable[Any]) -> str:
    return ".".join(str(part) for part in loc) or "document"


def schema_diagnostics(error: ValidationError) -> list[Diagnostic]:
    return [schema_error(f"{_format_loc(issue['loc'])}: {issue['msg']}") for issue in error.errors()]


# ─── Composition cycle detection ─────────────────────────────────────────────


class _Visit(IntEnum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def find_cycle(definitions: list[NodeSpec]) -> list[str] | None:
    """Return the first composition cycle among ``ids`` references, or None.

    The cycle is reported as a path that starts and ends at the same
    definition id, e.g. ``["a", "b", "a"]``.
    """
    by_id: dict[str, NodeSpec] = {}
    for node in definitions:
        by_id.setdefault(node.id, node)
    state: dict[str, _Visit] = {}
    stack: list[str] = []

    def dfs(def_id: str) -> list[str] | None:
        visit = state.get(def_id, _Visit.UNVISITED)
        if visit == _Visit.IN_PROGRESS:
            at = stack.index(def_id)
            return stack[at:] + [def_id]
        if visit == _Visit.DONE:
            return None

        state[def_id] = _Visit.IN_PROGRESS
        stack.append(def_id)
        for ref in by_id[def_id].composition_ids():
            if ref not in by_id:
                continue
            cycle = dfs(ref)
            if cycle is not None:
                return cycle
        stack.pop()
        state[def_id] = _Visit.DONE
        return None

    for node in definitions:
        if state.get(node.id, _Visit.UNVISITED) == _Visit.UNVISITED:
            cycle = dfs(node.id)
            if cycle is not None:
                return cycle
    return None


def collect_nodes(nodes: list[NodeSpec]) -> list[NodeSpec]:
    """Flatten the inline definition tree, depth first, parents first."""
    out: list[NodeSpec] = []
    for node in nodes:
        out.append(node)
        out.extend(collect_nodes(node.inline_nodes()))
    return out


# ─── Composition rules ───────────────────────────────────────────────────────


def composition_diagnostics(doc: Document, has_groups: bool = False) -> list[Diagnostic]:
    """Check the rules the structural schema cannot express."""
    diagnostics: list[Diagnostic] = []

    if not doc.edges:
        diagnostics.append(schema_error("document: edges is required."))

    if has_groups:
        diagnostics.append(
            schema_error('document: top-level groups is unsupported; use nodes with renderer "groupCard".')
        )

    top_level = doc.nodes
    if not top_level:
        diagnostics.append(schema_error("document: At least one top-level node definition must exist."))

    top_level_ids: set[str] = set()
    for node in top_level:
        if node.id in top_level_ids:
            diagnostics.append(Diagnostic(code=NODE_ID_DUPLICATE, message=f"Duplicate top-level node id: {node.id}"))
            continue
        top_level_ids.add(node.id)

    seen: set[str] = set()
    for node in collect_nodes(top_level):
        if node.id in seen:
            diagnostics.append(Diagnostic(code=NODE_ID_DUPLICATE, message=f"Duplicate node id: {node.id}"))
        seen.add(node.id)

        refs = node.composition_ids()
        if node.inline_nodes() and refs:
            diagnostics.append(schema_error(f"node {node.id}: nodes and ids cannot be used together."))

        for ref in refs:
            if ref not in top_level_ids:
                diagnostics.append(schema_error(f'node {node.id}: ids references unknown top-level node "{ref}".'))

    cycle = find_cycle(top_level)
    if cycle is not None:
        diagnostics.append(schema_error(f"document: composition cycle detected ({' -> '.join(cycle)})."))

    return diagnostics


def validate_model(doc: Document) -> ValidationResult:
    """Validate an already constructed Document."""
    diagnostics = composition_diagnostics(doc, has_groups=doc.groups is not None)
    if diagnostics:
        return ValidationResult(ok=False, diagnostics=diagnostics)
    return ValidationResult(ok=True, document=doc)


def validate_document(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate a raw mapping (as loaded from YAML) into a Document."""
    try:
        doc = Document.model_validate(dict(raw))
    except ValidationError as e:
        diagnostics = schema_diagnostics(e)
        logger.debug("schema validation failed with %d issue(s)", len(diagnostics))
        return ValidationResult(ok=False, diagnostics=diagnostics)

    diagnostics = composition_diagnostics(doc, has_groups="groups" in raw)
    if diagnostics:
        logger.debug("composition validation failed with %d issue(s)", len(diagnostics))
        return ValidationResult(ok=False, diagnostics=diagnostics)

    return ValidationResult(ok=True, document=doc)
