"""Instance expansion: definition tree to a tree of mounted instances.

A definition referenced from two ``ids`` lists is mounted twice and yields two
independent instances. Inline ``nodes`` children are always fresh mounts.
Reference mounts are named ``{defId}__{n}``; inline mounts are named
``{id}__inline__{n}`` so provenance survives into the render graph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from diagr.diagnostics import Diagnostic, schema_error
from diagr.ir.document import NodeSpec
from diagr.ir.graph import NodeInstance
from diagr.types import CONTAINER_RENDERER

logger = logging.getLogger(__name__)

INLINE_INFIX = "__inline"


@dataclass
class ExpansionResult:
    instances: list[NodeInstance] = field(default_factory=list)
    instance_by_id: dict[str, NodeInstance] = field(default_factory=dict)
    mounted_by_definition: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def root_definition_ids(definitions: list[NodeSpec]) -> list[str]:
    """Top-level definitions never referenced by another definition's ``ids``."""
    referenced: set[str] = set()
    for node in definitions:
        referenced.update(node.composition_ids())
    return [node.id for node in definitions if node.id not in referenced]


def _is_container(node: NodeSpec) -> bool:
    child_count = len(node.composition_ids()) or len(node.inline_nodes())
    return child_count > 0 or node.renderer == CONTAINER_RENDERER


class _Expander:
    """Stateful mounting walk; one instance per ``expand_node_instances`` call."""

    def __init__(self, definitions: list[NodeSpec]) -> None:
        self.definition_by_id: dict[str, NodeSpec] = {}
        for node in definitions:
            self.definition_by_id.setdefault(node.id, node)
        self.result = ExpansionResult()
        self.counter = 0

    def _record(self, node: NodeSpec, instance_id: str, parent_instance_id: str | None) -> None:
        instance = NodeInstance(
            instance_id=instance_id,
            def_id=node.id,
            is_container=_is_container(node),
            parent_instance_id=parent_instance_id,
            renderer=node.renderer,
            label=node.label,
            width=node.width,
            height=node.height,
            data=dict(node.data) if node.data is not None else None,
        )
        self.result.instances.append(instance)
        self.result.instance_by_id[instance_id] = instance
        self.result.mounted_by_definition.setdefault(node.id, []).append(instance_id)

    def _next_id(self, base: str) -> str:
        instance_id = f"{base}__{self.counter}"
        self.counter += 1
        return instance_id

    def mount_definition(self, def_id: str, parent_instance_id: str | None, stack: list[str]) -> None:
        definition = self.definition_by_id.get(def_id)
        if definition is None:
            self.result.diagnostics.append(schema_error(f'document: ids references unknown node "{def_id}".'))
            return

        if def_id in stack:
            path = " -> ".join([*stack, def_id])
            self.result.diagnostics.append(schema_error(f"document: composition cycle detected ({path})."))
            return

        instance_id = self._next_id(def_id)
        self._record(definition, instance_id, parent_instance_id)
        self._mount_children(definition, instance_id, [*stack, def_id])

    def mount_inline(self, node: NodeSpec, parent_instance_id: str, stack: list[str]) -> None:
        instance_id = self._next_id(f"{node.id}{INLINE_INFIX}")
        self._record(node, instance_id, parent_instance_id)
        self._mount_children(node, instance_id, stack)

    def _mount_children(self, node: NodeSpec, instance_id: str, stack: list[str]) -> None:
        refs = node.composition_ids()
        if refs:
            for ref in refs:
                self.mount_definition(ref, instance_id, stack)
            return
        for child in node.inline_nodes():
            self.mount_inline(child, instance_id, stack)


def expand_node_instances(definitions: list[NodeSpec]) -> ExpansionResult:
    """Mount every root definition and, recursively, everything it composes."""
    expander = _Expander(definitions)
    result = expander.result
    roots = root_definition_ids(definitions)
    if not roots and definitions:
        result.diagnostics.append(schema_error("document: no root nodes available after ids composition."))

    for def_id in roots:
        expander.mount_definition(def_id, None, [])

    logger.debug(
        "expanded %d definition(s) from %d root(s) into %d instance(s)",
        len(definitions),
        len(roots),
        len(result.instances),
    )
    return result
