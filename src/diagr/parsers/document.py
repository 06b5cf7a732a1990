"""YAML document loader: source text to a raw mapping, or diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from diagr.diagnostics import YAML_PARSE_ERROR, Diagnostic


@dataclass
class LoadResult:
    ok: bool
    raw: dict[str, Any] | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _yaml_diagnostic(error: yaml.YAMLError) -> Diagnostic:
    mark = getattr(error, "problem_mark", None)
    line = mark.line + 1 if mark is not None else 1
    column = mark.column + 1 if mark is not None else 1
    problem = getattr(error, "problem", None)
    message = str(problem) if problem else str(error)
    return Diagnostic(code=YAML_PARSE_ERROR, message=message, line=line, column=column)


def load_yaml_document(source: str) -> LoadResult:
    """Parse YAML source; the root must be a mapping."""
    try:
        parsed = yaml.safe_load(source)
    except yaml.YAMLError as e:
        return LoadResult(ok=False, diagnostics=[_yaml_diagnostic(e)])

    if not isinstance(parsed, dict):
        return LoadResult(
            ok=False,
            diagnostics=[Diagnostic(code=YAML_PARSE_ERROR, message="YAML root must be a mapping/object.")],
        )

    return LoadResult(ok=True, raw=parsed)
