"""Diagnostics: the primary failure channel of the compile pipeline.

Every stage accumulates diagnostics instead of raising so that a single pass
reports every problem in a document.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Literal

YAML_PARSE_ERROR = "YAML_PARSE_ERROR"
SCHEMA_ERROR = "SCHEMA_ERROR"
NODE_ID_DUPLICATE = "NODE_ID_DUPLICATE"
EDGE_PARSE_ERROR = "EDGE_PARSE_ERROR"
EDGE_REFERENCE_ERROR = "EDGE_REFERENCE_ERROR"

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found in a document."""

    code: str
    message: str
    severity: Severity = "error"
    line: int = 1
    column: int = 1
    suggestion: str | None = None

    def format(self) -> str:
        return f"{self.line}:{self.column} {self.code} {self.message}"

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        if self.suggestion is None:
            del data["suggestion"]
        return data


def schema_error(message: str, line: int = 1, column: int = 1) -> Diagnostic:
    return Diagnostic(code=SCHEMA_ERROR, message=message, line=line, column=column)


class DiagramError(ValueError):
    """Raised by the strict API when a document produces diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)
        lines = "\n".join(d.format() for d in self.diagnostics)
        super().__init__(f"diagram has {len(self.diagnostics)} problem(s):\n{lines}")
