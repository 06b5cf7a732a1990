"""Edge-chain parser: line-oriented, never raises.

Grammar, one statement per line::

    ID (--> | <-->) ID [(--> | <-->) ID ...] ["[" attr ("," attr)* "]"]

Blank lines and lines starting with ``#`` are skipped. Problems are reported
as diagnostics carrying the 1-based line number; the offending line yields no
edges.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from diagr.diagnostics import EDGE_PARSE_ERROR, Diagnostic
from diagr.ir.graph import NormalizedEdge
from diagr.types import StrokeType

# ─── Tokens ──────────────────────────────────────────────────────────────────

ARROW = "-->"
BIDIR_ARROW = "<-->"

_ARROW_SPLIT_RE = re.compile(r"\s+(-->|<-->)\s+")
_LEGACY_LABEL_RE = re.compile(r'\(\s*"[^"]*"\s*\)\s*$')
_ATTR_BLOCK_RE = re.compile(r"\[([^\]]*)\]\s*$")
_ATTR_RE = re.compile(r'([a-zA-Z_][a-zA-Z0-9_-]*)\s*=\s*("(?:[^"\\]|\\.)*"|[^,\]]+)')
_ENDPOINT_RE = re.compile(r"[^\s\[\]()\"]+")

_STROKE_TYPES: dict[str, StrokeType] = {s.value: s for s in StrokeType}
SUPPORTED_ATTRS = ("label", "color", "type")

LEGACY_LABEL_MESSAGE = 'Legacy edge label syntax is unsupported. Use [label="..."] attributes.'


@dataclass
class EdgeAttrs:
    label: str | None = None
    color: str | None = None
    stroke_type: StrokeType | None = None


@dataclass
class EdgeParseResult:
    edges: list[NormalizedEdge] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _diag(message: str, line: int, column: int = 1) -> Diagnostic:
    return Diagnostic(code=EDGE_PARSE_ERROR, message=message, line=line, column=column)


def unquote(value: str) -> str:
    """Strip surrounding double quotes and resolve ``\\"`` and ``\\\\``."""
    trimmed = value.strip()
    if len(trimmed) >= 2 and trimmed.startswith('"') and trimmed.endswith('"'):
        buf: list[str] = []
        body = trimmed[1:-1]
        pos = 0
        while pos < len(body):
            ch = body[pos]
            if ch == "\\" and pos + 1 < len(body) and body[pos + 1] in ('"', "\\"):
                buf.append(body[pos + 1])
                pos += 2
                continue
            buf.append(ch)
            pos += 1
        return "".join(buf)
    return trimmed


def split_attr_segments(body: str) -> list[str]:
    """Split an attribute body on commas that are not inside a quoted value."""
    segments: list[str] = []
    buf: list[str] = []
    in_quotes = False
    pos = 0
    while pos < len(body):
        ch = body[pos]
        if ch == "\\" and in_quotes and pos + 1 < len(body):
            buf.append(body[pos : pos + 2])
            pos += 2
            continue
        if ch == '"':
            in_quotes = not in_quotes
        if ch == "," and not in_quotes:
            segments.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
        pos += 1
    segments.append("".join(buf).strip())
    return [s for s in segments if s]


def parse_attrs(body: str, line_no: int) -> tuple[EdgeAttrs, list[Diagnostic]]:
    """Parse the inside of a trailing ``[...]`` attribute block."""
    attrs = EdgeAttrs()
    diagnostics: list[Diagnostic] = []

    for segment in split_attr_segments(body):
        m = _ATTR_RE.fullmatch(segment)
        if m is None:
            diagnostics.append(_diag(f"Invalid edge attribute syntax: {segment}", line_no))
            continue

        key, value = m.group(1), unquote(m.group(2))
        if key == "label":
            attrs.label = value
        elif key == "color":
            attrs.color = value
        elif key == "type":
            stroke = _STROKE_TYPES.get(value)
            if stroke is None:
                diagnostics.append(_diag(f'Unsupported edge type "{value}". Use solid, dot, or dash.', line_no))
            else:
                attrs.stroke_type = stroke
        else:
            supported = ", ".join(SUPPORTED_ATTRS)
            diagnostics.append(_diag(f'Unsupported edge attribute key "{key}". Supported keys: {supported}.', line_no))

    return attrs, diagnostics


def tokenize_chain(text: str) -> tuple[list[str], list[str]]:
    """Split ``a --> b <--> c`` into endpoints and arrows."""
    parts = _ARROW_SPLIT_RE.split(text)
    nodes = [p.strip() for p in parts[0::2]]
    arrows = [p.strip() for p in parts[1::2]]
    return nodes, arrows


def parse_edge_line(raw_line: str, line_no: int) -> EdgeParseResult:
    """Parse one line of the edges block."""
    result = EdgeParseResult()
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return result

    if _LEGACY_LABEL_RE.search(line):
        result.diagnostics.append(_diag(LEGACY_LABEL_MESSAGE, line_no))
        return result

    attrs = EdgeAttrs()
    chain_text = line
    attr_match = _ATTR_BLOCK_RE.search(line)
    if attr_match is not None:
        chain_text = line[: attr_match.start()].strip()
        attrs, attr_diagnostics = parse_attrs(attr_match.group(1), line_no)
        if attr_diagnostics:
            result.diagnostics.extend(attr_diagnostics)
            return result

    if ARROW not in chain_text:
        result.diagnostics.append(_diag("Edge line must include --> or <-->", line_no))
        return result

    nodes, arrows = tokenize_chain(chain_text)
    if len(nodes) < 2:
        result.diagnostics.append(_diag("Edge connection requires at least two nodes", line_no))
        return result

    for endpoint in nodes:
        if not _ENDPOINT_RE.fullmatch(endpoint) or ARROW in endpoint:
            result.diagnostics.append(_diag(f"Malformed edge chain near '{endpoint}'", line_no))
            return result

    for position, arrow in enumerate(arrows):
        source, target = nodes[position], nodes[position + 1]
        bidirectional = arrow == BIDIR_ARROW
        result.edges.append(_make_edge(source, target, line_no, position, bidirectional, attrs))
        if bidirectional:
            result.edges.append(_make_edge(target, source, line_no, position, bidirectional, attrs))

    return result


def _make_edge(
    source: str,
    target: str,
    line_no: int,
    position: int,
    bidirectional: bool,
    attrs: EdgeAttrs,
) -> NormalizedEdge:
    return NormalizedEdge(
        id=f"{source}-{target}-{line_no}-{position}",
        source=source,
        target=target,
        bidirectional=bidirectional,
        label=attrs.label,
        color=attrs.color,
        stroke_type=attrs.stroke_type,
    )


def parse_edges_block(block: str) -> EdgeParseResult:
    """Parse a whole edges block into definition-level edges plus diagnostics."""
    result = EdgeParseResult()
    for index, raw_line in enumerate(block.split("\n")):
        line_result = parse_edge_line(raw_line, index + 1)
        result.edges.extend(line_result.edges)
        result.diagnostics.extend(line_result.diagnostics)
    return result
