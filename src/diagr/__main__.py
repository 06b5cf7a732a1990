"""CLI entry point for diagr."""

import json
import logging
import sys

import click

from diagr import compile_document, parse_document
from diagr.config import THEME_PRESETS, CompileConfig
from diagr.diagnostics import Diagnostic
from diagr.ir.document import Document
from diagr.templates import EXAMPLES
from diagr.types import Direction


def _echo_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        click.echo(diagnostic.format(), err=True)


def apply_overrides(doc: Document, config: CompileConfig) -> Document:
    """Return ``doc`` with the command-line theme and direction applied."""
    update: dict[str, object] = {}
    if config.theme_override is not None:
        update["theme"] = config.theme_override
    if config.direction_override is not None:
        update["layout"] = doc.layout.model_copy(update={"direction": Direction(config.direction_override.upper())})
    return doc.model_copy(update=update) if update else doc


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--output", "-o", "output", type=str, default=None, help="Write render graph JSON to this file instead of stdout")
@click.option("--theme", "-t", "theme", type=click.Choice(sorted(THEME_PRESETS)), default=None, help="Override the document theme")
@click.option(
    "--direction",
    "-d",
    "direction",
    type=click.Choice([d.value for d in Direction], case_sensitive=False),
    default=None,
    help="Override layout direction (LR, TB, RL, BT)",
)
@click.option("--example", "example", type=click.Choice(sorted(EXAMPLES)), default=None, help="Print a built-in example document and exit")
@click.option("--check", "check_only", is_flag=True, help="Validate only; print nothing on success")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log pipeline stages to stderr")
def main(
    input: str | None,
    output: str | None,
    theme: str | None,
    direction: str | None,
    example: str | None,
    check_only: bool,
    verbose: bool,
) -> None:
    """Compile a diagram document to render graph JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if example is not None:
        click.echo(EXAMPLES[example], nl=False)
        return

    config = CompileConfig(theme_override=theme, direction_override=direction, check_only=check_only)

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    parsed = parse_document(text)
    if not parsed.ok or parsed.document is None:
        _echo_diagnostics(parsed.diagnostics)
        sys.exit(1)

    if config.check_only:
        return

    doc = apply_overrides(parsed.document, config)
    render_graph = compile_document(doc)
    rendered = json.dumps(render_graph.to_dict(), indent=config.indent) + "\n"

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
