from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from oasdsl.cli.renderers import (
    RenderJsonRenderer,
    RenderPlainRenderer,
    RenderRichRenderer,
    run_events,
)
from oasdsl.core.render import render_events

console = Console(stderr=True)
stdout_console = Console()


def render(
    source: str = typer.Argument(
        ...,
        help="JSON/YAML document file, or a module:attribute document target.",
    ),
    fmt: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format: json or yaml.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the document to this file instead of stdout.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to oasdsl.yaml.",
    ),
    project: Path = typer.Option(
        Path("."),
        "--project",
        "-p",
        help="Base directory for relative paths.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit a machine-readable JSON report.",
    ),
) -> None:
    """Render a document as JSON or YAML."""
    events = render_events(project, source, config_path=config, fmt=fmt.lower(), output=output)
    if json_output:
        renderer = RenderJsonRenderer(stdout_console)
    else:
        renderer = RenderRichRenderer(console) if console.is_terminal else RenderPlainRenderer(console)
    exit_code = run_events(events, renderer)
    raise typer.Exit(code=exit_code)
