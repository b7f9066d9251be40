from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from oasdsl.cli.renderers import (
    CheckJsonRenderer,
    CheckPlainRenderer,
    CheckRichRenderer,
    run_events,
)
from oasdsl.core.check import check_events

console = Console()


def check(
    source: str = typer.Argument(
        ...,
        help="JSON/YAML document file, or a module:attribute document target.",
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
    """Check a document's shape, its component schemas and JSON/YAML equivalence."""
    events = check_events(project, source, config_path=config)
    if json_output:
        renderer = CheckJsonRenderer(console)
    else:
        renderer = CheckRichRenderer(console) if console.is_terminal else CheckPlainRenderer(console)
    exit_code = run_events(events, renderer)
    raise typer.Exit(code=exit_code)
