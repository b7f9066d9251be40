import typer
import rich_click  # noqa: F401
from .check import check
from .render import render
from oasdsl import __version__
from oasdsl.logging import setup_logging

app = typer.Typer(
    name="oasdsl",
    help="Build OpenAPI schema documents in Python and render them as JSON or YAML",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    setup_logging()


@app.command("version")
def version() -> None:
    """Show the oasdsl version."""
    typer.echo(f"oasdsl v{__version__}")


app.command()(render)
app.command()(check)
