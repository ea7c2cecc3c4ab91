"""The command-line interface for tandem."""

from cyclopts import App
from rich.console import Console

from ._commands import register_commands

_HELP = "Run an app server and its front end as one unit that lives and dies together."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="tandem",
        help=_HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )
    register_commands(app)
    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `tandem` CLI."""
    app()
