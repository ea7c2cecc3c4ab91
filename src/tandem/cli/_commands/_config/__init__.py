# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
"""Config command for inspecting the resolved configuration."""

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

from tandem.cli._commands._shared import load_config_or_exit

app = App(
    name="config",
    help="Print the resolved configuration as TOML",
    help_on_error=True,
)


@app.default
def show(
    *,
    config: Annotated[
        Path | None, Parameter(name="--config", help="Path to config file")
    ] = None,
) -> None:
    """Print the configuration tandem would run with.

    Shows the result of merging defaults, the config file, TANDEM_*
    environment variables and PORT.
    """
    loaded = load_config_or_exit(config)
    print(loaded.to_toml(), end="")  # noqa: T201
