"""tandem CLI commands."""
# pyright: reportUnusedCallResult=false

from __future__ import annotations

from typing import TYPE_CHECKING

from ._config import app as config_app
from ._logs import app as logs_app
from ._run import app as run_app
from ._shared import (
    ExitCode,
    exit_with_error,
    get_error_console,
    load_config_or_exit,
)

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "ExitCode",
    "config_app",
    "exit_with_error",
    "get_error_console",
    "load_config_or_exit",
    "logs_app",
    "register_commands",
    "run_app",
]


def register_commands(app: App) -> None:
    app.command(config_app)
    app.command(logs_app)
    app.command(run_app)
