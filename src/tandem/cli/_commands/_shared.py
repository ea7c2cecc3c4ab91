"""Shared CLI utilities for commands.

This module provides common utilities used across CLI command implementations:
- Standardized exit codes
- Configuration loading with user-facing error handling
- Console utilities for error handling
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any, Never

from tandem.config import Config
from tandem.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

__all__ = [
    "ExitCode",
    "exit_with_error",
    "get_error_console",
    "load_config_or_exit",
]


class ExitCode(IntEnum):
    """Standard exit codes for tandem CLI commands."""

    SUCCESS = 0
    FAILURE = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 5


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr.

    Returns:
        Console instance writing to stderr.
    """
    from rich.console import Console  # noqa: PLC0415

    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to INTERNAL_ERROR).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {message}", highlight=False)
    raise SystemExit(code)


def load_config_or_exit(
    config_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> Config:
    """Load configuration, exiting with CONFIG_ERROR on failure.

    Args:
        config_path: Explicit path to config file (--config flag).
        cli_overrides: Values from command-line flags.

    Returns:
        The resolved configuration.

    Raises:
        SystemExit: With ExitCode.CONFIG_ERROR if the configuration cannot
            be loaded or is invalid.
    """
    try:
        return Config.load(config_path, cli_overrides=cli_overrides)
    except FileNotFoundError:
        exit_with_error(f"Config file not found: {config_path}", ExitCode.CONFIG_ERROR)
    except ConfigError as e:
        exit_with_error(str(e), ExitCode.CONFIG_ERROR)
    except OSError as e:
        exit_with_error(f"Failed to load config: {e}", ExitCode.CONFIG_ERROR)
