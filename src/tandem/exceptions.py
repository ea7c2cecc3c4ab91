"""tandem exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class TandemError(Exception):
    """Base exception for tandem errors."""


class ConfigError(TandemError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class SupervisorError(TandemError):
    """Base exception for supervisor errors."""


class SpawnError(SupervisorError):
    """Raised when a task's process cannot be created.

    Attributes:
        task_name: The name of the task that failed to start.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        task_name: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and task context.

        Args:
            message: Human-readable error message.
            task_name: The name of the task that failed to start.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.task_name: str = task_name
        self.cause: Exception | None = cause


class ChildExitedUnexpectedlyError(SupervisorError):
    """A task's process ended while the supervisor was running.

    Attributes:
        task_name: The name of the task whose process exited.
        returncode: The process return code, negative for death by signal.
    """

    def __init__(
        self,
        message: str,
        *,
        task_name: str,
        returncode: int | None = None,
    ) -> None:
        """Initialize with error message and task context."""
        super().__init__(message)
        self.task_name: str = task_name
        self.returncode: int | None = returncode


class ShutdownTimeoutError(SupervisorError):
    """One or more tasks did not confirm termination within the grace period.

    Attributes:
        task_names: Names of the tasks that were still running.
        grace_period: The grace period in seconds that expired.
    """

    def __init__(
        self,
        message: str,
        *,
        task_names: Iterable[str],
        grace_period: float,
    ) -> None:
        """Initialize with error message and straggler context."""
        super().__init__(message)
        self.task_names: tuple[str, ...] = tuple(task_names)
        self.grace_period: float = grace_period
