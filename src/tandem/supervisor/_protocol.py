"""Protocol definitions for the supervisor system.

This module defines the interfaces that decouple the supervisor core from
its presentation and from concrete task implementations:
- Reporter: Protocol for consuming human-readable narration
- TaskProtocol: Protocol for supervised tasks
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import anyio.abc

    from tandem.exceptions import SupervisorError

    from ._channel import ExitChannel
    from ._models import Report, TaskState


@runtime_checkable
class Reporter(Protocol):
    """Protocol for consuming supervisor narration.

    Reporters receive one line per noteworthy supervisor transition
    (startup, readiness, shutdown trigger, completion) and errors that are
    reported rather than raised. Calls are synchronous: they happen from
    signal and shutdown paths that must not suspend.
    """

    def write_report(self, report: Report) -> None:
        """Write a narration line.

        Args:
            report: The narration record.
        """
        ...

    def write_error(self, error: SupervisorError) -> None:
        """Write an error that is reported instead of raised.

        Args:
            error: The error to display.
        """
        ...


@runtime_checkable
class TaskProtocol(Protocol):
    """Protocol for supervised tasks.

    Defines the interface the Supervisor uses to drive a task's lifecycle
    without depending on how the task creates its processes.
    """

    @property
    def name(self) -> str:
        """Return the unique name of this task."""
        ...

    @property
    def state(self) -> TaskState:
        """Return the current state of this task."""
        ...

    @property
    def settle_delay(self) -> float:
        """Return the pause after starting, before the next task starts."""
        ...

    @property
    def is_active(self) -> bool:
        """Return True while the task has a process that has not exited."""
        ...

    async def start(
        self,
        task_group: anyio.abc.TaskGroup,
        channel: ExitChannel,
    ) -> None:
        """Create the task's process and begin monitoring it.

        Raises:
            SpawnError: If the process cannot be created.
        """
        ...

    def request_termination(self) -> None:
        """Ask the task's process to terminate. Idempotent."""
        ...

    def describe(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return a status summary for diagnostics."""
        ...
