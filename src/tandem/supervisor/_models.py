"""Data models for the supervisor system.

This module defines the core data types for task management:
- LaunchSpec: Immutable description of how to start a child process
- TaskState: Lifecycle states for supervised tasks
- ExitEvent: Notification that a task's process has terminated
- SupervisorState: Lifecycle states of the supervisor itself
- TriggerKind / ShutdownTrigger: What caused the supervisor to shut down
- ReportKind / Report: Human-readable narration records
"""

from __future__ import annotations

import signal
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path  # noqa: TC003 - Used in runtime type annotations


@dataclass(frozen=True, slots=True)
class LaunchSpec:
    """Description of a child process to supervise.

    Attributes:
        name: Unique identifier for the task within a run.
        command: Command and arguments to execute.
        env: Environment variables overlaid on the supervisor's environment.
        cwd: Working directory for the process.
        settle_delay: Seconds to wait after a successful start before the
            next task is started.
    """

    name: str
    command: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)
    cwd: Path | None = None
    settle_delay: float = 0.0


class TaskState(StrEnum):
    """Task lifecycle states.

    - SPAWNED: Task created, no process yet
    - RUNNING: Process has been created and is being monitored
    - TERMINATING: A termination signal has been sent
    - EXITED: Process has finished; the task is never restarted
    """

    SPAWNED = "spawned"
    RUNNING = "running"
    TERMINATING = "terminating"
    EXITED = "exited"


@dataclass(frozen=True, slots=True)
class ExitEvent:
    """Notification that a task's monitored process has terminated.

    Attributes:
        task_name: Name of the task whose process exited.
        returncode: Return code of the process, negative for death by signal.
    """

    task_name: str
    returncode: int | None = None


class SupervisorState(StrEnum):
    """Supervisor lifecycle states."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class TriggerKind(StrEnum):
    """What caused the supervisor to enter shutdown."""

    TASK_EXIT = "task-exit"
    SPAWN_FAILURE = "spawn-failure"
    SIGNAL = "signal"


@dataclass(frozen=True, slots=True)
class ShutdownTrigger:
    """Immutable record of the event that started shutdown.

    Attributes:
        kind: The category of trigger.
        task_name: The task involved, for task exits and spawn failures.
        signum: The received signal number, for signal triggers.
        returncode: The exited task's return code, if known.
        message: One-line human-readable description.
    """

    kind: TriggerKind
    message: str
    task_name: str | None = None
    signum: int | None = None
    returncode: int | None = None

    @classmethod
    def task_exit(cls, event: ExitEvent) -> ShutdownTrigger:
        """Build a trigger for a task whose process exited."""
        return cls(
            kind=TriggerKind.TASK_EXIT,
            message=f"Process exited unexpectedly: {event.task_name}",
            task_name=event.task_name,
            returncode=event.returncode,
        )

    @classmethod
    def spawn_failure(cls, task_name: str, cause: str) -> ShutdownTrigger:
        """Build a trigger for a task whose process could not be created."""
        return cls(
            kind=TriggerKind.SPAWN_FAILURE,
            message=f"Failed to start process: {task_name} ({cause})",
            task_name=task_name,
        )

    @classmethod
    def from_signal(cls, signum: int) -> ShutdownTrigger:
        """Build a trigger for a received termination signal."""
        name = signal.Signals(signum).name
        return cls(
            kind=TriggerKind.SIGNAL,
            message=f"{name} received, shutting down",
            signum=signum,
        )

    @property
    def exit_status(self) -> int:
        """Return the process exit status this trigger maps to.

        Signal triggers are normally re-raised rather than converted; the
        shell convention of 128 + signum is used only as a fallback.
        """
        if self.signum is not None:
            return 128 + self.signum
        return 1


class ReportKind(StrEnum):
    """Types of supervisor narration.

    - STARTING: A task is about to be started
    - READY: All tasks started; the supervisor is running
    - SIGNAL: A signal was received and is being acted upon
    - TRIGGER: Shutdown was triggered (names the task or signal)
    - COMPLETE: Shutdown finished
    """

    STARTING = "starting"
    READY = "ready"
    SIGNAL = "signal"
    TRIGGER = "trigger"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class Report:
    """A single line of human-readable supervisor narration.

    Attributes:
        kind: Type of narration.
        message: The line to display.
        task_name: The task concerned, if any.
    """

    kind: ReportKind
    message: str
    task_name: str | None = None
