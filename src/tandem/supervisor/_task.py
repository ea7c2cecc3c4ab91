"""Task wrapper for a single supervised child process.

This module provides the Task class that handles spawning a child
process, monitoring it until it exits, forwarding termination requests,
and reporting the exit on the supervisor's ExitChannel.
"""

from __future__ import annotations

import os
import signal
import subprocess
from typing import TYPE_CHECKING, Any

import anyio
import anyio.abc
import structlog

from tandem.exceptions import SpawnError, SupervisorError

from ._models import ExitEvent, LaunchSpec, TaskState

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structlog.typing import FilteringBoundLogger

    from ._channel import ExitChannel


def _get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    import pendulum  # noqa: PLC0415

    return pendulum.now("UTC").to_iso8601_string()


def build_env(spec: LaunchSpec) -> dict[str, str]:
    """Build the child environment for a launch spec.

    Args:
        spec: The launch spec.

    Returns:
        The supervisor's environment overlaid with ``spec.env``.
    """
    return {**os.environ, **spec.env}


class Task:
    """Supervises one child process.

    A task is started once, runs until its process exits and is never
    restarted. Its monitoring activity reports the exit on the
    ExitChannel exactly once, whatever the cause.

    Attributes:
        spec: Immutable launch description for this task.
    """

    termination_signal: int = signal.SIGTERM

    def __init__(
        self,
        spec: LaunchSpec,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the task.

        Args:
            spec: How to start the child process.
            logger: Structured logger. Uses structlog's default if None.
        """
        self.spec = spec
        self._state = TaskState.SPAWNED
        self._processes: list[anyio.abc.Process] = []
        self._pid: int | None = None
        self._returncode: int | None = None
        self._started_at: str | None = None
        self._exited_at: str | None = None
        self._exited: anyio.Event | None = None
        self._task_group: anyio.abc.TaskGroup | None = None
        base_logger: FilteringBoundLogger = logger or structlog.get_logger()
        self._logger = base_logger.bind(task=spec.name)

    @property
    def name(self) -> str:
        """Return the unique name of this task."""
        return self.spec.name

    @property
    def state(self) -> TaskState:
        """Return the current state of this task."""
        return self._state

    @property
    def settle_delay(self) -> float:
        """Return the pause after starting, before the next task starts."""
        return self.spec.settle_delay

    @property
    def pid(self) -> int | None:
        """Return the process ID of the (first) process, once started."""
        return self._pid

    @property
    def pids(self) -> tuple[int, ...]:
        """Return the process IDs of all live processes."""
        return tuple(process.pid for process in self.live_processes)

    @property
    def returncode(self) -> int | None:
        """Return the exit status, negative for death by signal."""
        return self._returncode

    @property
    def exit_code(self) -> int | None:
        """Return the exit code if the process exited normally."""
        if self._returncode is None or self._returncode < 0:
            return None
        return self._returncode

    @property
    def exit_signal(self) -> int | None:
        """Return the signal number if the process was killed by a signal."""
        if self._returncode is None or self._returncode >= 0:
            return None
        return -self._returncode

    @property
    def started_at(self) -> str | None:
        """Return the ISO 8601 timestamp of the successful start."""
        return self._started_at

    @property
    def exited_at(self) -> str | None:
        """Return the ISO 8601 timestamp of the exit."""
        return self._exited_at

    @property
    def is_running(self) -> bool:
        """Return True while the task is running and not yet asked to stop."""
        return self._state is TaskState.RUNNING

    @property
    def is_active(self) -> bool:
        """Return True while the task has a process that has not exited."""
        return self._state in (TaskState.RUNNING, TaskState.TERMINATING)

    @property
    def live_processes(self) -> list[anyio.abc.Process]:
        """Return the task's processes that have not exited yet."""
        return [process for process in self._processes if process.returncode is None]

    async def _spawn(self) -> Sequence[anyio.abc.Process]:
        """Create the task's processes.

        Returns:
            The processes in pipeline order. The last one is monitored.

        Raises:
            OSError: If the process cannot be created.
        """
        process = await anyio.open_process(
            self.spec.command,
            cwd=self.spec.cwd,
            env=build_env(self.spec),
            stdin=subprocess.DEVNULL,
            stdout=None,
            stderr=None,
            start_new_session=True,
        )
        return [process]

    async def start(
        self,
        task_group: anyio.abc.TaskGroup,
        channel: ExitChannel,
    ) -> None:
        """Start the child process and begin monitoring it.

        Args:
            task_group: Task group that owns the monitoring activity.
            channel: Channel on which the exit will be reported.

        Raises:
            SpawnError: If the process cannot be created. The task state
                is left unchanged.
            SupervisorError: If the task has already been started.
        """
        if self._state is not TaskState.SPAWNED:
            msg = f"Task '{self.name}' has already been started"
            raise SupervisorError(msg)

        try:
            processes = await self._spawn()
        except OSError as e:
            self._logger.error("task_spawn_failed", error=str(e))
            msg = f"Failed to start process '{self.name}': {e}"
            raise SpawnError(msg, task_name=self.name, cause=e) from e

        self._processes = list(processes)
        self._pid = self._processes[0].pid
        self._exited = anyio.Event()
        self._task_group = task_group
        self._started_at = _get_timestamp()
        self._state = TaskState.RUNNING

        self._logger.info(
            "task_started",
            pid=self._pid,
            command=" ".join(self.spec.command),
        )
        task_group.start_soon(self._monitor, channel, name=f"monitor:{self.name}")

    def request_termination(self) -> None:
        """Ask the child process to terminate.

        Sends SIGTERM if the task is running and moves it to TERMINATING.
        Has no effect in any other state.
        """
        if not self.is_running:
            return

        self._begin_termination()
        self._signal_processes(self._processes)

    def _begin_termination(self) -> None:
        self._state = TaskState.TERMINATING
        self._logger.info("termination_requested", pid=self._pid)

    def _signal_processes(self, processes: Sequence[anyio.abc.Process]) -> None:
        """Send the termination signal to each process that is still alive."""
        for process in processes:
            if process.returncode is not None:
                continue
            try:
                process.send_signal(self.termination_signal)
            except ProcessLookupError:
                # Process already exited
                continue
            self._logger.debug(
                "signal_sent",
                pid=process.pid,
                signal=signal.Signals(self.termination_signal).name,
            )

    async def _monitor(self, channel: ExitChannel) -> None:
        """Wait for the (last) process to exit and report it once."""
        returncode = await self._processes[-1].wait()
        # Upstream stages have nobody left to write to
        self._signal_processes(self._processes[:-1])
        self._record_exit(returncode)
        channel.send(ExitEvent(task_name=self.name, returncode=returncode))

    def _record_exit(self, returncode: int) -> None:
        self._returncode = returncode
        self._exited_at = _get_timestamp()
        self._state = TaskState.EXITED
        self._processes = []
        if self._exited is not None:
            self._exited.set()
        self._logger.info("task_exited", pid=self._pid, returncode=returncode)

    def describe(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return a status summary for diagnostics."""
        return {
            "name": self.name,
            "state": self._state.value,
            "pid": self._pid,
            "returncode": self._returncode,
            "exit_code": self.exit_code,
            "exit_signal": self.exit_signal,
            "started_at": self._started_at,
            "exited_at": self._exited_at,
        }
