"""Main supervisor coordinator with coordinated shutdown.

This module provides the Supervisor class that starts a fixed, ordered
set of tasks, waits for the first of them to exit (or for a termination
signal), and then tears all of them down within a bounded grace period.
"""

from __future__ import annotations

import signal
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc
import structlog

from tandem.exceptions import (
    ChildExitedUnexpectedlyError,
    ShutdownTimeoutError,
    SpawnError,
    SupervisorError,
)

from ._channel import ExitChannel
from ._models import (
    Report,
    ReportKind,
    ShutdownTrigger,
    SupervisorState,
    TriggerKind,
)
from ._output import ConsoleReporter
from ._signals import ShutdownLatch, SignalAction, SignalPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structlog.typing import FilteringBoundLogger

    from ._protocol import Reporter, TaskProtocol

DEFAULT_GRACE_PERIOD = 3.0


@final
class Supervisor:
    """Coordinates a group of tasks that live and die together.

    Tasks are started strictly in the given order. As soon as any one of
    them exits, or a terminate signal arrives, every task is asked to
    terminate and the supervisor waits, for at most the grace period,
    for them to confirm. Nothing is ever restarted.
    """

    __slots__ = (
        "_channel",
        "_grace_period",
        "_latch",
        "_logger",
        "_port",
        "_receive_scope",
        "_reporter",
        "_signal_policy",
        "_state",
        "_tasks",
        "_trigger",
        "_wakeup",
    )

    def __init__(  # noqa: PLR0913
        self,
        tasks: Sequence[TaskProtocol],
        *,
        port: int | None = None,
        reporter: Reporter | None = None,
        signal_policy: SignalPolicy | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            tasks: Tasks to supervise, in startup order.
            port: The port the group serves on, for narration.
            reporter: Sink for narration. Uses ConsoleReporter if None.
            signal_policy: Signal handling policy. Non-interactive if None.
            grace_period: Seconds to wait for tasks to confirm termination.
            logger: Structured logger. Uses structlog's default if None.

        Raises:
            SupervisorError: If no tasks are given or names are not unique.
        """
        if not tasks:
            msg = "At least one task is required"
            raise SupervisorError(msg)

        seen: set[str] = set()
        for task in tasks:
            if task.name in seen:
                msg = f"Duplicate task name '{task.name}'"
                raise SupervisorError(msg)
            seen.add(task.name)

        self._tasks: tuple[TaskProtocol, ...] = tuple(tasks)
        self._port = port
        self._reporter: Reporter = reporter or ConsoleReporter()
        self._signal_policy = signal_policy or SignalPolicy(interactive=False)
        self._grace_period = grace_period
        base_logger: FilteringBoundLogger = logger or structlog.get_logger()
        self._logger = base_logger.bind(component="supervisor")
        self._state = SupervisorState.INITIALIZING
        self._latch = ShutdownLatch()
        self._trigger: ShutdownTrigger | None = None
        self._channel: ExitChannel | None = None
        self._wakeup: anyio.Event | None = None
        self._receive_scope: anyio.CancelScope | None = None

    @property
    def tasks(self) -> tuple[TaskProtocol, ...]:
        """Return the supervised tasks in startup order."""
        return self._tasks

    @property
    def state(self) -> SupervisorState:
        """Return the current supervisor state."""
        return self._state

    @property
    def port(self) -> int | None:
        """Return the port the group serves on."""
        return self._port

    @property
    def shutting_down(self) -> bool:
        """Return whether shutdown has been triggered."""
        return self._latch.tripped

    @property
    def trigger(self) -> ShutdownTrigger | None:
        """Return what triggered shutdown, once it has been triggered."""
        return self._trigger

    async def run(self) -> ShutdownTrigger:
        """Run the group until the first exit or a terminate signal.

        Returns:
            The trigger that started shutdown. The caller derives the
            process exit status from it.
        """
        self._channel = ExitChannel()
        self._wakeup = anyio.Event()
        self._receive_scope = anyio.CancelScope()

        try:
            async with anyio.create_task_group() as tg:
                await tg.start(self._watch_signals)

                await self._start_tasks(tg, self._channel)

                if not self._latch.tripped:
                    self._state = SupervisorState.RUNNING
                    self._report(ReportKind.READY, self._ready_message())
                    with self._receive_scope:
                        event = await self._channel.receive()
                        self._begin_shutdown(ShutdownTrigger.task_exit(event))

                await self._shutdown(self._channel)
                tg.cancel_scope.cancel()
        finally:
            self._channel.close()
            self._state = SupervisorState.TERMINATED

        if self._trigger is None:  # pragma: no cover - run() only ends via a trigger
            msg = "Supervisor stopped without a shutdown trigger"
            raise SupervisorError(msg)

        self._logger.info("shutdown_complete", tasks=self.get_status())
        self._report(ReportKind.COMPLETE, "Shutdown complete.")
        return self._trigger

    def request_shutdown(self, signum: int = signal.SIGTERM) -> bool:
        """Trigger shutdown as if ``signum`` had been received.

        Args:
            signum: The signal recorded as the trigger.

        Returns:
            True if this call started shutdown.
        """
        return self._begin_shutdown(ShutdownTrigger.from_signal(signum))

    async def _start_tasks(
        self,
        task_group: anyio.abc.TaskGroup,
        channel: ExitChannel,
    ) -> None:
        """Start every task in order, stopping at the first failure."""
        for task in self._tasks:
            if self._latch.tripped:
                return

            self._report(ReportKind.STARTING, f"Starting {task.name}...", task.name)
            try:
                await task.start(task_group, channel)
            except SpawnError as e:
                cause = str(e.cause) if e.cause is not None else str(e)
                self._begin_shutdown(ShutdownTrigger.spawn_failure(task.name, cause))
                return

            if task.settle_delay > 0 and self._wakeup is not None:
                with anyio.move_on_after(task.settle_delay):
                    await self._wakeup.wait()

    async def _watch_signals(
        self,
        *,
        task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Receive signals and apply the signal policy to each."""
        policy = self._signal_policy
        with anyio.open_signal_receiver(*policy.signals) as signals:
            task_status.started()
            async for signum in signals:
                name = signal.Signals(signum).name
                action = policy.action_for(signum)

                if action is SignalAction.IGNORE:
                    self._logger.info("signal_ignored", signal=name)
                    continue

                if action is SignalAction.REDIRECT:
                    if self._latch.tripped:
                        continue
                    self._report(
                        ReportKind.SIGNAL,
                        f"{name} received, initiating shutdown...",
                    )
                    policy.redirect()
                    continue

                self._begin_shutdown(ShutdownTrigger.from_signal(signum))

    def _begin_shutdown(self, trigger: ShutdownTrigger) -> bool:
        """Enter shutdown exactly once.

        Returns:
            True for the call that entered shutdown, False otherwise.
        """
        if not self._latch.trip():
            self._logger.debug("shutdown_already_started", ignored=trigger.kind.value)
            return False

        self._trigger = trigger
        self._state = SupervisorState.SHUTTING_DOWN
        self._logger.info(
            "shutdown_started",
            trigger=trigger.kind.value,
            trigger_task=trigger.task_name,
            signal=trigger.signum,
            returncode=trigger.returncode,
        )

        if trigger.kind is TriggerKind.TASK_EXIT and trigger.task_name is not None:
            error = ChildExitedUnexpectedlyError(
                trigger.message,
                task_name=trigger.task_name,
                returncode=trigger.returncode,
            )
            self._logger.warning("child_exited_unexpectedly", error=str(error))

        self._report(ReportKind.TRIGGER, trigger.message, trigger.task_name)

        if self._wakeup is not None:
            self._wakeup.set()
        if self._receive_scope is not None:
            self._receive_scope.cancel()
        return True

    async def _shutdown(self, channel: ExitChannel) -> None:
        """Terminate every task and wait a bounded time for confirmation."""
        for task in self._tasks:
            task.request_termination()

        pending = [task.name for task in self._tasks if task.is_active]
        if not pending:
            return

        with anyio.move_on_after(self._grace_period) as scope:
            await channel.drain(pending)

        if scope.cancelled_caught:
            stragglers = [task.name for task in self._tasks if task.is_active]
            error = ShutdownTimeoutError(
                f"Tasks did not terminate within {self._grace_period:g}s: "
                + ", ".join(stragglers),
                task_names=stragglers,
                grace_period=self._grace_period,
            )
            self._logger.warning(
                "shutdown_timeout",
                tasks=stragglers,
                grace_period=self._grace_period,
            )
            self._reporter.write_error(error)

    def _ready_message(self) -> str:
        if self._port is None:
            return "All processes started."
        return f"Application ready for connections on port {self._port}."

    def _report(
        self,
        kind: ReportKind,
        message: str,
        task_name: str | None = None,
    ) -> None:
        self._reporter.write_report(Report(kind=kind, message=message, task_name=task_name))

    def get_status(self) -> dict[str, dict[str, object]]:
        """Get status summary for all tasks.

        Returns:
            Dictionary mapping task names to each task's ``describe()``
            summary plus whether it is still active.
        """
        return {
            task.name: {**task.describe(), "active": task.is_active}
            for task in self._tasks
        }
