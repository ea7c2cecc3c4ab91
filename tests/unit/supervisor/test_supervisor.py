"""Tests for tandem.supervisor._supervisor module using in-memory tasks."""

import os
import signal
from collections.abc import Callable

import anyio
import anyio.abc
import pytest

from tandem.exceptions import ShutdownTimeoutError, SpawnError, SupervisorError
from tandem.supervisor import (
    ExitChannel,
    ExitEvent,
    RecordingReporter,
    ReportKind,
    ShutdownTrigger,
    SignalPolicy,
    Supervisor,
    SupervisorState,
    TaskState,
    TriggerKind,
)

pytestmark = pytest.mark.anyio


class FakeTask:
    """Task double that exits when asked to, without any process."""

    def __init__(
        self,
        name: str,
        *,
        fail: bool = False,
        settle_delay: float = 0.0,
        exit_on_terminate: bool = True,
    ) -> None:
        self.name = name
        self.state = TaskState.SPAWNED
        self.settle_delay = settle_delay
        self.fail = fail
        self.exit_on_terminate = exit_on_terminate
        self.termination_requests = 0
        self._channel: ExitChannel | None = None

    @property
    def is_active(self) -> bool:
        return self.state in (TaskState.RUNNING, TaskState.TERMINATING)

    async def start(
        self,
        task_group: anyio.abc.TaskGroup,  # noqa: ARG002
        channel: ExitChannel,
    ) -> None:
        if self.fail:
            msg = f"Failed to start process '{self.name}'"
            raise SpawnError(
                msg, task_name=self.name, cause=FileNotFoundError("no such file")
            )
        self._channel = channel
        self.state = TaskState.RUNNING

    def request_termination(self) -> None:
        self.termination_requests += 1
        if self.state is not TaskState.RUNNING:
            return
        self.state = TaskState.TERMINATING
        if self.exit_on_terminate:
            self.exit(-signal.SIGTERM)

    def describe(self) -> dict[str, object]:
        return {"name": self.name, "state": self.state.value}

    def exit(self, returncode: int = 0) -> None:
        self.state = TaskState.EXITED
        assert self._channel is not None
        self._channel.send(ExitEvent(task_name=self.name, returncode=returncode))


async def _wait_until(condition: Callable[[], bool]) -> None:
    with anyio.fail_after(5):
        while not condition():
            await anyio.sleep(0.005)


async def _run_while(
    supervisor: Supervisor,
    action: Callable[[], object],
    *,
    when: Callable[[], bool] | None = None,
) -> ShutdownTrigger:
    """Run the supervisor, perform ``action`` once ``when`` holds, return the trigger."""
    result: list[ShutdownTrigger] = []

    async def _run() -> None:
        result.append(await supervisor.run())

    with anyio.fail_after(5):
        async with anyio.create_task_group() as tg:
            tg.start_soon(_run)
            await _wait_until(when or (lambda: supervisor.state is SupervisorState.RUNNING))
            _ = action()

    return result[0]


class TestConstruction:
    def test_requires_tasks(self) -> None:
        with pytest.raises(SupervisorError, match="At least one task"):
            _ = Supervisor([], reporter=RecordingReporter())

    def test_rejects_duplicate_names(self) -> None:
        with pytest.raises(SupervisorError, match="Duplicate task name 'app'"):
            _ = Supervisor(
                [FakeTask("app"), FakeTask("app")], reporter=RecordingReporter()
            )

    def test_initial_state(self) -> None:
        supervisor = Supervisor([FakeTask("app")], reporter=RecordingReporter())

        assert supervisor.state is SupervisorState.INITIALIZING
        assert supervisor.shutting_down is False
        assert supervisor.trigger is None


class TestFirstExitWins:
    async def test_task_exit_terminates_the_rest(self) -> None:
        a, b, c = FakeTask("A"), FakeTask("B"), FakeTask("C")
        reporter = RecordingReporter()
        supervisor = Supervisor([a, b, c], reporter=reporter)

        trigger = await _run_while(supervisor, lambda: b.exit(137))

        assert trigger.kind is TriggerKind.TASK_EXIT
        assert trigger.task_name == "B"
        assert trigger.returncode == 137
        assert trigger.exit_status == 1
        assert "Process exited unexpectedly: B" in reporter.messages
        assert a.termination_requests == 1
        assert c.termination_requests == 1
        assert {t.state for t in (a, b, c)} == {TaskState.EXITED}
        assert supervisor.state is SupervisorState.TERMINATED

    async def test_concurrent_exits_cause_one_shutdown(self) -> None:
        a, b, c = FakeTask("A"), FakeTask("B"), FakeTask("C")
        reporter = RecordingReporter()
        supervisor = Supervisor([a, b, c], reporter=reporter)

        def _both_exit() -> None:
            a.exit(1)
            c.exit(2)

        trigger = await _run_while(supervisor, _both_exit)

        assert trigger.task_name == "A"
        triggers = [r for r in reporter.reports if r.kind is ReportKind.TRIGGER]
        assert len(triggers) == 1

    async def test_ready_report_names_port(self) -> None:
        task = FakeTask("app")
        reporter = RecordingReporter()
        supervisor = Supervisor([task], port=5000, reporter=reporter)

        _ = await _run_while(supervisor, lambda: task.exit(0))

        assert "Application ready for connections on port 5000." in reporter.messages
        assert reporter.messages[-1] == "Shutdown complete."

    async def test_get_status(self) -> None:
        task = FakeTask("app")
        supervisor = Supervisor([task], reporter=RecordingReporter())

        _ = await _run_while(supervisor, lambda: task.exit(0))

        assert supervisor.get_status() == {
            "app": {"name": "app", "state": "exited", "active": False}
        }


class TestStartup:
    async def test_spawn_failure_stops_startup(self) -> None:
        a, b, c = FakeTask("A", fail=True), FakeTask("B"), FakeTask("C")
        reporter = RecordingReporter()
        supervisor = Supervisor([a, b, c], reporter=reporter)

        with anyio.fail_after(5):
            trigger = await supervisor.run()

        assert trigger.kind is TriggerKind.SPAWN_FAILURE
        assert trigger.task_name == "A"
        assert trigger.exit_status == 1
        assert b.state is TaskState.SPAWNED
        assert c.state is TaskState.SPAWNED
        assert any(m.startswith("Failed to start process: A") for m in reporter.messages)

    async def test_later_spawn_failure_terminates_started_tasks(self) -> None:
        a, b = FakeTask("A"), FakeTask("B", fail=True)
        supervisor = Supervisor([a, b], reporter=RecordingReporter())

        with anyio.fail_after(5):
            trigger = await supervisor.run()

        assert trigger.task_name == "B"
        assert a.state is TaskState.EXITED

    async def test_tasks_start_in_order(self) -> None:
        tasks = [FakeTask("logs"), FakeTask("app"), FakeTask("web")]
        reporter = RecordingReporter()
        supervisor = Supervisor(tasks, reporter=reporter)

        _ = await _run_while(supervisor, lambda: tasks[0].exit(0))

        starting = [r.task_name for r in reporter.reports if r.kind is ReportKind.STARTING]
        assert starting == ["logs", "app", "web"]

    async def test_shutdown_cuts_settle_delay_short(self) -> None:
        a = FakeTask("A", settle_delay=30.0)
        b = FakeTask("B")
        supervisor = Supervisor([a, b], reporter=RecordingReporter())

        trigger = await _run_while(
            supervisor,
            supervisor.request_shutdown,
            when=lambda: a.state is TaskState.RUNNING,
        )

        assert trigger.kind is TriggerKind.SIGNAL
        assert b.state is TaskState.SPAWNED
        assert a.state is TaskState.EXITED


class TestShutdown:
    async def test_request_shutdown_records_signal(self) -> None:
        task = FakeTask("app")
        supervisor = Supervisor([task], reporter=RecordingReporter())

        trigger = await _run_while(supervisor, supervisor.request_shutdown)

        assert trigger.signum == signal.SIGTERM
        assert trigger.exit_status == 128 + signal.SIGTERM
        assert task.state is TaskState.EXITED

    async def test_second_request_is_ignored(self) -> None:
        task = FakeTask("app")
        supervisor = Supervisor([task], reporter=RecordingReporter())

        def _twice() -> None:
            assert supervisor.request_shutdown() is True
            assert supervisor.request_shutdown(signal.SIGINT) is False

        trigger = await _run_while(supervisor, _twice)

        assert trigger.signum == signal.SIGTERM

    async def test_grace_period_bounds_shutdown(self) -> None:
        stubborn = FakeTask("stubborn", exit_on_terminate=False)
        reporter = RecordingReporter()
        supervisor = Supervisor([stubborn], reporter=reporter, grace_period=0.1)

        with anyio.fail_after(2):
            _ = await _run_while(supervisor, supervisor.request_shutdown)

        assert len(reporter.errors) == 1
        error = reporter.errors[0]
        assert isinstance(error, ShutdownTimeoutError)
        assert error.task_names == ("stubborn",)
        assert stubborn.state is TaskState.TERMINATING


class TestSignals:
    async def test_sigterm_triggers_shutdown(self) -> None:
        task = FakeTask("app")
        supervisor = Supervisor(
            [task],
            reporter=RecordingReporter(),
            signal_policy=SignalPolicy(interactive=False),
        )

        trigger = await _run_while(
            supervisor, lambda: os.kill(os.getpid(), signal.SIGTERM)
        )

        assert trigger.kind is TriggerKind.SIGNAL
        assert trigger.signum == signal.SIGTERM
        assert trigger.message == "SIGTERM received, shutting down"

    async def test_sigint_redirected_when_interactive(self) -> None:
        task = FakeTask("app")
        reporter = RecordingReporter()
        supervisor = Supervisor(
            [task],
            reporter=reporter,
            signal_policy=SignalPolicy(interactive=True),
        )

        trigger = await _run_while(
            supervisor, lambda: os.kill(os.getpid(), signal.SIGINT)
        )

        assert trigger.signum == signal.SIGTERM
        assert "SIGINT received, initiating shutdown..." in reporter.messages

    async def test_sigint_ignored_when_not_interactive(self) -> None:
        task = FakeTask("app")
        supervisor = Supervisor(
            [task],
            reporter=RecordingReporter(),
            signal_policy=SignalPolicy(interactive=False),
        )

        async def _interrupt_then_exit() -> None:
            os.kill(os.getpid(), signal.SIGINT)
            await anyio.sleep(0.1)
            assert supervisor.shutting_down is False
            task.exit(0)

        result: list[ShutdownTrigger] = []

        async def _run() -> None:
            result.append(await supervisor.run())

        with anyio.fail_after(5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(_run)
                await _wait_until(lambda: supervisor.state is SupervisorState.RUNNING)
                await _interrupt_then_exit()

        assert result[0].kind is TriggerKind.TASK_EXIT
