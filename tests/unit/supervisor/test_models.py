"""Tests for tandem.supervisor._models module."""

import signal
from dataclasses import FrozenInstanceError

import pytest

from tandem.supervisor import ExitEvent, LaunchSpec, ShutdownTrigger, TriggerKind


class TestLaunchSpec:
    def test_default_values(self) -> None:
        spec = LaunchSpec(name="app", command=("php-fpm",))
        assert spec.env == {}
        assert spec.cwd is None
        assert spec.settle_delay == 0.0

    def test_frozen(self) -> None:
        spec = LaunchSpec(name="app", command=("php-fpm",))
        with pytest.raises(FrozenInstanceError):
            spec.name = "web"  # pyright: ignore[reportAttributeAccessIssue]


class TestShutdownTrigger:
    def test_task_exit(self) -> None:
        trigger = ShutdownTrigger.task_exit(ExitEvent(task_name="web", returncode=-9))

        assert trigger.kind is TriggerKind.TASK_EXIT
        assert trigger.message == "Process exited unexpectedly: web"
        assert trigger.task_name == "web"
        assert trigger.returncode == -9
        assert trigger.exit_status == 1

    def test_spawn_failure(self) -> None:
        trigger = ShutdownTrigger.spawn_failure("app", "No such file or directory")

        assert trigger.kind is TriggerKind.SPAWN_FAILURE
        assert trigger.message == "Failed to start process: app (No such file or directory)"
        assert trigger.exit_status == 1

    def test_from_signal(self) -> None:
        trigger = ShutdownTrigger.from_signal(signal.SIGTERM)

        assert trigger.kind is TriggerKind.SIGNAL
        assert trigger.message == "SIGTERM received, shutting down"
        assert trigger.signum == signal.SIGTERM
        assert trigger.task_name is None

    def test_signal_exit_status_follows_shell_convention(self) -> None:
        trigger = ShutdownTrigger.from_signal(signal.SIGTERM)

        assert trigger.exit_status == 128 + signal.SIGTERM
