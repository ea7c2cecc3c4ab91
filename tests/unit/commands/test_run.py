"""Tests for the run command's task construction and exit handling."""

from __future__ import annotations

import signal
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from tandem.cli._commands._run._runner import exit_for_trigger
from tandem.cli._commands._run._tasks import build_tasks
from tandem.config import Config
from tandem.supervisor import ExitEvent, LogAggregatorTask, ShutdownTrigger

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


class TestBuildTasks:
    def test_without_log_paths(self) -> None:
        tasks = build_tasks(Config.from_dict({}))

        assert [task.name for task in tasks] == ["app", "web"]

    def test_aggregator_comes_first(self, tmp_path: Path) -> None:
        config = Config.from_dict({"logs": {"paths": [str(tmp_path / "fpm.log")]}})

        tasks = build_tasks(config)

        assert [task.name for task in tasks] == ["logs", "app", "web"]
        aggregator = tasks[0]
        assert isinstance(aggregator, LogAggregatorTask)
        assert aggregator.paths == (tmp_path / "fpm.log",)

    def test_port_exported_to_processes(self) -> None:
        config = Config.from_dict({"supervisor": {"port": 5000}})

        app, web = build_tasks(config)

        assert app.spec.env["PORT"] == "5000"
        assert web.spec.env["PORT"] == "5000"

    def test_settle_delay_from_config(self) -> None:
        app, web = build_tasks(Config.from_dict({}))

        assert app.settle_delay == 1.0
        assert web.settle_delay == 0.0


class TestExitForTrigger:
    def test_task_exit_exits_one(self) -> None:
        trigger = ShutdownTrigger.task_exit(ExitEvent(task_name="web", returncode=0))

        with pytest.raises(SystemExit) as exc_info:
            exit_for_trigger(trigger)

        assert exc_info.value.code == 1

    def test_signal_is_reraised(self, mocker: MockerFixture) -> None:
        reraise = mocker.patch("tandem.cli._commands._run._runner.reraise_signal")
        trigger = ShutdownTrigger.from_signal(signal.SIGTERM)

        with pytest.raises(SystemExit) as exc_info:
            exit_for_trigger(trigger)

        reraise.assert_called_once_with(signal.SIGTERM)
        assert exc_info.value.code == 128 + signal.SIGTERM
