"""Supervisor package for running a group of processes that live and die together.

This package starts a fixed, ordered set of child processes, watches them
concurrently, and tears the whole group down as soon as any one of them
exits or a termination signal arrives.

Key Components:
    - LaunchSpec: How to start one child process
    - TaskState: Task lifecycle enumeration
    - ExitEvent: "This task's process has terminated" notification
    - ExitChannel: First-exit-wins notification channel
    - Task: Supervision of a single child process
    - LogAggregatorTask: Supervision of the follow | transform log pipeline
    - SignalPolicy: Terminal-dependent interrupt handling
    - ShutdownTrigger: What caused shutdown, and the resulting exit status
    - Reporter / ConsoleReporter: Human-readable narration
    - Supervisor: The group coordinator

Example:
    >>> from tandem.supervisor import LaunchSpec, Supervisor, Task
    >>> tasks = [
    ...     Task(LaunchSpec(name="app", command=("php-fpm", "-F"), settle_delay=1.0)),
    ...     Task(LaunchSpec(name="web", command=("nginx", "-g", "daemon off;"))),
    ... ]
    >>> trigger = await Supervisor(tasks).run()  # Blocks until shutdown
"""

from ._aggregator import LogAggregatorTask, prepare_log_paths
from ._channel import ExitChannel
from ._models import (
    ExitEvent,
    LaunchSpec,
    Report,
    ReportKind,
    ShutdownTrigger,
    SupervisorState,
    TaskState,
    TriggerKind,
)
from ._output import ConsoleReporter, RecordingReporter
from ._protocol import Reporter, TaskProtocol
from ._signals import ShutdownLatch, SignalAction, SignalPolicy, reraise_signal
from ._supervisor import DEFAULT_GRACE_PERIOD, Supervisor
from ._task import Task

__all__ = [
    "DEFAULT_GRACE_PERIOD",
    "ConsoleReporter",
    "ExitChannel",
    "ExitEvent",
    "LaunchSpec",
    "LogAggregatorTask",
    "RecordingReporter",
    "Report",
    "ReportKind",
    "Reporter",
    "ShutdownLatch",
    "ShutdownTrigger",
    "SignalAction",
    "SignalPolicy",
    "Supervisor",
    "SupervisorState",
    "Task",
    "TaskProtocol",
    "TaskState",
    "TriggerKind",
    "prepare_log_paths",
    "reraise_signal",
]
