"""Log aggregator task: a two-stage follow | transform pipeline.

The follow stage tails a set of log files and writes complete lines to a
pipe; the transform stage unwraps PHP-FPM worker output and writes the
result to the supervisor's diagnostic stream. Each stage is its own OS
process, so termination has to reach both of them explicitly.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

import anyio
import anyio.abc

from tandem.logs import DEFAULT_POLL_INTERVAL, format_start_offset

from ._models import LaunchSpec
from ._task import Task, build_env

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from structlog.typing import FilteringBoundLogger

# The supervisor's own stderr
_STDERR_FILENO = 2

DEFAULT_DRAIN_TIMEOUT = 1.0

# Seconds to wait for an orphaned follow stage to exit after a failed start
_REAP_TIMEOUT = 5.0


def prepare_log_paths(paths: Iterable[Path]) -> dict[Path, int]:
    """Create every log file that does not exist yet, empty.

    Args:
        paths: The log files to be followed.

    Returns:
        The size of each file once it exists. The follow stage starts
        from these offsets, so lines written while it is still starting
        up are not skipped.
    """
    offsets: dict[Path, int] = {}
    for path in paths:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        offsets[path] = path.stat().st_size
    return offsets


class LogAggregatorTask(Task):
    """Follows log files and forwards reformatted lines to stderr.

    The monitored process is the last (transform) stage: lines are only
    fully written out once it has finished.
    """

    def __init__(  # noqa: PLR0913
        self,
        paths: Sequence[Path],
        *,
        name: str = "logs",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
        output: int | IO[Any] | None = None,  # pyright: ignore[reportExplicitAny]
        python: str | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            paths: Log files to follow. Missing files are created on start.
            name: Task name.
            poll_interval: Seconds between checks for new content.
            drain_timeout: Seconds to let buffered lines flush through the
                transform stage before every live stage is signalled.
            output: Where transformed lines go. Defaults to the supervisor's
                stderr.
            python: Interpreter used to run the stages.
            logger: Structured logger.
        """
        self.paths: tuple[Path, ...] = tuple(Path(path) for path in paths)
        self.drain_timeout = drain_timeout
        self._output = output if output is not None else _STDERR_FILENO
        interpreter = python or sys.executable

        follow_command = (
            interpreter,
            "-m",
            "tandem",
            "logs",
            "follow",
            *(str(path) for path in self.paths),
            "--poll-interval",
            str(poll_interval),
        )
        super().__init__(LaunchSpec(name=name, command=follow_command), logger=logger)
        self.transform_spec = LaunchSpec(
            name=f"{name}-transform",
            command=(interpreter, "-m", "tandem", "logs", "transform"),
        )

    @property
    def stages(self) -> tuple[LaunchSpec, ...]:
        """Return the launch specs of the pipeline stages, in order."""
        return (self.spec, self.transform_spec)

    def follow_command(self, start_offsets: dict[Path, int]) -> tuple[str, ...]:
        """Return the follow stage command resuming from ``start_offsets``."""
        offset_args = (
            arg
            for path, offset in start_offsets.items()
            for arg in ("--start-offset", format_start_offset(path, offset))
        )
        return (*self.spec.command, *offset_args)

    async def _spawn(self) -> Sequence[anyio.abc.Process]:
        """Create the follow and transform processes joined by a pipe.

        Raises:
            OSError: If either process cannot be created. A follow stage
                that was already created is terminated and reaped first.
        """
        start_offsets = prepare_log_paths(self.paths)

        read_fd, write_fd = os.pipe()
        follow: anyio.abc.Process | None = None
        try:
            follow = await anyio.open_process(
                self.follow_command(start_offsets),
                env=build_env(self.spec),
                stdin=subprocess.DEVNULL,
                stdout=write_fd,
                stderr=None,
                start_new_session=True,
            )
            transform = await anyio.open_process(
                self.transform_spec.command,
                env=build_env(self.transform_spec),
                stdin=read_fd,
                stdout=self._output,
                stderr=None,
                start_new_session=True,
            )
        except OSError:
            if follow is not None:
                self._signal_processes([follow])
                with anyio.move_on_after(_REAP_TIMEOUT):
                    _ = await follow.wait()
            raise
        finally:
            # The children hold their own copies of the pipe ends
            os.close(read_fd)
            os.close(write_fd)

        self._logger.debug(
            "pipeline_started",
            follow_pid=follow.pid,
            transform_pid=transform.pid,
            paths=[str(path) for path in self.paths],
        )
        return [follow, transform]

    def request_termination(self) -> None:
        """Stop the follow stage, then make sure every stage goes away.

        The follow stage is signalled first so no more lines are read; the
        transform stage then sees end of input and exits once buffered
        lines are written. Stages still alive after the drain timeout are
        signalled individually.
        """
        if not self.is_running:
            return

        self._begin_termination()
        self._signal_processes(self._processes[:1])
        if self._task_group is not None:
            self._task_group.start_soon(
                self._terminate_stragglers, name=f"drain:{self.name}"
            )

    async def _terminate_stragglers(self) -> None:
        if self._exited is None:
            return
        with anyio.move_on_after(self.drain_timeout):
            await self._exited.wait()
        stragglers = self.live_processes
        if stragglers:
            self._logger.info(
                "signalling_pipeline_stages",
                pids=[process.pid for process in stragglers],
            )
            self._signal_processes(stragglers)
