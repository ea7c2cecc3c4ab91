# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
"""Log pipeline stage commands.

These are run by the log aggregator as its two child processes; they are
not meant to be invoked by hand, though nothing stops you.
"""

import os
import signal
import sys
from pathlib import Path
from types import FrameType
from typing import Annotated

from cyclopts import App, Parameter

from tandem.cli._commands._shared import ExitCode, exit_with_error
from tandem.logs import (
    DEFAULT_POLL_INTERVAL,
    follow_files,
    parse_start_offset,
    run_transform,
)

app = App(
    name="logs",
    help="Log pipeline stages used by the log aggregator",
    help_on_error=True,
)


class _StopFlag:
    """Set from a signal handler, polled by the follow loop."""

    def __init__(self) -> None:
        self.stopped = False

    def __call__(self) -> bool:
        return self.stopped

    def handle(self, signum: int, frame: FrameType | None) -> None:  # noqa: ARG002
        self.stopped = True


@app.command(name="follow")
def follow(
    *paths: Path,
    poll_interval: Annotated[
        float,
        Parameter(help="Seconds between checks for new lines."),
    ] = DEFAULT_POLL_INTERVAL,
    start_offset: Annotated[
        list[str] | None,
        Parameter(
            name="--start-offset",
            help="PATH=OFFSET: resume PATH from OFFSET instead of its end.",
        ),
    ] = None,
) -> None:
    """Write lines appended to PATHS to stdout.

    Starts at the current end of each file, or at the byte offset given
    with --start-offset. Runs until SIGTERM or SIGINT, then writes out any
    partial lines and exits 0.
    """
    try:
        start_offsets = dict(parse_start_offset(value) for value in start_offset or [])
    except ValueError as e:
        exit_with_error(str(e), ExitCode.FAILURE)

    stop = _StopFlag()
    signal.signal(signal.SIGTERM, stop.handle)
    signal.signal(signal.SIGINT, stop.handle)

    try:
        follow_files(
            list(paths),
            poll_interval=poll_interval,
            should_stop=stop,
            start_offsets=start_offsets,
        )
    except BrokenPipeError:
        # Transform stage is gone; keep the interpreter from flushing into it
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        raise SystemExit(0) from None


@app.command(name="transform")
def transform() -> None:
    """Copy stdin to stdout, unwrapping PHP-FPM worker output.

    Exits when stdin reaches end of file.
    """
    # Split on newlines only and pass undecodable bytes through untouched
    sys.stdin.reconfigure(newline="\n", errors="surrogateescape")  # pyright: ignore[reportAttributeAccessIssue]
    sys.stdout.reconfigure(errors="surrogateescape")  # pyright: ignore[reportAttributeAccessIssue]
    run_transform()
