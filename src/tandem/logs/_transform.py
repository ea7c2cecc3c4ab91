"""Transform stage of the log pipeline.

PHP-FPM decorates everything a worker writes to stdout/stderr:

    [18-Oct-2026 10:15:02] WARNING: [pool www] child 42 said into stderr: "message"

and, when the message exceeds its log limit, cuts it off with a trailing
``...`` instead of the closing quote. This stage strips that framing so
only the message is forwarded, keeping the truncation marker.
"""

from __future__ import annotations

import re
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import TextIO

TRUNCATION_MARKER = "..."

_FPM_CHILD_SAID = re.compile(
    r"^\[[^\]]+\] WARNING: \[pool [^\]]+\] child \d+ said into std(?:out|err): "
    r'"(?P<message>.*?)(?P<end>"|\.\.\.)$'
)


def unwrap_line(line: str) -> str:
    """Strip PHP-FPM worker-output framing from a single line.

    Args:
        line: A log line, without its trailing newline.

    Returns:
        The wrapped message, with ``...`` kept if it was truncated, or the
        line unchanged if it is not FPM worker output.
    """
    match = _FPM_CHILD_SAID.match(line)
    if match is None:
        return line

    message = match.group("message")
    if match.group("end") == TRUNCATION_MARKER:
        return message + TRUNCATION_MARKER
    return message


def transform_lines(lines: Iterable[str]) -> Iterable[str]:
    """Unwrap each line of a stream.

    Args:
        lines: Lines, with or without trailing newlines.

    Yields:
        Unwrapped lines, each terminated by a newline.
    """
    for raw_line in lines:
        yield unwrap_line(raw_line.rstrip("\r\n")) + "\n"


def run_transform(
    source: TextIO | None = None,
    sink: TextIO | None = None,
) -> None:
    """Copy ``source`` to ``sink`` line by line, unwrapping as it goes.

    Each line is flushed as soon as it is written so nothing sits in a
    buffer when the stage is asked to stop.

    Args:
        source: Input stream. Defaults to stdin.
        sink: Output stream. Defaults to stdout.
    """
    source = source or sys.stdin
    sink = sink or sys.stdout

    for line in transform_lines(source):
        _ = sink.write(line)
        sink.flush()
