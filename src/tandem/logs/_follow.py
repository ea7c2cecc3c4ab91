# ruff: noqa: TC003
"""Follow stage of the log pipeline.

Tails any number of files from their current end, the way ``tail -F -n 0``
does: only content appended after the stage starts is forwarded, files
that do not exist yet are picked up when they appear, and truncated or
replaced (rotated) files are re-read from the start.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

# Polling interval in seconds
DEFAULT_POLL_INTERVAL = 0.25

_READ_CHUNK_SIZE = 64 * 1024


@dataclass(slots=True)
class FollowedFile:
    """Read position for a single followed file.

    Attributes:
        path: The file being followed.
        position: Byte offset of the next unread byte.
        inode: Inode of the file when it was last opened, if it existed.
        pending: Bytes read after the last newline, held until the line
            is complete.
    """

    path: Path
    position: int = 0
    inode: int | None = None
    pending: bytes = b""


class LogFollower:
    """Polls a set of files and returns complete lines appended to them.

    Lines are emitted whole or not at all; a line that is still being
    written is held back until its newline arrives, or until ``flush``
    is called.
    """

    def __init__(
        self,
        paths: list[Path],
        start_offsets: Mapping[Path, int] | None = None,
    ) -> None:
        """Initialize the follower, positioned at the end of each file.

        Args:
            paths: Files to follow. Missing files are followed from their
                start once they appear.
            start_offsets: Byte offsets to resume from instead of the
                current end, for files whose size was recorded before this
                follower existed. An offset past the current end means the
                file was truncated in between, and it is read from the start.
        """
        offsets = start_offsets or {}
        self.files: list[FollowedFile] = [FollowedFile(path=path) for path in paths]
        for followed in self.files:
            try:
                stat = followed.path.stat()
            except FileNotFoundError:
                continue
            offset = offsets.get(followed.path, stat.st_size)
            followed.position = offset if offset <= stat.st_size else 0
            followed.inode = stat.st_ino

    def poll(self) -> list[bytes]:
        """Read whatever has been appended since the last poll.

        Returns:
            Complete lines, each ending in a newline, in file order.
        """
        lines: list[bytes] = []
        for followed in self.files:
            lines.extend(_read_new_lines(followed))
        return lines

    def flush(self) -> list[bytes]:
        """Return held-back partial lines, newline-terminated.

        Returns:
            One line per file that had a partial line pending.
        """
        lines: list[bytes] = []
        for followed in self.files:
            if followed.pending:
                lines.append(followed.pending + b"\n")
                followed.pending = b""
        return lines


def _read_new_lines(followed: FollowedFile) -> list[bytes]:
    """Read new content of one file and split off complete lines.

    Args:
        followed: File state (mutated).

    Returns:
        Complete lines read from the file.
    """
    try:
        stat = followed.path.stat()
    except FileNotFoundError:
        return []

    # Replaced (rotated) or truncated: start over from the beginning
    if followed.inode is not None and stat.st_ino != followed.inode:
        followed.position = 0
        followed.pending = b""
    elif stat.st_size < followed.position:
        followed.position = 0
        followed.pending = b""
    followed.inode = stat.st_ino

    if stat.st_size <= followed.position:
        return []

    try:
        with followed.path.open("rb") as f:
            _ = f.seek(followed.position)
            data = _read_available(f)
    except OSError:
        return []

    followed.position += len(data)
    buffer = followed.pending + data
    complete, newline, rest = buffer.rpartition(b"\n")
    if not newline:
        followed.pending = buffer
        return []

    followed.pending = rest
    return [line + b"\n" for line in complete.split(b"\n")]


def _read_available(f: BinaryIO) -> bytes:
    chunks: list[bytes] = []
    while chunk := f.read(_READ_CHUNK_SIZE):
        chunks.append(chunk)
    return b"".join(chunks)


def follow_files(
    paths: list[Path],
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    should_stop: Callable[[], bool] = lambda: False,
    sink: BinaryIO | None = None,
    start_offsets: Mapping[Path, int] | None = None,
) -> None:
    """Forward lines appended to ``paths`` until ``should_stop`` says so.

    On stop, any partial lines are flushed so nothing read is lost.

    Args:
        paths: Files to follow.
        poll_interval: Seconds to sleep between polls.
        should_stop: Checked before every poll.
        sink: Binary output stream. Defaults to stdout.
        start_offsets: Offsets to resume from, see LogFollower.
    """
    out = sink if sink is not None else sys.stdout.buffer
    follower = LogFollower(paths, start_offsets)

    while not should_stop():
        lines = follower.poll()
        if lines:
            _ = out.write(b"".join(lines))
            out.flush()
        else:
            time.sleep(poll_interval)

    # One last look for anything written just before the stop
    remaining = follower.poll() + follower.flush()
    if remaining:
        _ = out.write(b"".join(remaining))
        out.flush()


def format_start_offset(path: Path, offset: int) -> str:
    """Format a ``PATH=OFFSET`` argument for the follow stage."""
    return f"{path}={offset}"


def parse_start_offset(value: str) -> tuple[Path, int]:
    """Parse a ``PATH=OFFSET`` argument.

    The offset follows the last ``=``, so paths may contain ``=`` too.

    Args:
        value: The argument.

    Returns:
        The path and its byte offset.

    Raises:
        ValueError: If the value has no path or no non-negative offset.
    """
    path_text, separator, offset_text = value.rpartition("=")
    if not separator or not path_text or not offset_text.isdigit():
        msg = f"Expected PATH=OFFSET, got {value!r}"
        raise ValueError(msg)
    return Path(path_text), int(offset_text)
