"""Log pipeline stages.

The log aggregator runs two processes joined by a pipe:
    - follow: tails log files and writes complete lines
    - transform: strips PHP-FPM worker-output framing from each line
"""

from ._follow import (
    DEFAULT_POLL_INTERVAL,
    FollowedFile,
    LogFollower,
    follow_files,
    format_start_offset,
    parse_start_offset,
)
from ._transform import TRUNCATION_MARKER, run_transform, transform_lines, unwrap_line

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "TRUNCATION_MARKER",
    "FollowedFile",
    "LogFollower",
    "follow_files",
    "format_start_offset",
    "parse_start_offset",
    "run_transform",
    "transform_lines",
    "unwrap_line",
]
