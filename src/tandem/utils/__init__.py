"""Shared utilities."""

from ._logging import DEBUG_ENV_VAR, LogFormatType, create_supervisor_logger

__all__ = [
    "DEBUG_ENV_VAR",
    "LogFormatType",
    "create_supervisor_logger",
]
