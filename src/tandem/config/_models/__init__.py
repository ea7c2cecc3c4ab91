"""Configuration models."""

from ._common import ConfigSourceName, LogFormat, LogLevel
from ._config import PORT_ENV_VAR, Config, ConfigSource, discover_sources
from ._logging import LoggingConfig
from ._sections import LaunchConfig, LogsConfig, SupervisorSettings

__all__ = [
    "PORT_ENV_VAR",
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "LaunchConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "LogsConfig",
    "SupervisorSettings",
    "discover_sources",
]
