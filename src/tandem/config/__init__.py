"""tandem configuration.

This module provides the public API for tandem configuration: loading a
TOML file, applying environment and command-line overrides, and typed
access to the result.

Example:
    >>> from tandem.config import Config
    >>> config = Config.load()
    >>> config.supervisor.grace_period
    3.0
"""

from tandem.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_FILENAME
from ._loader import (
    ENV_PREFIX,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    PORT_ENV_VAR,
    Config,
    ConfigSource,
    ConfigSourceName,
    LaunchConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    LogsConfig,
    SupervisorSettings,
    discover_sources,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILENAME",
    "ENV_PREFIX",
    "PORT_ENV_VAR",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LaunchConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "LogsConfig",
    "SupervisorSettings",
    "deep_merge",
    "discover_sources",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "set_nested_key",
]
