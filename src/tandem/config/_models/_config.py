# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration container with typed access.

This module provides the main Config class that serves as the primary
interface for accessing tandem configuration values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tandem.config._defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_FILENAME
from tandem.config._loader import (
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
)
from tandem.config._models._common import ConfigSourceName
from tandem.config._models._logging import LoggingConfig
from tandem.config._models._sections import LaunchConfig, LogsConfig, SupervisorSettings
from tandem.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Self

PORT_ENV_VAR = "PORT"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A configuration source that contributed values.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for non-file sources.
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    values: dict[str, Any]


class Config(BaseModel):
    """Resolved tandem configuration.

    Use ``from_dict``, ``from_file`` or ``load`` rather than the constructor:
    they merge defaults in and turn validation failures into
    ConfigValidationError.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    supervisor: SupervisorSettings = Field(default_factory=SupervisorSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    logs: LogsConfig = Field(default_factory=LogsConfig)
    app_server: LaunchConfig
    front_end: LaunchConfig

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary, over the defaults.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Validated configuration.

        Raises:
            ConfigValidationError: If validation fails.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            raise _to_config_error(e, merged) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file, over the defaults.

        Args:
            path: Path to the TOML config file.

        Returns:
            Validated configuration.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        return cls.from_dict(read_toml_file(path))

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged lowest to highest precedence: defaults, the
        config file, ``TANDEM_*`` environment variables, ``PORT`` (only if
        no higher source set ``supervisor.port``), then CLI overrides.

        Args:
            config_path: Explicit config file, which must exist. If None,
                ``tandem.toml`` in the working directory is used if present.
            environ: Environment to read. Defaults to ``os.environ``.
            cli_overrides: Values from command-line flags.

        Returns:
            Validated configuration.

        Raises:
            FileNotFoundError: If an explicit ``config_path`` does not exist.
            ConfigLoadError: If the config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        environ = os.environ if environ is None else environ
        merged: dict[str, Any] = {}
        for source in reversed(discover_sources(config_path, environ, cli_overrides)):
            merged = deep_merge(merged, source.values)
        return cls.from_dict(merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        return self.model_dump(mode="json")

    def to_toml(self) -> str:
        """Convert configuration to a TOML string."""
        return tomli_w.dumps(self.to_dict())


def discover_sources(
    config_path: Path | None,
    environ: Mapping[str, str],
    cli_overrides: dict[str, Any] | None = None,
) -> list[ConfigSource]:
    """Collect the non-default configuration sources.

    Args:
        config_path: Explicit config file, or None to look for the default.
        environ: Environment to read.
        cli_overrides: Values from command-line flags.

    Returns:
        Sources in highest-to-lowest precedence order.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
        ConfigLoadError: If the config file cannot be parsed.
    """
    sources: list[ConfigSource] = []

    if cli_overrides:
        sources.append(ConfigSource(ConfigSourceName.CLI, None, cli_overrides))

    env_values = parse_env_vars(environ)

    file_values: dict[str, Any] = {}
    file_path = config_path if config_path is not None else Path(DEFAULT_CONFIG_FILENAME)
    if config_path is not None or file_path.is_file():
        file_values = read_toml_file(file_path)

    port_set = _sets_port(env_values) or _sets_port(file_values)
    if not port_set and environ.get(PORT_ENV_VAR):
        port = parse_string_value(environ[PORT_ENV_VAR])
        sources.append(ConfigSource(ConfigSourceName.PORT, None, {"supervisor": {"port": port}}))

    if env_values:
        sources.append(ConfigSource(ConfigSourceName.ENV, None, env_values))
    if file_values:
        sources.append(ConfigSource(ConfigSourceName.FILE, file_path, file_values))

    return sources


def _sets_port(values: dict[str, Any]) -> bool:
    section = values.get("supervisor")
    return isinstance(section, dict) and "port" in section


def _to_config_error(error: ValidationError, data: dict[str, Any]) -> ConfigValidationError:
    """Convert the first pydantic error into a ConfigValidationError."""
    detail = error.errors()[0]
    key = ".".join(str(part) for part in detail["loc"])
    value = detail.get("input", _lookup(data, key))
    msg = f"Invalid configuration value for '{key}': {detail['msg']}"
    return ConfigValidationError(msg, key=key, value=value, expected=detail["msg"])


def _lookup(data: dict[str, Any], key: str) -> Any:
    current: Any = data
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current
