"""Supervisor, log and process configuration models."""

from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from tandem.supervisor import LaunchSpec


class SupervisorSettings(BaseModel):
    """Supervisor configuration section.

    Attributes:
        port: Port the front end serves on; exported to every child as PORT.
        grace_period: Seconds to wait for children to confirm termination.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    port: int = Field(default=8080, ge=1, le=65535)
    grace_period: float = Field(default=3.0, gt=0)


class LogsConfig(BaseModel):
    """Log aggregation configuration section.

    Attributes:
        paths: Log files to follow. No aggregator runs when empty.
        poll_interval: Seconds between checks for appended lines.
        drain_timeout: Seconds the pipeline gets to flush on shutdown.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    paths: tuple[Path, ...] = ()
    poll_interval: float = Field(default=0.25, gt=0)
    drain_timeout: float = Field(default=1.0, ge=0)


class LaunchConfig(BaseModel):
    """Configuration of one supervised process.

    Attributes:
        command: Command and arguments.
        env: Extra environment variables.
        cwd: Working directory (empty means the supervisor's).
        settle_delay: Seconds to wait after starting, before the next process.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    command: tuple[str, ...] = Field(min_length=1)
    env: dict[str, str] = Field(default_factory=dict)
    cwd: str = ""
    settle_delay: float = Field(default=0.0, ge=0)

    def to_launch_spec(self, name: str, extra_env: dict[str, str] | None = None) -> LaunchSpec:
        """Build the LaunchSpec for this process.

        Args:
            name: Task name.
            extra_env: Variables added on top of ``env`` (e.g. PORT).

        Returns:
            The launch spec.
        """
        return LaunchSpec(
            name=name,
            command=self.command,
            env={**self.env, **(extra_env or {})},
            cwd=Path(self.cwd) if self.cwd else None,
            settle_delay=self.settle_delay,
        )
