"""Task construction for the run command.

This module turns the resolved configuration into the ordered list of
supervised tasks: the log aggregator (when there are logs to follow), the
application server, then the front end.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tandem.config import PORT_ENV_VAR
from tandem.supervisor import LogAggregatorTask, Task

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from tandem.config import Config

LOGS_TASK_NAME = "logs"
APP_SERVER_TASK_NAME = "app"
FRONT_END_TASK_NAME = "web"


def build_tasks(
    config: Config,
    *,
    logger: FilteringBoundLogger | None = None,
) -> list[Task]:
    """Build the tasks to supervise, in startup order.

    Args:
        config: Resolved configuration.
        logger: Structured logger passed to every task.

    Returns:
        The tasks, aggregator first so no early log line is missed.
    """
    tasks: list[Task] = []

    if config.logs.paths:
        tasks.append(
            LogAggregatorTask(
                config.logs.paths,
                name=LOGS_TASK_NAME,
                poll_interval=config.logs.poll_interval,
                drain_timeout=config.logs.drain_timeout,
                logger=logger,
            )
        )

    port_env = {PORT_ENV_VAR: str(config.supervisor.port)}
    tasks.append(
        Task(
            config.app_server.to_launch_spec(APP_SERVER_TASK_NAME, port_env),
            logger=logger,
        )
    )
    tasks.append(
        Task(
            config.front_end.to_launch_spec(FRONT_END_TASK_NAME, port_env),
            logger=logger,
        )
    )
    return tasks
