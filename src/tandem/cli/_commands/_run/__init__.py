# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
"""tandem run command - launches and supervises the process group."""

import sys
from pathlib import Path
from typing import Annotated, Any

from cyclopts import App, Parameter

from tandem.cli._commands._shared import load_config_or_exit

app = App(
    name="run",
    help="Run the app server and front end until either of them exits",
    help_on_error=True,
)


@app.default
def run(
    *,
    config: Annotated[
        Path | None, Parameter(name="--config", help="Path to config file")
    ] = None,
    port: Annotated[
        int | None,
        Parameter(help="Port the front end serves on (exported as PORT)."),
    ] = None,
    grace_period: Annotated[
        float | None,
        Parameter(help="Seconds to wait for processes to stop on shutdown."),
    ] = None,
) -> None:
    """Run the supervised process group.

    Starts the log aggregator (if log paths are configured), the app
    server and the front end, in that order. As soon as any one of them
    exits, or SIGTERM arrives, all of them are asked to stop and tandem
    exits with a non-zero status.

    On a terminal, Ctrl-C shuts down the same way as SIGTERM; otherwise
    SIGINT is ignored.
    """
    from tandem.supervisor import ConsoleReporter, SignalPolicy, Supervisor
    from tandem.utils import create_supervisor_logger

    from ._runner import run_supervisor
    from ._tasks import build_tasks

    cli_overrides: dict[str, Any] = {}
    if port is not None:
        cli_overrides.setdefault("supervisor", {})["port"] = port
    if grace_period is not None:
        cli_overrides.setdefault("supervisor", {})["grace_period"] = grace_period

    loaded = load_config_or_exit(config, cli_overrides or None)

    logger = create_supervisor_logger(
        level=loaded.logging.level.value,
        log_format=loaded.logging.format.value,  # type: ignore[arg-type]
        log_file=loaded.logging.file,
    )

    supervisor = Supervisor(
        build_tasks(loaded, logger=logger),
        port=loaded.supervisor.port,
        reporter=ConsoleReporter(),
        signal_policy=SignalPolicy.for_stream(sys.stdout),
        grace_period=loaded.supervisor.grace_period,
        logger=logger,
    )
    run_supervisor(supervisor)
