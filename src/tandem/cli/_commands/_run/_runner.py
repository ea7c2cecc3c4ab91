"""Runner for the run command.

This module runs the supervisor to completion on the anyio event loop and
turns its shutdown trigger into the process exit status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Never

import anyio

from tandem.supervisor import reraise_signal

if TYPE_CHECKING:
    from tandem.supervisor import ShutdownTrigger, Supervisor


def run_supervisor(supervisor: Supervisor) -> Never:
    """Run the supervisor and exit the way its trigger dictates.

    Args:
        supervisor: A supervisor that has not run yet.

    Raises:
        SystemExit: With status 1 after a task exit or spawn failure, or
            128 + signum if re-raising a received signal did not end the
            process.
    """
    trigger = anyio.run(supervisor.run)
    exit_for_trigger(trigger)


def exit_for_trigger(trigger: ShutdownTrigger) -> Never:
    """Exit the process according to a shutdown trigger.

    A signal-triggered shutdown re-raises the signal with its default
    disposition so the parent observes signal death.

    Args:
        trigger: What caused shutdown.

    Raises:
        SystemExit: With the trigger's exit status.
    """
    if trigger.signum is not None:
        reraise_signal(trigger.signum)
    raise SystemExit(trigger.exit_status)
