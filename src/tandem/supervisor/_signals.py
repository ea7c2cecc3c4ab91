"""Signal handling policy for the supervisor.

The policy depends on whether the supervisor runs attached to a terminal.
On a terminal, Ctrl-C is turned into a SIGTERM the supervisor sends to
itself, so there is exactly one shutdown path. Under another process
manager, SIGINT is ignored: the manager may deliver the same interrupt to
the whole process group and then follow up with its own SIGTERM.
"""

from __future__ import annotations

import os
import signal
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, final


class SignalAction(StrEnum):
    """What the supervisor does with a received signal.

    - SHUTDOWN: Enter shutdown, recording the signal as the trigger
    - REDIRECT: Send SIGTERM to ourselves instead of acting directly
    - IGNORE: Do nothing
    """

    SHUTDOWN = "shutdown"
    REDIRECT = "redirect"
    IGNORE = "ignore"


class _TtyStream(Protocol):
    def isatty(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class SignalPolicy:
    """Decides how interrupt and terminate signals are handled.

    Attributes:
        interactive: Whether standard output is attached to a terminal.
        terminate_signal: The signal that triggers shutdown.
        interrupt_signal: The keyboard-generated interrupt signal.
    """

    interactive: bool
    terminate_signal: int = signal.SIGTERM
    interrupt_signal: int = signal.SIGINT

    @classmethod
    def for_stream(cls, stream: _TtyStream) -> SignalPolicy:
        """Create a policy from the terminal attachment of a stream.

        Args:
            stream: Usually ``sys.stdout``.

        Returns:
            An interactive policy if the stream is a terminal.
        """
        try:
            interactive = stream.isatty()
        except ValueError:
            # Closed stream
            interactive = False
        return cls(interactive=interactive)

    @property
    def signals(self) -> tuple[int, ...]:
        """Return the signals the supervisor must subscribe to.

        The interrupt is always subscribed, even when it is ignored, so that
        it never reaches the default handler.
        """
        return (self.interrupt_signal, self.terminate_signal)

    def action_for(self, signum: int) -> SignalAction:
        """Return the action for a received signal.

        Args:
            signum: The received signal number.

        Returns:
            The action to take.
        """
        if signum == self.terminate_signal:
            return SignalAction.SHUTDOWN
        if signum == self.interrupt_signal:
            return SignalAction.REDIRECT if self.interactive else SignalAction.IGNORE
        return SignalAction.IGNORE

    def redirect(self) -> None:
        """Send the terminate signal to the current process."""
        os.kill(os.getpid(), self.terminate_signal)


@final
class ShutdownLatch:
    """One-way flag that can be tripped exactly once.

    Tripping is a compare-and-set under a lock, so it is safe from any
    thread as well as from concurrent tasks on the event loop.
    """

    __slots__ = ("_lock", "_tripped")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tripped = False

    @property
    def tripped(self) -> bool:
        """Return whether the latch has been tripped."""
        return self._tripped

    def trip(self) -> bool:
        """Trip the latch.

        Returns:
            True for the single caller that tripped it, False for everyone else.
        """
        with self._lock:
            if self._tripped:
                return False
            self._tripped = True
            return True


def reraise_signal(signum: int) -> None:
    """Die from ``signum`` using its default disposition.

    Lets a parent process manager observe signal death instead of a
    generic failure code. Returns only if the signal did not terminate
    the process.

    Args:
        signum: The signal to re-raise.
    """
    signal.signal(signum, signal.SIG_DFL)
    os.kill(os.getpid(), signum)
