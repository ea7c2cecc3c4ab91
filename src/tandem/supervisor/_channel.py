"""Exit notification channel shared by tasks and the supervisor.

Every task reports the termination of its process here exactly once. The
supervisor only acts on the first report; later reports arrive while the
group is already being torn down and must never block their sender.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, final

import anyio

from ._models import ExitEvent

if TYPE_CHECKING:
    from collections.abc import Iterable

    from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream


@final
class ExitChannel:
    """Multi-producer, single-consumer channel of exit events.

    Backed by an anyio memory object stream with an unbounded buffer, so
    ``send`` never waits for the receiver.
    """

    __slots__ = ("_receive_stream", "_received", "_send_stream")

    def __init__(self) -> None:
        send_stream, receive_stream = anyio.create_memory_object_stream[ExitEvent](
            max_buffer_size=math.inf
        )
        self._send_stream: MemoryObjectSendStream[ExitEvent] = send_stream
        self._receive_stream: MemoryObjectReceiveStream[ExitEvent] = receive_stream
        self._received = False

    def send(self, event: ExitEvent) -> None:
        """Report that a task's process has terminated.

        Never blocks and never raises. Events sent after the channel has
        been closed are discarded.

        Args:
            event: The exit event to report.
        """
        try:
            self._send_stream.send_nowait(event)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            # Receiver is gone: nobody is waiting for this event anymore
            return

    async def receive(self) -> ExitEvent:
        """Wait for and return the first exit event.

        Returns:
            The first event sent on this channel.

        Raises:
            RuntimeError: If called more than once.
        """
        if self._received:
            msg = "ExitChannel.receive() may only be called once"
            raise RuntimeError(msg)
        self._received = True
        return await self._receive_stream.receive()

    async def drain(self, task_names: Iterable[str]) -> None:
        """Consume events until every named task has reported.

        Events for tasks outside ``task_names`` (for example tasks that
        exited before shutdown began) are consumed and ignored.

        Args:
            task_names: Names of the tasks whose exit must be observed.
        """
        pending = set(task_names)
        while pending:
            event = await self._receive_stream.receive()
            pending.discard(event.task_name)

    def close(self) -> None:
        """Release both ends of the channel."""
        self._send_stream.close()
        self._receive_stream.close()
