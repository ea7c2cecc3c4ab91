"""Tests for tandem.supervisor._channel module."""

import anyio
import pytest

from tandem.supervisor import ExitChannel, ExitEvent


@pytest.mark.anyio
class TestExitChannel:
    async def test_receive_returns_first_event(self) -> None:
        channel = ExitChannel()
        channel.send(ExitEvent(task_name="b", returncode=1))
        channel.send(ExitEvent(task_name="a", returncode=0))

        event = await channel.receive()

        assert event == ExitEvent(task_name="b", returncode=1)

    async def test_receive_waits_for_sender(self) -> None:
        channel = ExitChannel()
        received: list[ExitEvent] = []

        async def _receive() -> None:
            received.append(await channel.receive())

        async with anyio.create_task_group() as tg:
            tg.start_soon(_receive)
            await anyio.sleep(0.01)
            assert received == []
            channel.send(ExitEvent(task_name="app"))

        assert received == [ExitEvent(task_name="app")]

    async def test_receive_twice_raises(self) -> None:
        channel = ExitChannel()
        channel.send(ExitEvent(task_name="a"))
        channel.send(ExitEvent(task_name="b"))
        _ = await channel.receive()

        with pytest.raises(RuntimeError, match="only be called once"):
            _ = await channel.receive()

    async def test_send_never_blocks(self) -> None:
        channel = ExitChannel()

        with anyio.fail_after(1):
            for i in range(1000):
                channel.send(ExitEvent(task_name=f"task-{i}"))

    async def test_send_after_close_is_discarded(self) -> None:
        channel = ExitChannel()
        channel.close()

        channel.send(ExitEvent(task_name="late"))

    async def test_drain_waits_for_every_named_task(self) -> None:
        channel = ExitChannel()
        channel.send(ExitEvent(task_name="web"))
        channel.send(ExitEvent(task_name="unrelated"))
        channel.send(ExitEvent(task_name="app"))

        with anyio.fail_after(1):
            await channel.drain(["app", "web"])

    async def test_drain_blocks_until_missing_task_reports(self) -> None:
        channel = ExitChannel()
        channel.send(ExitEvent(task_name="app"))

        with anyio.move_on_after(0.05) as scope:
            await channel.drain(["app", "web"])

        assert scope.cancelled_caught
