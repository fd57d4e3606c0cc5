import asyncio
from unittest.mock import patch

import pytest

from voltz_agent.bus.events import OutboundMessage
from voltz_agent.bus.queue import MessageBus
from voltz_agent.channels.base import BaseChannel
from voltz_agent.channels.console import ConsoleChannel
from voltz_agent.channels.manager import ChannelManager
from voltz_agent.config.schema import ConsoleConfig


class _FakeChannel(BaseChannel):
    name = "fake"

    def __init__(self, config, bus):
        super().__init__(config, bus)
        self.sent: list[OutboundMessage] = []

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False

    async def send(self, msg: OutboundMessage) -> None:
        self.sent.append(msg)


class _BrokenChannel(_FakeChannel):
    name = "broken"

    async def send(self, msg: OutboundMessage) -> None:
        raise ConnectionError("transport down")


@pytest.mark.asyncio
async def test_dispatch_routes_by_channel_name() -> None:
    bus = MessageBus()
    manager = ChannelManager(bus)
    fake = _FakeChannel(None, bus)
    manager.register(fake)

    task = asyncio.create_task(manager._dispatch_outbound())
    try:
        await bus.publish_outbound(OutboundMessage(channel="fake", conversation_id="c1", content="one"))
        await bus.publish_outbound(OutboundMessage(channel="nowhere", conversation_id="c1", content="lost"))
        await bus.publish_outbound(OutboundMessage(channel="fake", conversation_id="c1", content="two"))
        await asyncio.sleep(0.05)
    finally:
        task.cancel()
        await task

    assert [m.content for m in fake.sent] == ["one", "two"]


@pytest.mark.asyncio
async def test_dispatch_survives_send_errors() -> None:
    bus = MessageBus()
    manager = ChannelManager(bus)
    broken = _BrokenChannel(None, bus)
    fake = _FakeChannel(None, bus)
    manager.register(broken)
    manager.register(fake)

    manager.start_dispatcher()
    try:
        await bus.publish_outbound(OutboundMessage(channel="broken", conversation_id="c1", content="x"))
        await bus.publish_outbound(OutboundMessage(channel="fake", conversation_id="c1", content="y"))
        await asyncio.sleep(0.05)
    finally:
        await manager.stop_all()

    assert [m.content for m in fake.sent] == ["y"]
    assert manager.get_status() == {
        "broken": {"enabled": True, "running": False},
        "fake": {"enabled": True, "running": False},
    }


@pytest.mark.asyncio
async def test_base_channel_publishes_inbound_with_audit() -> None:
    bus = MessageBus()
    ch = _FakeChannel(None, bus)
    with patch("voltz_agent.channels.base.audit_log") as mock_audit:
        await ch._handle_message("0xabc", "conv-9", "hello")
        assert mock_audit.info.call_args[0][0] == "channel_message_received"

    msg = bus.inbound.get_nowait()
    assert msg.channel == "fake"
    assert msg.sender_address == "0xabc"
    assert msg.conversation_id == "conv-9"
    assert msg.content_type == "text"


@pytest.mark.asyncio
async def test_console_channel_reads_lines_until_exit() -> None:
    bus = MessageBus()
    lines = iter(["hello", "   ", "matches", "exit", "never"])
    written: list[str] = []
    ch = ConsoleChannel(
        ConsoleConfig(sender_address="0xme", conversation_id="local"),
        bus,
        read_line=lambda: next(lines),
        write=written.append,
    )

    await ch.start()

    received = []
    while not bus.inbound.empty():
        received.append(bus.inbound.get_nowait())
    assert [m.content_type for m in received] == ["conversation_start", "text", "text"]
    assert [m.content for m in received[1:]] == ["hello", "matches"]
    assert all(m.sender_address == "0xme" and m.conversation_id == "local" for m in received)
    assert ch.is_running is False


@pytest.mark.asyncio
async def test_console_channel_stops_on_eof_and_queues_replies() -> None:
    bus = MessageBus()
    written: list[str] = []
    ch = ConsoleChannel(ConsoleConfig(), bus, read_line=lambda: None, write=written.append, announce_start=False)

    await ch.start()
    assert bus.inbound.empty()

    await ch.send(OutboundMessage(channel="console", conversation_id="console", content="hi there"))
    assert await ch.next_reply(timeout=0.5) == "hi there"
    assert "hi there" in written[0]
    assert await ch.next_reply(timeout=0.01) is None
