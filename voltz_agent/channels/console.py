"""Console channel: chat with the agent from a terminal."""

from __future__ import annotations

import asyncio
from typing import Callable

from voltz_agent.bus.events import OutboundMessage
from voltz_agent.bus.queue import MessageBus
from voltz_agent.channels.base import BaseChannel
from voltz_agent.config.schema import ConsoleConfig
from voltz_agent.logging import get_logger

logger = get_logger(__name__)

EXIT_COMMANDS = {"exit", "quit", ":q"}


def _read_stdin() -> str | None:
    try:
        return input("> ")
    except EOFError:
        return None


class ConsoleChannel(BaseChannel):
    """
    Local stand-in for the chat transport.

    Every line read becomes a message from ``config.sender_address`` on
    ``config.conversation_id``; replies are written out and also queued so
    callers can await them with :meth:`next_reply`.
    """

    name = "console"

    def __init__(
        self,
        config: ConsoleConfig,
        bus: MessageBus,
        read_line: Callable[[], str | None] = _read_stdin,
        write: Callable[[str], None] = print,
        announce_start: bool = True,
    ):
        super().__init__(config, bus)
        self._read_line = read_line
        self._write = write
        self._announce_start = announce_start
        self._replies: asyncio.Queue[str] = asyncio.Queue()

    async def start(self) -> None:
        self._running = True
        if self._announce_start:
            await self.submit("", content_type="conversation_start")

        while self._running:
            line = await asyncio.to_thread(self._read_line)
            if line is None:
                break
            text = line.strip()
            if text.lower() in EXIT_COMMANDS:
                break
            if text:
                await self.submit(text)

        self._running = False

    async def stop(self) -> None:
        self._running = False

    async def submit(self, content: str, content_type: str = "text") -> None:
        """Inject a message as if the configured sender had typed it."""
        await self._handle_message(
            sender_address=self.config.sender_address,
            conversation_id=self.config.conversation_id,
            content=content,
            content_type=content_type,
        )

    async def send(self, msg: OutboundMessage) -> None:
        self._write(f"\n🤖 Agent: {msg.content}\n")
        await self._replies.put(msg.content)

    async def next_reply(self, timeout: float) -> str | None:
        """Wait up to *timeout* seconds for the next reply."""
        try:
            return await asyncio.wait_for(self._replies.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
