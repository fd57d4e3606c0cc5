"""Agent loop: pulls inbound messages off the bus and runs the pipeline."""

from __future__ import annotations

import asyncio
from typing import Callable

from voltz_agent.agent.formatting import GENERIC_ERROR_TEXT
from voltz_agent.agent.handlers import CommandHandlers
from voltz_agent.agent.router import CommandRouter
from voltz_agent.backend.gateway import BackendGateway
from voltz_agent.bus.events import InboundMessage, OutboundMessage
from voltz_agent.bus.queue import MessageBus
from voltz_agent.logging import get_logger
from voltz_agent.middleware.chain import MiddlewareChain, MiddlewareContext
from voltz_agent.middleware.ratelimit import RateLimitStore
from voltz_agent.middleware.stages import default_stages, entry_stages

logger = get_logger(__name__)


class AgentLoop:
    """
    The message-processing engine.

    It:
    1. Receives messages from the bus, one at a time
    2. Runs them through the middleware chain
    3. Routes surviving text messages to a command handler
    4. Publishes replies back to the bus

    Messages are processed sequentially, so replies on a conversation keep
    the order in which its messages arrived.
    """

    def __init__(
        self,
        bus: MessageBus,
        gateway: BackendGateway,
        agent_address: str,
        rate_limiter: RateLimitStore | None = None,
        chain: MiddlewareChain | None = None,
        on_processed: Callable[[], None] | None = None,
    ):
        self.bus = bus
        self.gateway = gateway
        self.agent_address = agent_address
        self.rate_limiter = rate_limiter
        self.handlers = CommandHandlers(gateway)
        self.router = CommandRouter(self.handlers)
        self.chain = chain or MiddlewareChain(default_stages(rate_limiter, gateway))
        # Conversation starts carry no text: logged and rate limited, never filtered or routed.
        self.welcome_chain = MiddlewareChain(entry_stages(rate_limiter))
        self.on_processed = on_processed

        self._running = False
        self._stopped_event = asyncio.Event()

    def _make_context(self, msg: InboundMessage) -> MiddlewareContext:
        async def reply(text: str) -> None:
            await self.bus.publish_outbound(OutboundMessage(
                channel=msg.channel,
                conversation_id=msg.conversation_id,
                content=text,
            ))

        return MiddlewareContext(
            sender_address=msg.sender_address,
            content=msg.content,
            conversation_id=msg.conversation_id,
            agent_address=self.agent_address,
            reply=reply,
        )

    async def _process_message(self, msg: InboundMessage) -> None:
        ctx = self._make_context(msg)

        if msg.content_type == "reaction":
            logger.info("Received reaction", sender=msg.sender_address, content=msg.content)
            return

        if msg.is_conversation_start:
            if msg.sender_address.lower() != self.agent_address.lower():
                await self.welcome_chain.run(ctx, self.handlers.welcome)
            return

        await self.chain.run(ctx, self.router)

    async def process(self, msg: InboundMessage) -> None:
        """Process one message; unexpected errors become a polite reply."""
        try:
            await self._process_message(msg)
        except Exception as e:
            logger.exception(
                "Error processing message",
                error_type=type(e).__name__,
                channel=msg.channel,
                sender=msg.sender_address,
                conversation_id=msg.conversation_id,
            )
            try:
                await self.bus.publish_outbound(OutboundMessage(
                    channel=msg.channel,
                    conversation_id=msg.conversation_id,
                    content=GENERIC_ERROR_TEXT,
                ))
            except Exception:
                logger.exception("Failed to send error message")
        finally:
            if self.on_processed is not None:
                self.on_processed()

    async def run(self) -> None:
        """Run the agent loop, processing messages from the bus."""
        self._running = True
        self._stopped_event.clear()
        if self.rate_limiter is not None:
            self.rate_limiter.start_sweeper()
        try:
            logger.info("Agent loop started", agent_address=self.agent_address)

            while self._running:
                try:
                    msg = await asyncio.wait_for(
                        self.bus.consume_inbound(),
                        timeout=1.0
                    )
                except asyncio.TimeoutError:
                    continue
                await self.process(msg)
        finally:
            self._running = False
            if self.rate_limiter is not None:
                await self.rate_limiter.stop_sweeper()
            self._stopped_event.set()
            logger.info("Agent loop stopped")

    def stop(self) -> None:
        """Signal the agent loop to stop. Returns immediately; use wait_stopped() to await shutdown."""
        self._running = False
        logger.info("Agent loop stopping")

    async def wait_stopped(self, timeout: float = 30.0) -> bool:
        """Wait for the loop to finish its current message and shut down.

        Returns:
            True if the loop stopped cleanly, False if *timeout* was reached.
        """
        try:
            await asyncio.wait_for(self._stopped_event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("Agent loop did not stop in time", timeout=timeout)
            return False
