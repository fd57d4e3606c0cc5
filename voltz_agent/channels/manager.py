"""Channel manager for coordinating chat transports."""

from __future__ import annotations

import asyncio
from typing import Any

from voltz_agent.bus.queue import MessageBus
from voltz_agent.channels.base import BaseChannel
from voltz_agent.logging import get_logger

logger = get_logger(__name__)


class ChannelManager:
    """
    Manages chat channels and coordinates message routing.

    Responsibilities:
    - Start/stop registered channels
    - Route outbound replies to the channel they came from
    """

    def __init__(self, bus: MessageBus):
        self.bus = bus
        self.channels: dict[str, BaseChannel] = {}
        self._dispatch_task: asyncio.Task | None = None

    def register(self, channel: BaseChannel) -> None:
        self.channels[channel.name] = channel
        logger.info("Channel registered", channel=channel.name)

    async def _start_channel(self, name: str, channel: BaseChannel) -> None:
        """Start a channel and log any exceptions."""
        try:
            await channel.start()
        except Exception as e:
            logger.error("Failed to start channel", channel=name, error=str(e))

    def start_dispatcher(self) -> None:
        if self._dispatch_task is None or self._dispatch_task.done():
            self._dispatch_task = asyncio.create_task(self._dispatch_outbound())

    async def start_all(self) -> None:
        """Start all channels and the outbound dispatcher; returns when every channel has finished."""
        if not self.channels:
            logger.warning("No channels enabled")
            return

        self.start_dispatcher()

        tasks = []
        for name, channel in self.channels.items():
            logger.info("Starting channel", channel=name)
            tasks.append(asyncio.create_task(self._start_channel(name, channel)))

        await asyncio.gather(*tasks, return_exceptions=True)

    async def stop_all(self) -> None:
        """Stop all channels and the dispatcher."""
        logger.info("Stopping all channels...")

        if self._dispatch_task:
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass
            self._dispatch_task = None

        for name, channel in self.channels.items():
            try:
                await channel.stop()
                logger.info("Stopped channel", channel=name)
            except Exception as e:
                logger.error("Error stopping channel", channel=name, error=str(e))

    async def _dispatch_outbound(self) -> None:
        """Dispatch outbound messages to the appropriate channel."""
        logger.info("Outbound dispatcher started")

        while True:
            try:
                msg = await asyncio.wait_for(
                    self.bus.consume_outbound(),
                    timeout=1.0
                )
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break

            channel = self.channels.get(msg.channel)
            if channel is None:
                logger.warning("Unknown channel", channel=msg.channel)
                continue
            try:
                await channel.send(msg)
            except Exception as e:
                logger.error("Error sending to channel", channel=msg.channel, error=str(e))

    def get_status(self) -> dict[str, Any]:
        """Get status of all channels."""
        return {
            name: {
                "enabled": True,
                "running": channel.is_running
            }
            for name, channel in self.channels.items()
        }
