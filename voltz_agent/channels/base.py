"""Base channel interface for chat transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from voltz_agent.bus.events import InboundMessage, OutboundMessage
from voltz_agent.bus.queue import MessageBus
from voltz_agent.logging import get_logger

logger = get_logger(__name__)
audit_log = get_logger("voltz_agent.audit")


class BaseChannel(ABC):
    """
    Abstract base class for chat transports.

    A transport (XMTP, the local console, ...) implements this interface to
    feed inbound messages into the bus and deliver replies.
    """

    name: str = "base"

    def __init__(self, config: Any, bus: MessageBus):
        """
        Initialize the channel.

        Args:
            config: Channel-specific configuration.
            bus: The message bus for communication.
        """
        self.config = config
        self.bus = bus
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """
        Start the channel and begin listening for messages.

        This should be a long-running async task that forwards every
        received message to the bus via _handle_message().
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and clean up resources."""
        pass

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> None:
        """
        Send a reply on its conversation.

        Args:
            msg: The message to send.
        """
        pass

    async def _handle_message(
        self,
        sender_address: str,
        conversation_id: str,
        content: str,
        content_type: str = "text",
    ) -> None:
        """
        Forward a message received from the transport to the bus.

        Args:
            sender_address: The sender's wallet address.
            conversation_id: Conversation the reply must go back to.
            content: Message text content.
            content_type: ``text``, ``conversation_start`` or ``reaction``.
        """
        audit_log.info(
            "channel_message_received",
            sender=sender_address, channel=self.name,
            conversation_id=conversation_id, content_type=content_type,
        )

        msg = InboundMessage(
            channel=self.name,
            sender_address=str(sender_address),
            conversation_id=str(conversation_id),
            content=content or "",
            content_type=content_type,
        )

        await self.bus.publish_inbound(msg)

    @property
    def is_running(self) -> bool:
        """Check if the channel is running."""
        return self._running
