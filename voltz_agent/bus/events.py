"""Event types for the message bus."""

from dataclasses import dataclass


@dataclass
class InboundMessage:
    """Message received from a chat channel."""

    channel: str  # console, xmtp
    sender_address: str
    conversation_id: str
    content: str
    content_type: str = "text"  # text | conversation_start | reaction

    @property
    def is_conversation_start(self) -> bool:
        return self.content_type == "conversation_start"


@dataclass
class OutboundMessage:
    """Reply to send back on a conversation."""

    channel: str
    conversation_id: str
    content: str
