"""Message bus module for decoupled channel-agent communication."""

from voltz_agent.bus.events import InboundMessage, OutboundMessage
from voltz_agent.bus.queue import MessageBus

__all__ = ["MessageBus", "InboundMessage", "OutboundMessage"]
