"""Chat transports."""

from voltz_agent.channels.base import BaseChannel
from voltz_agent.channels.console import ConsoleChannel
from voltz_agent.channels.manager import ChannelManager

__all__ = ["BaseChannel", "ConsoleChannel", "ChannelManager"]
