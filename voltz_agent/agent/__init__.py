"""Agent core: routing, handlers and the processing loop."""

from voltz_agent.agent.loop import AgentLoop
from voltz_agent.agent.router import CommandIntent, CommandRouter, classify

__all__ = ["AgentLoop", "CommandIntent", "CommandRouter", "classify"]
