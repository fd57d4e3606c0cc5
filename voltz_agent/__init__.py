"""Voltz event-networking chat agent."""

__version__ = "0.1.0"
__logo__ = "⚡"
