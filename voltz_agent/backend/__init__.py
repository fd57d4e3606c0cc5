"""Voltz backend API access."""

from voltz_agent.backend.gateway import BackendGateway
from voltz_agent.backend.models import Event, Match, Profile

__all__ = ["BackendGateway", "Event", "Match", "Profile"]
