from __future__ import annotations

from typing import Any

import pytest

from voltz_agent.backend.models import Event, Match, Profile
from voltz_agent.middleware.chain import MiddlewareContext

AGENT_ADDRESS = "0xA9e17000000000000000000000000000000000A9"
USER_ADDRESS = "0x000000000000000000000000000000000000AAAA"


class FakeGateway:
    """In-memory stand-in for BackendGateway."""

    def __init__(self) -> None:
        self.profile: Profile | None = None
        self.matches: list[Match] = []
        self.events: list[Event] = []
        self.activity: list[dict[str, Any]] = []
        self.profile_calls = 0
        self.raise_on: set[str] = set()

    async def get_user_profile(self, wallet_address: str) -> Profile | None:
        self.profile_calls += 1
        if "profile" in self.raise_on:
            raise RuntimeError("profile exploded")
        return self.profile

    async def get_user_matches(self, wallet_address: str) -> list[Match]:
        if "matches" in self.raise_on:
            raise RuntimeError("matches exploded")
        return list(self.matches)

    async def get_user_events(self, wallet_address: str) -> list[Event]:
        if "events" in self.raise_on:
            raise RuntimeError("events exploded")
        return list(self.events)

    async def log_message_activity(self, from_address, to_address, message_type, timestamp=None) -> None:
        if "log" in self.raise_on:
            raise RuntimeError("log exploded")
        self.activity.append({"from": from_address, "to": to_address, "type": message_type})

    async def test_connection(self) -> bool:
        return True

    async def connect(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_ctx():
    """Build a MiddlewareContext whose replies are collected in ``ctx.sent``."""

    def _make(content: str = "", sender: str = USER_ADDRESS) -> MiddlewareContext:
        sent: list[str] = []

        async def reply(text: str) -> None:
            sent.append(text)

        ctx = MiddlewareContext(
            sender_address=sender,
            content=content,
            conversation_id="conv-1",
            agent_address=AGENT_ADDRESS,
            reply=reply,
        )
        ctx.sent = sent  # type: ignore[attr-defined]
        return ctx

    return _make
