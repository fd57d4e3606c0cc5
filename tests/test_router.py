import pytest

from voltz_agent.agent.handlers import CommandHandlers
from voltz_agent.agent.router import CommandIntent, CommandRouter, classify


@pytest.mark.parametrize(
    ("text", "intent"),
    [
        ("help", CommandIntent.HELP),
        ("  HELP me with my profile ", CommandIntent.HELP),
        ("Can you show my profile?", CommandIntent.PROFILE),
        ("match me with events", CommandIntent.MATCHES),
        ("any matches?", CommandIntent.MATCHES),
        ("upcoming EVENTS", CommandIntent.EVENTS),
        ("gm", CommandIntent.FALLBACK),
        ("", CommandIntent.FALLBACK),
    ],
)
def test_classify(text: str, intent: CommandIntent) -> None:
    assert classify(text) is intent


class _SpyHandlers(CommandHandlers):
    def __init__(self) -> None:
        self.called: list[str] = []

    async def help(self, ctx):
        self.called.append("help")

    async def profile(self, ctx):
        self.called.append("profile")

    async def matches(self, ctx):
        self.called.append("matches")

    async def events(self, ctx):
        self.called.append("events")

    async def fallback(self, ctx):
        self.called.append("fallback")


@pytest.mark.asyncio
async def test_router_dispatches_to_one_handler(make_ctx) -> None:
    handlers = _SpyHandlers()
    router = CommandRouter(handlers)

    for text in ["show my profile", "match me with events", "what's on", "HELP"]:
        await router(make_ctx(text))

    assert handlers.called == ["profile", "matches", "fallback", "help"]
