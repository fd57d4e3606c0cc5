"""Keyword-based command routing."""

from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable

from voltz_agent.agent.handlers import CommandHandlers
from voltz_agent.logging import get_logger
from voltz_agent.middleware.chain import MiddlewareContext

logger = get_logger(__name__)


class CommandIntent(str, Enum):
    HELP = "help"
    PROFILE = "profile"
    MATCHES = "matches"
    EVENTS = "events"
    FALLBACK = "fallback"


# Checked in order; the first keyword found anywhere in the text wins.
_KEYWORDS: tuple[tuple[str, CommandIntent], ...] = (
    ("help", CommandIntent.HELP),
    ("profile", CommandIntent.PROFILE),
    ("match", CommandIntent.MATCHES),
    ("event", CommandIntent.EVENTS),
)


def classify(text: str) -> CommandIntent:
    normalized = text.strip().lower()
    for keyword, intent in _KEYWORDS:
        if keyword in normalized:
            return intent
    return CommandIntent.FALLBACK


class CommandRouter:
    """Terminal stage of the middleware chain: classify and dispatch."""

    def __init__(self, handlers: CommandHandlers) -> None:
        self.handlers = handlers
        self._routes: dict[CommandIntent, Callable[[MiddlewareContext], Awaitable[None]]] = {
            CommandIntent.HELP: handlers.help,
            CommandIntent.PROFILE: handlers.profile,
            CommandIntent.MATCHES: handlers.matches,
            CommandIntent.EVENTS: handlers.events,
            CommandIntent.FALLBACK: handlers.fallback,
        }

    async def __call__(self, ctx: MiddlewareContext) -> None:
        intent = classify(ctx.content)
        logger.debug("Routing message", intent=intent.value, sender=ctx.sender_address)
        await self._routes[intent](ctx)
