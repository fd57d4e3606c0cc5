"""Ordered message-processing stages with short-circuit semantics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Sequence, TypeAlias

if TYPE_CHECKING:
    from voltz_agent.backend.models import Profile

ReplyCallback: TypeAlias = Callable[[str], Awaitable[None]]
Proceed: TypeAlias = Callable[[], Awaitable[None]]
Stage: TypeAlias = Callable[["MiddlewareContext", Proceed], Awaitable[None]]
Terminal: TypeAlias = Callable[["MiddlewareContext"], Awaitable[None]]


@dataclass
class MiddlewareContext:
    """Per-message state passed through the chain; discarded afterwards."""

    sender_address: str
    content: str
    conversation_id: str
    agent_address: str
    reply: ReplyCallback
    profile: Profile | None = None
    replies_sent: int = field(default=0)

    async def send_text(self, text: str) -> None:
        self.replies_sent += 1
        await self.reply(text)


class MiddlewareChain:
    """Run stages in order, then the terminal handler.

    Each stage receives the context and a ``proceed`` coroutine function.
    A stage that returns without awaiting ``proceed()`` ends processing for
    that message; no later stage and no terminal handler runs.
    """

    def __init__(self, stages: Sequence[Stage] = ()) -> None:
        self._stages: list[Stage] = list(stages)

    def use(self, stage: Stage) -> MiddlewareChain:
        self._stages.append(stage)
        return self

    async def run(self, ctx: MiddlewareContext, terminal: Terminal) -> bool:
        """Process *ctx*. Returns True if the terminal handler was reached."""
        reached = False

        async def dispatch(index: int) -> None:
            nonlocal reached
            if index == len(self._stages):
                reached = True
                await terminal(ctx)
                return
            stage = self._stages[index]
            await stage(ctx, lambda: dispatch(index + 1))

        await dispatch(0)
        return reached
