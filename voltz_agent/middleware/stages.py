"""The agent's standard middleware stages.

Order matters and is fixed by :func:`default_stages`:
request logging -> rate limiting -> content filter -> authentication.
"""

from __future__ import annotations

import time

from voltz_agent.backend.gateway import BackendGateway
from voltz_agent.logging import get_logger
from voltz_agent.middleware.chain import MiddlewareContext, Proceed, Stage
from voltz_agent.middleware.ratelimit import RateLimitStore

logger = get_logger(__name__)
audit_log = get_logger("voltz_agent.audit")

RATE_LIMIT_REPLY = "⏱️ You're sending messages too quickly. Please wait a moment and try again."


def request_logging_stage() -> Stage:
    """Log entry and processing duration around the rest of the chain."""

    async def stage(ctx: MiddlewareContext, proceed: Proceed) -> None:
        started = time.perf_counter()
        logger.info(
            "Incoming message",
            type="message_received",
            sender=ctx.sender_address,
            conversation_id=ctx.conversation_id,
        )
        await proceed()
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "Message processed",
            type="message_processed",
            sender=ctx.sender_address,
            duration_ms=duration_ms,
        )

    return stage


def rate_limit_stage(store: RateLimitStore) -> Stage:
    """Reply with a warning and stop when the sender is over the limit."""

    async def stage(ctx: MiddlewareContext, proceed: Proceed) -> None:
        if not store.check_and_record(ctx.sender_address):
            audit_log.warning("rate_limited", sender=ctx.sender_address)
            await ctx.send_text(RATE_LIMIT_REPLY)
            return
        await proceed()

    return stage


def content_filter_stage() -> Stage:
    """Silently drop the agent's own messages and empty messages."""

    async def stage(ctx: MiddlewareContext, proceed: Proceed) -> None:
        if ctx.agent_address and ctx.sender_address.lower() == ctx.agent_address.lower():
            audit_log.debug("message_filtered", reason="from_self")
            return
        if not ctx.content:
            audit_log.debug("message_filtered", reason="empty", sender=ctx.sender_address)
            return
        await proceed()

    return stage


def authentication_stage(gateway: BackendGateway) -> Stage:
    """Attach the sender's profile to the context. Advisory only: never blocks."""

    async def stage(ctx: MiddlewareContext, proceed: Proceed) -> None:
        profile = await gateway.get_user_profile(ctx.sender_address)
        if profile is None:
            logger.warning("No profile found for sender", sender=ctx.sender_address)
        ctx.profile = profile
        audit_log.info("message_accepted", sender=ctx.sender_address, has_profile=profile is not None)
        await proceed()

    return stage


def entry_stages(store: RateLimitStore | None) -> list[Stage]:
    """Request logging and, when *store* is given, rate limiting."""
    stages: list[Stage] = [request_logging_stage()]
    if store is not None:
        stages.append(rate_limit_stage(store))
    return stages


def default_stages(store: RateLimitStore | None, gateway: BackendGateway) -> list[Stage]:
    """Build the standard chain; the rate limit stage is omitted when *store* is None."""
    stages = entry_stages(store)
    stages.append(content_filter_stage())
    stages.append(authentication_stage(gateway))
    return stages
