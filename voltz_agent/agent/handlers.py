"""Command handlers: fetch from the backend, reply, log the interaction."""

from __future__ import annotations

from voltz_agent.agent import formatting
from voltz_agent.backend.gateway import BackendGateway
from voltz_agent.logging import get_logger
from voltz_agent.middleware.chain import MiddlewareContext

logger = get_logger(__name__)


class CommandHandlers:
    """One coroutine per command intent.

    Handlers never raise: unexpected errors are logged and answered with an
    apology. Activity logging is attempted after every reply and its
    failures are swallowed.
    """

    def __init__(self, gateway: BackendGateway) -> None:
        self.gateway = gateway

    async def _log_activity(self, ctx: MiddlewareContext, message_type: str) -> None:
        try:
            await self.gateway.log_message_activity(
                from_address=ctx.agent_address,
                to_address=ctx.sender_address,
                message_type=message_type,
            )
        except Exception:
            logger.warning("Activity log failed", message_type=message_type, exc_info=True)

    async def help(self, ctx: MiddlewareContext) -> None:
        try:
            await ctx.send_text(formatting.HELP_TEXT)
            await self._log_activity(ctx, "help")
            logger.info("Help message sent", sender=ctx.sender_address)
        except Exception:
            logger.exception("Failed to send help message", sender=ctx.sender_address)

    async def profile(self, ctx: MiddlewareContext) -> None:
        try:
            logger.info("Fetching profile", sender=ctx.sender_address)
            profile = await self.gateway.get_user_profile(ctx.sender_address)
            if profile is None:
                await ctx.send_text(formatting.NO_PROFILE_TEXT)
            else:
                await ctx.send_text(formatting.format_profile(profile))
            await self._log_activity(ctx, "profile")
            logger.info("Profile sent", sender=ctx.sender_address, found=profile is not None)
        except Exception:
            logger.exception("Failed to send profile", sender=ctx.sender_address)
            await ctx.send_text(formatting.fetch_error_text("profile"))

    async def matches(self, ctx: MiddlewareContext) -> None:
        try:
            logger.info("Fetching matches", sender=ctx.sender_address)
            matches = await self.gateway.get_user_matches(ctx.sender_address)
            if len(matches) == 0:
                await ctx.send_text(formatting.NO_MATCHES_TEXT)
            else:
                await ctx.send_text(formatting.format_matches(matches))
            await self._log_activity(ctx, "matches")
            logger.info("Matches sent", sender=ctx.sender_address, count=len(matches))
        except Exception:
            logger.exception("Failed to send match notifications", sender=ctx.sender_address)
            await ctx.send_text(formatting.fetch_error_text("matches"))

    async def events(self, ctx: MiddlewareContext) -> None:
        try:
            logger.info("Fetching events", sender=ctx.sender_address)
            events = await self.gateway.get_user_events(ctx.sender_address)
            if len(events) == 0:
                await ctx.send_text(formatting.NO_EVENTS_TEXT)
            else:
                await ctx.send_text(formatting.format_events(events))
            await self._log_activity(ctx, "events")
            logger.info("Events sent", sender=ctx.sender_address, count=len(events))
        except Exception:
            logger.exception("Failed to send event updates", sender=ctx.sender_address)
            await ctx.send_text(formatting.fetch_error_text("events"))

    async def fallback(self, ctx: MiddlewareContext) -> None:
        try:
            await ctx.send_text(formatting.FALLBACK_TEXT)
            await self._log_activity(ctx, "fallback")
        except Exception:
            logger.exception("Failed to send fallback reply", sender=ctx.sender_address)

    async def welcome(self, ctx: MiddlewareContext) -> None:
        """Greet a new conversation, personalised with the profile name if known."""
        try:
            profile = ctx.profile or await self.gateway.get_user_profile(ctx.sender_address)
            name = profile.name if profile is not None else None
            await ctx.send_text(formatting.welcome_text(name))
            await self._log_activity(ctx, "welcome")
            logger.info("Welcome message sent", sender=ctx.sender_address)
        except Exception:
            logger.exception("Failed to send welcome message", sender=ctx.sender_address)
