"""Message middleware: chain, stages and rate limiting."""

from voltz_agent.middleware.chain import MiddlewareChain, MiddlewareContext
from voltz_agent.middleware.ratelimit import RateLimitStore
from voltz_agent.middleware.stages import default_stages

__all__ = ["MiddlewareChain", "MiddlewareContext", "RateLimitStore", "default_stages"]
