"""Configuration schema using Pydantic."""

from __future__ import annotations

import os
import re

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_ENV_REF_RE = re.compile(r"^\$\{?([A-Za-z_][A-Za-z0-9_]*)\}?$")


def _resolve_env(value: str) -> str:
    """Resolve ``$VAR`` / ``${VAR}`` references; unset variables are returned unchanged."""
    if not value:
        return value
    m = _ENV_REF_RE.match(value.strip())
    if not m:
        return value
    return os.environ.get(m.group(1), value)


class Base(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgentConfig(Base):
    """Chat identity of the agent."""

    wallet_key: str = ""
    env: str = "dev"  # local | dev | production

    @property
    def resolved_wallet_key(self) -> str:
        return _resolve_env(self.wallet_key)


class BackendConfig(Base):
    """Voltz backend REST API."""

    api_url: str = "http://localhost:3001"
    timeout_ms: int = 10_000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class RateLimitConfig(Base):
    """Per-sender fixed window limits."""

    enabled: bool = True
    max_messages: int = 10
    window_seconds: float = 60
    sweep_interval_seconds: float = 300


class LoggingConfig(Base):
    level: str = "INFO"
    json_output: bool = Field(default=False, alias="json")


class HealthConfig(Base):
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8766


class ConsoleConfig(Base):
    """Local console channel used by the CLI."""

    sender_address: str = "0x000000000000000000000000000000000000c0de"
    conversation_id: str = "console"


class Config(Base):
    """Root configuration for voltz-agent."""

    agent: AgentConfig = Field(default_factory=AgentConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)
