"""HTTP facade over the Voltz backend REST API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from voltz_agent.backend.models import Event, Match, Profile
from voltz_agent.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_TIMEOUT = 10.0  # seconds

_M = TypeVar("_M", bound=BaseModel)


def _segment(value: str) -> str:
    """Quote one URL path segment so ids cannot change the route."""
    return quote(str(value), safe="")


class BackendGateway:
    """Backend client whose reads never raise.

    Read failures (network errors, non-2xx status, malformed bodies) are
    logged and mapped to ``None`` for single resources and ``[]`` for
    collections. Activity logging is fire-and-forget.

    Args:
        base_url: Backend root URL.
        timeout: Per-request timeout in seconds.
        client: Pre-built ``httpx.AsyncClient``; mainly for tests.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> BackendGateway:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str) -> dict[str, Any]:
        response = await self._client.get(path)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Expected JSON object from {path}")
        return payload

    async def test_connection(self) -> bool:
        """Return True if ``GET /health`` succeeds."""
        try:
            response = await self._client.get("/health")
            response.raise_for_status()
            return True
        except httpx.HTTPError:
            return False

    async def connect(self) -> bool:
        """Probe the backend and log the outcome."""
        ok = await self.test_connection()
        if ok:
            logger.info("Connected to Voltz backend", base_url=self.base_url)
        else:
            logger.warning("Could not connect to Voltz backend", base_url=self.base_url)
        return ok

    async def _get_one(self, path: str, key: str, model: type[_M], what: str) -> _M | None:
        try:
            payload = await self._get_json(path)
            raw = payload.get(key)
            if raw is None:
                return None
            return model.model_validate(raw)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch {what}", path=path, error=str(e), error_type=type(e).__name__)
            return None

    async def _get_many(self, path: str, key: str, model: type[_M], what: str) -> list[_M]:
        """Fetch a collection; items that fail validation are dropped one by one."""
        try:
            payload = await self._get_json(path)
            raw = payload.get(key)
            if raw is None:
                return []
            if not isinstance(raw, list):
                raise ValueError(f"Expected a list under '{key}'")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch {what}", path=path, error=str(e), error_type=type(e).__name__)
            return []

        items: list[_M] = []
        for index, item in enumerate(raw):
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid item in {what}",
                    path=path, index=index, error_count=e.error_count(),
                )
        return items

    async def get_user_profile(self, wallet_address: str) -> Profile | None:
        return await self._get_one(
            f"/api/v1/profiles/{_segment(wallet_address)}", "profile", Profile, "user profile",
        )

    async def get_user_matches(self, wallet_address: str) -> list[Match]:
        return await self._get_many(
            f"/api/v1/matches/user/{_segment(wallet_address)}", "matches", Match, "user matches",
        )

    async def get_user_events(self, wallet_address: str) -> list[Event]:
        return await self._get_many(
            f"/api/v1/events/user/{_segment(wallet_address)}", "events", Event, "user events",
        )

    async def get_event_details(self, event_id: str) -> Event | None:
        return await self._get_one(f"/api/v1/events/{_segment(event_id)}", "event", Event, "event details")

    async def log_message_activity(
        self,
        from_address: str,
        to_address: str,
        message_type: str,
        timestamp: datetime | None = None,
    ) -> None:
        """Record an agent interaction. Failures are logged, never raised."""
        body = {
            "fromAddress": from_address,
            "toAddress": to_address,
            "messageType": message_type,
            "timestamp": (timestamp or datetime.now(timezone.utc)).isoformat(),
        }
        try:
            response = await self._client.post("/api/v1/agent/log", json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to log message activity",
                message_type=message_type,
                error=str(e),
                error_type=type(e).__name__,
            )
