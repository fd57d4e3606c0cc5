"""Per-sender fixed window rate limiter."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from voltz_agent.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    window_reset_at: float


class RateLimitStore:
    """Fixed (non-sliding) window counter keyed by sender address.

    A sender may send ``max_messages`` within a window that opens on their
    first message and closes ``window_seconds`` later. Because windows are
    fixed, up to ``2 * max_messages`` can pass in a short burst straddling a
    window boundary.

    ``check_and_record`` has no await points, so under asyncio the
    read-check-write for a key is atomic. Guard it with a lock if this is
    ever shared between threads.

    Args:
        max_messages: Maximum messages allowed within one window.
        window_seconds: Window length in seconds.
        sweep_interval_seconds: Period of the background expiry sweep.
    """

    def __init__(
        self,
        max_messages: int = 10,
        window_seconds: float = 60,
        sweep_interval_seconds: float = 300,
    ) -> None:
        self.max_messages = max_messages
        self.window_seconds = window_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._entries: dict[str, RateLimitEntry] = {}
        self._sweep_task: asyncio.Task | None = None

    def check_and_record(self, subject_key: str, now: float | None = None) -> bool:
        """Return True if *subject_key* may proceed, recording the message if so."""
        if now is None:
            now = time.monotonic()

        entry = self._entries.get(subject_key)
        if entry is None or now > entry.window_reset_at:
            self._entries[subject_key] = RateLimitEntry(
                count=1,
                window_reset_at=now + self.window_seconds,
            )
            return True

        if entry.count >= self.max_messages:
            return False

        entry.count += 1
        return True

    def sweep(self, now: float | None = None) -> int:
        """Drop entries whose window has expired. Returns the number removed."""
        if now is None:
            now = time.monotonic()
        expired = [key for key, entry in self._entries.items() if entry.window_reset_at < now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def get(self, subject_key: str) -> RateLimitEntry | None:
        return self._entries.get(subject_key)

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            removed = self.sweep()
            if removed:
                logger.debug("Rate limit sweep", removed=removed, tracked=len(self._entries))

    def start_sweeper(self) -> asyncio.Task:
        """Start the periodic sweep on the running loop (idempotent)."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_forever())
        return self._sweep_task

    async def stop_sweeper(self) -> None:
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None

    @property
    def sweeper_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()
