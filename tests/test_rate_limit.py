"""Tests for the per-sender fixed window rate limiter."""

from __future__ import annotations

import asyncio
import time

import pytest

from voltz_agent.middleware.ratelimit import RateLimitStore


class TestCheckAndRecord:
    def test_allows_up_to_limit(self):
        rl = RateLimitStore(max_messages=10, window_seconds=60)
        assert all(rl.check_and_record("0xAAA", now=0.0) for _ in range(10))

    def test_denies_over_limit_without_mutation(self):
        rl = RateLimitStore(max_messages=3, window_seconds=60)
        for _ in range(3):
            assert rl.check_and_record("0xAAA", now=1.0) is True
        before = rl.get("0xAAA")
        assert before is not None
        reset_at = before.window_reset_at

        assert rl.check_and_record("0xAAA", now=2.0) is False
        assert rl.check_and_record("0xAAA", now=30.0) is False

        entry = rl.get("0xAAA")
        assert entry.count == 3
        assert entry.window_reset_at == reset_at

    def test_different_senders_independent(self):
        rl = RateLimitStore(max_messages=2, window_seconds=60)
        assert rl.check_and_record("a", now=0.0) is True
        assert rl.check_and_record("a", now=0.0) is True
        assert rl.check_and_record("a", now=0.0) is False
        assert rl.check_and_record("b", now=0.0) is True
        assert rl.check_and_record("b", now=0.0) is True
        assert rl.check_and_record("b", now=0.0) is False

    def test_window_boundary_is_inclusive(self):
        """The window is still open at exactly ``window_reset_at``."""
        rl = RateLimitStore(max_messages=1, window_seconds=60)
        assert rl.check_and_record("a", now=0.0) is True
        assert rl.check_and_record("a", now=60.0) is False
        assert rl.check_and_record("a", now=60.001) is True

    def test_scenario_eleventh_denied_then_fresh_window(self):
        rl = RateLimitStore()  # 10 per 60s
        for _ in range(10):
            assert rl.check_and_record("0xAAA", now=0.0) is True
        assert rl.check_and_record("0xAAA", now=0.0) is False

        assert rl.check_and_record("0xAAA", now=61.0) is True
        entry = rl.get("0xAAA")
        assert entry.count == 1
        assert entry.window_reset_at == pytest.approx(121.0)

    def test_boundary_burst_is_accepted(self):
        """Fixed windows let 2x max through across a reset boundary."""
        rl = RateLimitStore(max_messages=5, window_seconds=60)
        allowed = sum(rl.check_and_record("a", now=0.0) for _ in range(5))
        allowed += sum(rl.check_and_record("a", now=60.5) for _ in range(5))
        assert allowed == 10

    def test_defaults_to_monotonic_clock(self, monkeypatch):
        fake_time = [100.0]
        monkeypatch.setattr(time, "monotonic", lambda: fake_time[0])

        rl = RateLimitStore(max_messages=1, window_seconds=10)
        assert rl.check_and_record("a") is True
        assert rl.check_and_record("a") is False
        fake_time[0] = 111.0
        assert rl.check_and_record("a") is True


class TestSweep:
    def test_removes_only_expired(self):
        rl = RateLimitStore(window_seconds=60)
        rl.check_and_record("old", now=0.0)      # resets at 60
        rl.check_and_record("fresh", now=50.0)   # resets at 110

        removed = rl.sweep(now=100.0)

        assert removed == 1
        assert rl.get("old") is None
        assert rl.get("fresh") is not None
        assert len(rl) == 1

    def test_keeps_entry_at_exact_reset_time(self):
        rl = RateLimitStore(window_seconds=60)
        rl.check_and_record("a", now=0.0)
        assert rl.sweep(now=60.0) == 0
        assert rl.get("a") is not None

    def test_sweep_does_not_change_decisions(self):
        swept = RateLimitStore(max_messages=2, window_seconds=10)
        unswept = RateLimitStore(max_messages=2, window_seconds=10)
        times = [0.0, 1.0, 2.0, 11.0, 11.5, 12.0, 30.0]
        results_swept = []
        results_unswept = []
        for t in times:
            swept.sweep(now=t)
            results_swept.append(swept.check_and_record("a", now=t))
            results_unswept.append(unswept.check_and_record("a", now=t))
        assert results_swept == results_unswept


class TestSweeper:
    @pytest.mark.asyncio
    async def test_background_sweep_removes_expired(self):
        rl = RateLimitStore(window_seconds=60, sweep_interval_seconds=0.01)
        now = time.monotonic()
        rl.check_and_record("old", now=now - 120)
        rl.check_and_record("fresh")

        rl.start_sweeper()
        try:
            await asyncio.sleep(0.05)
        finally:
            await rl.stop_sweeper()

        assert rl.get("old") is None
        assert rl.get("fresh") is not None

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_clears(self):
        rl = RateLimitStore(sweep_interval_seconds=10)
        first = rl.start_sweeper()
        second = rl.start_sweeper()
        assert first is second
        assert rl.sweeper_running is True

        await rl.stop_sweeper()
        assert rl.sweeper_running is False
        await rl.stop_sweeper()  # no-op
