"""
Tests for the AniDB rate limiter.

A fake clock whose sleep advances time makes every wait observable and
deterministic.
"""

import asyncio

import pytest

from animeta.adapters.api.rate_limiter import RateLimiter, cancellable_sleep
from animeta.core.exceptions import OperationCancelledError


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_limiter(clock: FakeClock, **kwargs) -> RateLimiter:
    return RateLimiter(clock=clock, sleep=clock.sleep, **kwargs)


class TestMinimumDelay:
    """Consecutive requests are spaced by at least min_delay."""

    @pytest.mark.asyncio
    async def test_first_tick_does_not_wait(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=3, average_delay=5, window=300)

        await limiter.tick()

        assert clock.sleeps == []
        assert limiter.history == (0.0,)

    @pytest.mark.asyncio
    async def test_consecutive_ticks_spaced_by_min_delay(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=2, average_delay=0, window=300)

        for _ in range(4):
            await limiter.tick()

        assert limiter.history == (0.0, 2.0, 4.0, 6.0)

    @pytest.mark.asyncio
    async def test_no_wait_when_caller_was_already_idle(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=2, average_delay=0, window=300)

        await limiter.tick()
        clock.now = 10.0
        await limiter.tick()

        assert clock.sleeps == []
        assert limiter.history == (0.0, 10.0)


class TestAverageDelay:
    """Mean spacing over the trailing window stays at or above average_delay."""

    @pytest.mark.asyncio
    async def test_average_spacing_is_enforced(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=1, average_delay=5, window=300)

        for _ in range(5):
            await limiter.tick()

        history = limiter.history
        assert history == (0.0, 5.0, 10.0, 15.0, 20.0)
        # Every request respects the minimum delay as well
        assert all(b - a >= 1 for a, b in zip(history, history[1:]))

    @pytest.mark.asyncio
    async def test_idle_period_allows_a_short_burst(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=1, average_delay=5, window=300)

        await limiter.tick()
        clock.now = 100.0
        await limiter.tick()
        await limiter.tick()

        # Only the minimum delay applies: the window average is still far above 5s
        assert limiter.history == (0.0, 100.0, 101.0)

    @pytest.mark.asyncio
    async def test_entries_leave_the_window(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=1, average_delay=5, window=60)

        await limiter.tick()
        clock.now = 61.0
        await limiter.tick()

        assert limiter.history == (61.0,)


class TestRequestCeiling:
    """No more than max_requests per window."""

    @pytest.mark.asyncio
    async def test_ceiling_waits_for_oldest_entry_to_expire(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=0, average_delay=0, window=10, max_requests=2)

        await limiter.tick()
        await limiter.tick()
        await limiter.tick()

        assert clock.now == 10.0
        assert limiter.history == (10.0,)

    def test_default_ceiling_derived_from_average(self) -> None:
        limiter = RateLimiter(min_delay=3, average_delay=5, window=300)

        assert limiter.max_requests == 60


class TestConcurrency:
    """Concurrent callers are released one at a time."""

    @pytest.mark.asyncio
    async def test_concurrent_ticks_are_serialized(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock, min_delay=3, average_delay=0, window=300)

        await asyncio.gather(limiter.tick(), limiter.tick(), limiter.tick())

        assert limiter.history == (0.0, 3.0, 6.0)


class TestCancellation:
    """Waiting callers can be cancelled."""

    @pytest.mark.asyncio
    async def test_cancelled_before_tick(self, clock: FakeClock) -> None:
        limiter = make_limiter(clock)
        cancellation = asyncio.Event()
        cancellation.set()

        with pytest.raises(OperationCancelledError):
            await limiter.tick(cancellation)

        assert limiter.history == ()

    @pytest.mark.asyncio
    async def test_cancelled_while_waiting(self) -> None:
        limiter = RateLimiter(min_delay=30, average_delay=0, window=300)
        cancellation = asyncio.Event()
        await limiter.tick()

        asyncio.get_running_loop().call_later(0.01, cancellation.set)
        with pytest.raises(OperationCancelledError):
            await limiter.tick(cancellation)

        assert len(limiter.history) == 1

    @pytest.mark.asyncio
    async def test_cancellable_sleep_returns_after_delay(self) -> None:
        cancellation = asyncio.Event()

        await cancellable_sleep(0.01, cancellation)

        assert not cancellation.is_set()
