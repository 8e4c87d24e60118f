"""
Tests for the in-process fixed-window rate limiter.
"""
import pytest

from sonar.rate_limit import FixedWindowRateLimiter


class FakeClock:
    def __init__(self, now=1_000_020.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter(clock=clock)


class TestFixedWindow:

    def test_allows_up_to_limit_then_rejects(self, limiter):
        results = [limiter.check("sonar:search:u1", 5, 60) for _ in range(6)]

        assert [r.success for r in results] == [True] * 5 + [False]
        assert [r.remaining for r in results] == [4, 3, 2, 1, 0, 0]

    def test_rejected_calls_are_not_counted(self, limiter, clock):
        for _ in range(8):
            limiter.check("k", 2, 60)

        clock.now += 60

        assert limiter.check("k", 2, 60).remaining == 1

    def test_keys_are_independent(self, limiter):
        limiter.check("a", 1, 60)

        assert limiter.check("a", 1, 60).success is False
        assert limiter.check("b", 1, 60).success is True

    def test_retry_after_points_at_window_end(self, limiter, clock):
        clock.now = 1_000_050.0
        limiter.check("k", 1, 60)

        result = limiter.check("k", 1, 60)

        # window is [1_000_020, 1_000_080)
        assert result.reset == 1_000_080.0
        assert result.retry_after(clock.now) == 30

    def test_expired_windows_are_dropped(self, limiter, clock):
        for user in range(50):
            limiter.check(f"sonar:search:{user}", 5, 60)
        assert len(limiter) == 50

        clock.now += 60
        limiter.check("sonar:search:late", 5, 60)

        assert len(limiter) == 1

    def test_reset_clears_all_counters(self, limiter):
        limiter.check("k", 1, 60)

        limiter.reset()

        assert limiter.check("k", 1, 60).success is True
