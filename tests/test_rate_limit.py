from chatterbox.rate_limit import RateLimiter


class FakeMonotonic:
    def __init__(self) -> None:
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


class TestRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = RateLimiter(clock=FakeMonotonic())
        assert limiter.hit("k", 2, 60) is None
        assert limiter.hit("k", 2, 60) is None
        assert limiter.hit("k", 2, 60) == 60

    def test_window_slides(self):
        clock = FakeMonotonic()
        limiter = RateLimiter(clock=clock)
        limiter.hit("k", 1, 60)
        clock.value += 45
        assert limiter.hit("k", 1, 60) == 15
        clock.value += 15
        assert limiter.hit("k", 1, 60) is None

    def test_keys_are_independent(self):
        limiter = RateLimiter(clock=FakeMonotonic())
        limiter.hit("a", 1, 60)
        assert limiter.hit("b", 1, 60) is None

    def test_clear(self):
        limiter = RateLimiter(clock=FakeMonotonic())
        limiter.hit("k", 1, 60)
        limiter.clear()
        assert limiter.hit("k", 1, 60) is None
        assert len(limiter) == 1


class TestKeyEviction:
    def test_idle_keys_are_dropped_on_later_hit(self):
        clock = FakeMonotonic()
        limiter = RateLimiter(clock=clock)
        for index in range(1000):
            limiter.hit(f"client-{index}", 5, 300)
        assert len(limiter) == 1000

        clock.value += 10_000
        limiter.hit("fresh", 5, 300)
        assert len(limiter) == 1

    def test_keys_inside_their_window_survive_sweep(self):
        clock = FakeMonotonic()
        limiter = RateLimiter(clock=clock)
        limiter.hit("short", 5, 60)
        limiter.hit("long", 5, 900)

        clock.value += 120
        limiter.hit("other", 5, 60)
        assert len(limiter) == 2
        assert limiter.hit("long", 1, 900) == 780

    def test_cleanup_reports_dropped_keys(self):
        clock = FakeMonotonic()
        limiter = RateLimiter(clock=clock)
        limiter.hit("a", 5, 60)
        limiter.hit("b", 5, 60)
        clock.value += 30
        limiter.hit("c", 5, 60)

        clock.value += 31
        assert limiter.cleanup() == 2
        assert len(limiter) == 1

    def test_blocked_key_is_not_evicted_early(self):
        clock = FakeMonotonic()
        limiter = RateLimiter(clock=clock, sweep_interval=1)
        limiter.hit("k", 1, 60)
        clock.value += 30
        assert limiter.hit("k", 1, 60) == 30
        assert limiter.hit("k", 1, 60) == 30
