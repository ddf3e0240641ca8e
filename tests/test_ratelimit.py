import threading
import unittest
from concurrent.futures import ThreadPoolExecutor

from vorteauth.ratelimit import RateLimitKey, RateLimiter


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


FINGERPRINT = "0123456789abcdef0123456789abcdef"


class TestRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.limiter = RateLimiter(60, clock=self.clock)
        self.key = RateLimitKey("vorte.app", FINGERPRINT)

    def test_one_admission_per_window(self) -> None:
        first = self.limiter.admit(self.key)
        self.assertTrue(first.admitted)
        self.assertEqual(first.retry_after, 0)
        self.assertEqual(first.reset, 60)

        for elapsed in (0, 0.001, 1, 30.5, 59, 59.999):
            with self.subTest(elapsed=elapsed):
                decision = self.limiter.admit(self.key, now=self.clock.now + elapsed)
                self.assertFalse(decision.admitted)
                self.assertGreaterEqual(decision.retry_after, 1)
                self.assertLessEqual(decision.retry_after, 60)

    def test_retry_after_rounds_up(self) -> None:
        self.limiter.admit(self.key)
        self.clock.advance(30.2)
        self.assertEqual(self.limiter.admit(self.key).retry_after, 30)
        self.clock.advance(29.7)
        self.assertEqual(self.limiter.admit(self.key).retry_after, 1)

    def test_new_window_after_expiry(self) -> None:
        self.assertTrue(self.limiter.admit(self.key).admitted)
        self.clock.advance(60)
        self.assertTrue(self.limiter.admit(self.key).admitted)
        self.clock.advance(59)
        self.assertFalse(self.limiter.admit(self.key).admitted)
        self.clock.advance(1)
        self.assertTrue(self.limiter.admit(self.key).admitted)

    def test_rejection_does_not_extend_window(self) -> None:
        self.limiter.admit(self.key)
        self.clock.advance(50)
        self.assertFalse(self.limiter.admit(self.key).admitted)
        self.clock.advance(10)
        self.assertTrue(self.limiter.admit(self.key).admitted)

    def test_keys_are_independent(self) -> None:
        other = RateLimitKey("vorte.app", FINGERPRINT[:-1] + "e")
        self.assertTrue(self.limiter.admit(self.key).admitted)
        self.assertTrue(self.limiter.admit(other).admitted)
        self.assertTrue(self.limiter.admit(RateLimitKey("localhost", FINGERPRINT)).admitted)

    def test_components_cannot_run_together(self) -> None:
        self.assertTrue(self.limiter.admit(RateLimitKey("a:", ":b")).admitted)
        self.assertTrue(self.limiter.admit(RateLimitKey("a::", "b")).admitted)

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(ValueError):
            RateLimiter(0)
        with self.assertRaises(ValueError):
            RateLimiter(60, capacity=0)


class TestRateLimiterConcurrency(unittest.TestCase):
    def _race(self, limiter: RateLimiter, keys: list) -> list:
        barrier = threading.Barrier(len(keys))

        def attempt(key: RateLimitKey) -> bool:
            barrier.wait()
            return limiter.admit(key).admitted

        with ThreadPoolExecutor(max_workers=len(keys)) as pool:
            return list(pool.map(attempt, keys))

    def test_same_key_admitted_exactly_once(self) -> None:
        key = RateLimitKey("vorte.app", FINGERPRINT)
        for _ in range(20):
            limiter = RateLimiter(60)
            results = self._race(limiter, [key] * 16)
            self.assertEqual(results.count(True), 1)

    def test_different_keys_all_admitted(self) -> None:
        limiter = RateLimiter(60)
        keys = [RateLimitKey("vorte.app", f"{index:032x}") for index in range(16)]
        self.assertTrue(all(self._race(limiter, keys)))


class TestRateLimiterSweep(unittest.TestCase):
    def test_lapsed_entries_swept_after_interval(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(60, clock=clock, sweep_interval=120)
        for index in range(5):
            limiter.admit(RateLimitKey("vorte.app", f"{index:032x}"))
        clock.advance(61)
        limiter.admit(RateLimitKey("vorte.app", "f" * 32))
        # Interval not reached yet: lapsed entries linger.
        self.assertEqual(len(limiter), 6)
        clock.advance(59)
        limiter.admit(RateLimitKey("vorte.app", "e" * 32))
        self.assertEqual(len(limiter), 2)

    def test_capacity_sweeps_lapsed_first(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(60, clock=clock, capacity=3)
        limiter.admit(RateLimitKey("vorte.app", "0" * 32))
        clock.advance(61)
        limiter.admit(RateLimitKey("vorte.app", "1" * 32))
        limiter.admit(RateLimitKey("vorte.app", "2" * 32))
        limiter.admit(RateLimitKey("vorte.app", "3" * 32))
        self.assertEqual(len(limiter), 3)

    def test_capacity_evicts_soonest_expiry(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(60, clock=clock, capacity=2)
        oldest = RateLimitKey("vorte.app", "0" * 32)
        newer = RateLimitKey("vorte.app", "1" * 32)
        limiter.admit(oldest)
        clock.advance(1)
        limiter.admit(newer)
        clock.advance(1)
        with self.assertLogs("vorteauth.ratelimit", level="WARNING"):
            limiter.admit(RateLimitKey("vorte.app", "2" * 32))
        self.assertEqual(len(limiter), 2)
        self.assertFalse(limiter.admit(newer).admitted)
        # Evicted inside its window, so it is admitted again.
        self.assertTrue(limiter.admit(oldest).admitted)


if __name__ == "__main__":
    unittest.main()
