import threading

from helpers import ManualClock

from marketsignal.ratelimit import RateLimiter


def test_first_call_does_not_wait() -> None:
    clock = ManualClock()
    limiter = RateLimiter(1000, clock=clock, sleep=clock.sleep)

    assert limiter.wait("p") == 0.0
    assert clock.sleeps == []
    assert limiter.last_call == clock.now


def test_second_call_waits_remaining_interval() -> None:
    clock = ManualClock()
    limiter = RateLimiter(12_000, clock=clock, sleep=clock.sleep)

    limiter.wait("alphavantage")
    clock.advance(2.0)
    slept = limiter.wait("alphavantage")

    assert slept == 10.0
    assert clock.sleeps == [10.0]


def test_no_wait_after_interval_elapsed() -> None:
    clock = ManualClock()
    limiter = RateLimiter(1000, clock=clock, sleep=clock.sleep)

    limiter.wait()
    clock.advance(1.5)

    assert limiter.wait() == 0.0
    assert clock.sleeps == []


def test_records_time_after_sleeping() -> None:
    clock = ManualClock(start=0.0)
    limiter = RateLimiter(8000, clock=clock, sleep=clock.sleep)

    limiter.wait()
    limiter.wait()

    assert limiter.last_call == 8.0


def test_zero_interval_never_sleeps() -> None:
    clock = ManualClock()
    limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)

    for _ in range(5):
        limiter.wait()

    assert clock.sleeps == []


def test_reset_forgets_last_call() -> None:
    clock = ManualClock()
    limiter = RateLimiter(1000, clock=clock, sleep=clock.sleep)
    limiter.wait()

    limiter.reset()

    assert limiter.last_call is None
    assert limiter.wait() == 0.0


def test_concurrent_callers_are_spaced() -> None:
    """Threads sharing one limiter never pass inside the same interval."""
    clock = ManualClock(start=0.0)
    limiter = RateLimiter(1000, clock=clock, sleep=clock.sleep)

    def worker() -> None:
        limiter.wait("shared")

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Time never advances on its own, so every caller after the first waits a full interval.
    assert clock.sleeps == [1.0, 1.0, 1.0, 1.0]
    assert limiter.last_call == 4.0
