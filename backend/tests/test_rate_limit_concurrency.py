import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from app.services.rate_limiter import RateLimiter


def _hammer(calls, call):
    barrier = threading.Barrier(calls)

    def worker(_):
        barrier.wait()
        return call()

    with ThreadPoolExecutor(max_workers=calls) as pool:
        return list(pool.map(worker, range(calls)))


def test_parallel_calls_admit_exactly_the_quota():
    limiter = RateLimiter()
    quota = 50

    results = _hammer(
        quota,
        lambda: limiter.check_limit("fresh", timedelta(minutes=1), quota),
    )

    assert sum(r.allowed for r in results) == quota
    assert sorted(r.remaining for r in results) == list(range(quota))


def test_parallel_overload_never_over_admits():
    limiter = RateLimiter()
    quota = 25

    results = _hammer(
        100,
        lambda: limiter.check_limit("hot", timedelta(minutes=1), quota),
    )

    assert sum(r.allowed for r in results) == quota
    assert limiter.get_entry("hot").count == quota


def test_parallel_identity_checks_respect_hour_quota():
    limiter = RateLimiter()

    results = _hammer(
        60,
        lambda: limiter.check_identity_limit("key-1", 1000, 10),
    )

    assert sum(r.allowed for r in results) == 10
    assert limiter.get_entry("key-1:minute").count == 60
