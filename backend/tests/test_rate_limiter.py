import math
from datetime import timedelta

import pytest

from app.services.rate_limiter import HOUR_WINDOW, MINUTE_WINDOW, RateLimiter


WINDOW = timedelta(seconds=60)


def test_first_requests_count_down_then_deny(limiter):
    results = [limiter.check_limit("k", WINDOW, 3) for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]
    assert all(r.retry_after is None for r in results[:3])


def test_denied_request_does_not_increment(limiter):
    for _ in range(5):
        limiter.check_limit("k", WINDOW, 2)

    assert limiter.get_entry("k").count == 2


def test_window_is_anchored_at_first_request(limiter, clock):
    first = limiter.check_limit("k", WINDOW, 5)
    clock.advance(30)
    second = limiter.check_limit("k", WINDOW, 5)

    assert first.reset_at == clock.now - timedelta(seconds=30) + WINDOW
    assert second.reset_at == first.reset_at


def test_retry_after_rounds_up_remaining_seconds(limiter, clock):
    limiter.check_limit("k", WINDOW, 1)
    clock.advance(10.2)

    denied = limiter.check_limit("k", WINDOW, 1)

    assert denied.allowed is False
    assert denied.retry_after == math.ceil((denied.reset_at - clock.now).total_seconds())
    assert denied.retry_after == 50


def test_retry_after_is_zero_at_exact_reset(limiter, clock):
    limiter.check_limit("k", WINDOW, 1)
    clock.advance(60)

    # reset_at == now is still the live window
    denied = limiter.check_limit("k", WINDOW, 1)

    assert denied.allowed is False
    assert denied.retry_after == 0


def test_expired_window_starts_fresh(limiter, clock):
    for _ in range(3):
        limiter.check_limit("k", WINDOW, 2)

    clock.advance(61)
    result = limiter.check_limit("k", WINDOW, 2)

    assert result.allowed is True
    assert result.remaining == 1
    assert result.reset_at == clock.now + WINDOW
    assert limiter.get_entry("k").count == 1


def test_boundary_burst_is_permitted(limiter, clock):
    clock.advance(0)
    assert all(limiter.check_limit("k", WINDOW, 3).allowed for _ in range(3))

    clock.advance(60.001)
    assert all(limiter.check_limit("k", WINDOW, 3).allowed for _ in range(3))


def test_keys_are_independent(limiter):
    limiter.check_limit("a", WINDOW, 1)

    assert limiter.check_limit("a", WINDOW, 1).allowed is False
    assert limiter.check_limit("b", WINDOW, 1).allowed is True


@pytest.mark.parametrize(
    "window, max_requests",
    [
        (WINDOW, 0),
        (WINDOW, -5),
        (timedelta(0), 10),
        (timedelta(seconds=-1), 10),
    ],
)
def test_invalid_config_denies_without_creating_entry(limiter, window, max_requests):
    result = limiter.check_limit("bad", window, max_requests)

    assert result.allowed is False
    assert result.remaining == 0
    assert result.retry_after >= 0
    assert limiter.get_entry("bad") is None
    assert len(limiter) == 0


# ─────────────────────────────────────────────
# Composite identity check
# ─────────────────────────────────────────────
def test_identity_minute_gate_binds(limiter):
    verdicts = [limiter.check_identity_limit("key-1", 2, 5).allowed for _ in range(3)]

    assert verdicts == [True, True, False]
    assert limiter.get_entry("key-1:minute").count == 2
    # third call never reached the hour gate
    assert limiter.get_entry("key-1:hour").count == 2


def test_identity_hour_gate_binds_and_minute_still_counts(limiter):
    verdicts = [limiter.check_identity_limit("key-1", 10, 2).allowed for _ in range(3)]

    assert verdicts == [True, True, False]
    assert limiter.get_entry("key-1:minute").count == 3
    assert limiter.get_entry("key-1:hour").count == 2


def test_identity_result_comes_from_hour_gate(limiter, clock):
    result = limiter.check_identity_limit("key-1", 10, 50)

    assert result.remaining == 49
    assert result.reset_at == clock.now + HOUR_WINDOW


def test_identity_minute_denial_reports_minute_window(limiter, clock):
    limiter.check_identity_limit("key-1", 1, 50)
    clock.advance(15)

    denied = limiter.check_identity_limit("key-1", 1, 50)

    assert denied.allowed is False
    assert denied.retry_after == 45


def test_identity_minute_window_rolls_over(limiter, clock):
    assert limiter.check_identity_limit("key-1", 1, 50).allowed is True
    assert limiter.check_identity_limit("key-1", 1, 50).allowed is False

    clock.advance(MINUTE_WINDOW.total_seconds() + 1)

    result = limiter.check_identity_limit("key-1", 1, 50)
    assert result.allowed is True
    assert result.remaining == 48


# ─────────────────────────────────────────────
# Origin check
# ─────────────────────────────────────────────
def test_origin_allows_1000_per_hour(limiter):
    results = [limiter.check_origin_limit("1.2.3.4") for _ in range(1001)]

    assert all(r.allowed for r in results[:1000])
    assert results[999].remaining == 0
    assert results[1000].allowed is False
    assert limiter.get_entry("ip:1.2.3.4").count == 1000


def test_origin_uses_hour_window(limiter, clock):
    result = limiter.check_origin_limit("1.2.3.4")

    assert result.reset_at == clock.now + HOUR_WINDOW


def test_origin_limit_is_configurable(clock):
    limiter = RateLimiter(clock=clock, origin_max_requests=2)

    verdicts = [limiter.check_origin_limit("10.0.0.1").allowed for _ in range(3)]

    assert verdicts == [True, True, False]
