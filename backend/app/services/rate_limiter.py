"""
In-memory fixed-window admission control for the partner API.

Counters live in process memory only. Every worker process keeps its own
independent store, so running N instances multiplies the effective quota
by N, and a restart silently resets every counter.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

MINUTE_WINDOW = timedelta(minutes=1)
HOUR_WINDOW = timedelta(hours=1)
ORIGIN_MAX_REQUESTS = 1000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CounterEntry:
    count: int
    reset_at: datetime


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: datetime
    retry_after: int | None = None


def _retry_after(reset_at: datetime, now: datetime) -> int:
    return max(0, math.ceil((reset_at - now).total_seconds()))


class RateLimiter:
    """
    Fixed-window counter store keyed by opaque strings.

    A window opens on the first request for a key and closes ``window``
    later; the burst of up to twice the quota across a boundary is accepted.
    All reads and writes of an entry happen under ``self._lock``.
    """

    def __init__(
        self,
        clock: Clock = utcnow,
        origin_max_requests: int = ORIGIN_MAX_REQUESTS,
    ):
        self._clock = clock
        self._origin_max_requests = origin_max_requests
        self._entries: dict[str, CounterEntry] = {}
        self._lock = Lock()

    def now(self) -> datetime:
        return self._clock()

    def check_limit(
        self,
        key: str,
        window: timedelta,
        max_requests: int,
    ) -> RateLimitResult:
        now = self._clock()

        # Misconfigured quotas deny instead of admitting unlimited traffic
        if max_requests <= 0 or window <= timedelta(0):
            logger.warning(
                f"Invalid rate limit config | key={key} "
                f"window={window.total_seconds()}s max_requests={max_requests}"
            )
            reset_at = now + max(window, timedelta(0))
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_at=reset_at,
                retry_after=_retry_after(reset_at, now),
            )

        with self._lock:
            entry = self._entries.get(key)

            if entry is not None and entry.reset_at < now:
                del self._entries[key]
                entry = None

            if entry is None:
                reset_at = now + window
                self._entries[key] = CounterEntry(count=1, reset_at=reset_at)
                return RateLimitResult(
                    allowed=True,
                    remaining=max_requests - 1,
                    reset_at=reset_at,
                )

            if entry.count >= max_requests:
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_at=entry.reset_at,
                    retry_after=_retry_after(entry.reset_at, now),
                )

            entry = replace(entry, count=entry.count + 1)
            self._entries[key] = entry

            return RateLimitResult(
                allowed=True,
                remaining=max_requests - entry.count,
                reset_at=entry.reset_at,
            )

    def check_identity_limit(
        self,
        identity: str,
        per_minute_max: int,
        per_hour_max: int,
    ) -> RateLimitResult:
        """
        Minute gate first, then hour gate.

        A minute denial never touches the hour counter. A request admitted by
        the minute gate has already been counted there even if the hour gate
        then denies it.
        """
        minute_result = self.check_limit(
            f"{identity}:minute", MINUTE_WINDOW, per_minute_max
        )
        if not minute_result.allowed:
            return minute_result

        return self.check_limit(f"{identity}:hour", HOUR_WINDOW, per_hour_max)

    def check_origin_limit(self, address: str) -> RateLimitResult:
        return self.check_limit(
            f"ip:{address}", HOUR_WINDOW, self._origin_max_requests
        )

    def purge_expired(self) -> int:
        """Delete entries whose window has closed. Returns the number removed."""
        with self._lock:
            keys = list(self._entries)

        removed = 0
        for key in keys:
            # Writers may run between entries; recheck each one under the lock
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None and entry.reset_at < self._clock():
                    del self._entries[key]
                    removed += 1

        return removed

    def get_entry(self, key: str) -> CounterEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            return replace(entry) if entry is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def reset(self) -> None:
        """
        Test isolation hook.
        Clears in-memory rate tracking.
        """
        with self._lock:
            self._entries.clear()
