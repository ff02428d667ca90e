import logging
import threading

from app.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitReaper:
    """
    Background thread that sweeps expired counters out of a RateLimiter.

    Only bounds memory for keys that stopped receiving traffic; admission
    decisions already treat expired entries as absent.
    """

    def __init__(self, rate_limiter: RateLimiter, interval_seconds: float = 300):
        self._rate_limiter = rate_limiter
        self._interval = interval_seconds
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the reaper background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="rate-limit-reaper",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Rate limit reaper started | interval={self._interval}s")

    def stop(self) -> None:
        """Stop the reaper thread."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    def run_once(self) -> int:
        removed = self._rate_limiter.purge_expired()
        if removed:
            logger.debug(f"Rate limit reaper removed {removed} expired counters")
        return removed

    def _run(self) -> None:
        """Main sweep loop."""
        while not self._stop_event.wait(timeout=self._interval):
            try:
                self.run_once()
            except Exception:
                logger.exception("Rate limit reaper sweep failed")
