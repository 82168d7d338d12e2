import threading
import time
from collections import defaultdict, deque
from collections.abc import Callable


class RateLimiter:
    """Simple in-memory sliding-window rate limiter keyed by caller identity.

    Identifiers with no requests left in the window are swept at most once
    per window from ``is_allowed``, so idle users do not accumulate.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._last_sweep = clock()
        self.requests: dict[str, deque] = defaultdict(deque)

    def is_allowed(self, identifier: str) -> tuple[bool, int]:
        """Check if a request is allowed. Returns (allowed, seconds until a slot frees up)."""
        with self._lock:
            now = self._clock()
            window_start = now - self.window_seconds
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(window_start)
                self._last_sweep = now

            request_times = self.requests[identifier]
            while request_times and request_times[0] <= window_start:
                request_times.popleft()

            if len(request_times) < self.max_requests:
                request_times.append(now)
                return True, 0

            retry_after = request_times[0] + self.window_seconds - now
            return False, max(1, int(retry_after + 0.999))

    def cleanup_expired(self) -> None:
        """Drop identifiers with no requests left in the window."""
        with self._lock:
            self._sweep(self._clock() - self.window_seconds)

    def _sweep(self, window_start: float) -> None:
        # Caller holds the lock
        for identifier in list(self.requests.keys()):
            request_times = self.requests[identifier]
            while request_times and request_times[0] <= window_start:
                request_times.popleft()
            if not request_times:
                del self.requests[identifier]

    def reset(self) -> None:
        with self._lock:
            self.requests.clear()
