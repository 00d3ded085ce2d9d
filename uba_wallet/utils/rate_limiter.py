import time
import threading
from typing import Dict
from dataclasses import dataclass, field
import logging

from uba_wallet.core.exceptions import RateLimitError

logger = logging.getLogger("uba_wallet.RateLimiter")

@dataclass
class RateLimitData:
    """Sliding window of request timestamps for one identifier"""
    requests: list = field(default_factory=list)
    last_activity: float = field(default_factory=time.time)

class RateLimiter:
    def __init__(self, max_requests: int, window: float):
        """
        Allow at most ``max_requests`` per ``window`` seconds per identifier
        (a relay URL for the relay store).
        """
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window <= 0:
            raise ValueError("window must be positive")

        self.max_requests = max_requests
        self.window = window
        self.rate_limits: Dict[str, RateLimitData] = {}
        self._lock = threading.Lock()

        self.total_checked = 0
        self.total_limited = 0

    def is_allowed(self, identifier: str) -> bool:
        """Record a request; raise RateLimitError when over the limit"""
        now = time.time()
        with self._lock:
            self.total_checked += 1
            data = self.rate_limits.setdefault(identifier, RateLimitData())
            data.requests = [t for t in data.requests if now - t < self.window]
            data.last_activity = now

            if len(data.requests) >= self.max_requests:
                self.total_limited += 1
                logger.warning(f"Rate limit exceeded for {identifier}")
                raise RateLimitError(f"Rate limit exceeded for {identifier}")

            data.requests.append(now)
            return True

    def remaining(self, identifier: str) -> int:
        now = time.time()
        with self._lock:
            data = self.rate_limits.get(identifier)
            if data is None:
                return self.max_requests
            active = sum(1 for t in data.requests if now - t < self.window)
            return max(0, self.max_requests - active)

    def cleanup(self) -> int:
        """Drop identifiers idle for longer than one window"""
        now = time.time()
        with self._lock:
            stale = [key for key, data in self.rate_limits.items()
                     if now - data.last_activity >= self.window]
            for key in stale:
                del self.rate_limits[key]
        if stale:
            logger.debug(f"Cleaned up {len(stale)} rate limit entries")
        return len(stale)

    def reset(self, identifier: str) -> None:
        with self._lock:
            self.rate_limits.pop(identifier, None)

    def get_stats(self) -> Dict[str, int]:
        return {
            'tracked': len(self.rate_limits),
            'total_checked': self.total_checked,
            'total_limited': self.total_limited,
        }
