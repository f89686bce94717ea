import threading
from typing import Callable, Dict

from .models import RateRecord, now_ms

RATE_LIMIT_WINDOW_MS = 60 * 60 * 1000  # 1 hour
RATE_LIMIT_MAX_REQUESTS = 10


class RateLimiter:
    """Fixed-window request counter per client identity."""

    def __init__(
        self,
        window_ms: int = RATE_LIMIT_WINDOW_MS,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        clock: Callable[[], int] = now_ms,
    ):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._records: Dict[str, RateRecord] = {}
        self._lock = threading.Lock()

    def check_and_consume(self, identity: str) -> bool:
        now = self._clock()
        with self._lock:
            record = self._records.get(identity)
            if record is None:
                record = RateRecord(count=0, window_reset_time=now + self.window_ms)
                self._records[identity] = record
            elif now > record.window_reset_time:
                record.count = 0
                record.window_reset_time = now + self.window_ms

            if record.count >= self.max_requests:
                return False

            record.count += 1
            return True

    def purge_stale(self) -> int:
        """Drop records whose window already ended. Returns how many went."""
        now = self._clock()
        with self._lock:
            stale = [
                identity for identity, record in self._records.items()
                if now > record.window_reset_time
            ]
            for identity in stale:
                del self._records[identity]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
