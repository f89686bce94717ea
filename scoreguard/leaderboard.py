import bisect
import threading
from typing import Any, Dict, List, Optional

from .models import ScoreEntry

LEADERBOARD_CAPACITY = 100


class Leaderboard:
    """Top-N entries ordered by ascending final time.

    Equal times keep submission order. Anything past ``capacity`` is dropped
    for good on every insert.
    """

    def __init__(self, capacity: int = LEADERBOARD_CAPACITY):
        self.capacity = capacity
        self._entries: List[ScoreEntry] = []
        self._times: List[float] = []  # parallel sort keys for bisect
        self._lock = threading.Lock()

    def insert(self, entry: ScoreEntry) -> Optional[int]:
        """Add an entry and return its 1-based rank, or None if it didn't make the cut."""
        with self._lock:
            position = bisect.bisect_right(self._times, entry.final_time)
            self._entries.insert(position, entry)
            self._times.insert(position, entry.final_time)
            del self._entries[self.capacity:]
            del self._times[self.capacity:]
            if position >= self.capacity:
                return None
            return position + 1

    def list(self, limit: int = LEADERBOARD_CAPACITY) -> List[Dict[str, Any]]:
        limit = max(0, min(limit, self.capacity))
        with self._lock:
            top = self._entries[:limit]
        return [entry.public_view(rank) for rank, entry in enumerate(top, start=1)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
