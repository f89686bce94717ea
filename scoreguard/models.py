import time
from dataclasses import dataclass, field
from typing import Any, Dict, List


def now_ms() -> int:
    """Wall clock in epoch milliseconds, the unit clients report times in."""
    return int(time.time() * 1000)


@dataclass
class Session:
    token: str
    start_time: int  # epoch ms
    client_identity: str
    completed: bool = False


@dataclass
class SubmissionPayload:
    session_token: str
    player_name: str
    final_time: Any  # int or float ms, normalized during validation
    signature: str
    miss_count: Any = 0
    checkpoints: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class ScoreEntry:
    id: str
    player_name: str
    final_time: float  # ms; integral values are stored as int
    miss_count: int
    checkpoints: tuple
    timestamp: int
    client_identity: str  # audit only, never serialized

    def public_view(self, rank: int) -> Dict[str, Any]:
        return {
            "rank": rank,
            "playerName": self.player_name,
            "finalTime": self.final_time,
            "missCount": self.miss_count,
            "timestamp": self.timestamp,
        }


@dataclass
class RateRecord:
    count: int
    window_reset_time: int
