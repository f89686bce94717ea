import logging
import uuid
from typing import Any, Callable, Dict, List

from .errors import RateLimitExceeded, ScoreGuardError
from .leaderboard import Leaderboard
from .models import ScoreEntry, now_ms
from .rate_limit import RateLimiter
from .sessions import SessionStore
from .validation import ScoreValidator, parse_submission

logger = logging.getLogger("uvicorn")


class ScoreService:
    """Owns the shared game state: sessions, leaderboard and rate records."""

    def __init__(self, secret: str, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self.rate_limiter = RateLimiter(clock=clock)
        self.sessions = SessionStore(clock=clock)
        self.validator = ScoreValidator(secret)
        self.leaderboard = Leaderboard()

    def start_session(self, client_identity: str) -> Dict[str, Any]:
        if not self.rate_limiter.check_and_consume(client_identity):
            logger.warning("Rate limit hit on start-session")
            raise RateLimitExceeded()

        session = self.sessions.create(client_identity)
        logger.info(f"Created new session {session.token[:8]}")
        return {"sessionToken": session.token, "startTime": session.start_time}

    def submit_score(self, data: Any, client_identity: str) -> Dict[str, Any]:
        try:
            payload = parse_submission(data)
            session = self.sessions.lookup(payload.session_token)
            result = self.validator.validate(session, payload, self._clock())
            # Only the first of several racing submissions gets past this
            self.sessions.mark_completed(result.session_token)
        except ScoreGuardError as exc:
            logger.warning(f"Rejected submission: {exc.reason}")
            raise

        entry = ScoreEntry(
            id=uuid.uuid4().hex,
            player_name=result.player_name,
            final_time=result.final_time,
            miss_count=result.miss_count,
            checkpoints=result.checkpoints,
            timestamp=self._clock(),
            client_identity=client_identity,
        )
        rank = self.leaderboard.insert(entry)
        total = len(self.leaderboard)

        logger.info(f"{entry.player_name} finished in {entry.final_time}ms - rank {rank} of {total}")

        return {"success": True, "rank": rank, "totalPlayers": total}

    def top_scores(self, limit: int) -> List[Dict[str, Any]]:
        return self.leaderboard.list(limit)

    def health(self) -> Dict[str, Any]:
        return {"status": "ok", "sessions": self.sessions.active_count(), "scores": len(self.leaderboard)}

    def sweep(self) -> None:
        """Drop expired sessions and finished rate windows."""
        expired = self.sessions.purge_expired()
        stale = self.rate_limiter.purge_stale()
        if expired or stale:
            logger.info(f"Sweep removed {expired} expired sessions and {stale} rate records")
