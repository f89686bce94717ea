import secrets
import threading
from dataclasses import replace
from typing import Callable, Dict

from .errors import InvalidSession, SessionReused
from .models import Session, now_ms

SESSION_TTL_MS = 10 * 60 * 1000  # 10 minutes
TOKEN_BYTES = 32


class SessionStore:
    """Single-use game sessions with a fixed time-to-live.

    Expired sessions are dropped lazily on access and by ``purge_expired``,
    which the background sweeper calls. Every read and write goes through
    one lock, so expiry never races a completion half way.
    """

    def __init__(self, ttl_ms: int = SESSION_TTL_MS, clock: Callable[[], int] = now_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def _expired(self, session: Session, now: int) -> bool:
        return now - session.start_time >= self.ttl_ms

    def _get_live(self, token: str, now: int) -> Session:
        # Caller holds the lock
        session = self._sessions.get(token)
        if session is None:
            raise InvalidSession()
        if self._expired(session, now):
            del self._sessions[token]
            raise InvalidSession()
        return session

    def create(self, client_identity: str) -> Session:
        now = self._clock()
        with self._lock:
            token = secrets.token_hex(TOKEN_BYTES)
            while token in self._sessions:
                token = secrets.token_hex(TOKEN_BYTES)
            session = Session(token=token, start_time=now, client_identity=client_identity)
            self._sessions[token] = session
            return replace(session)

    def lookup(self, token: str) -> Session:
        if not isinstance(token, str):
            raise InvalidSession()
        with self._lock:
            return replace(self._get_live(token, self._clock()))

    def mark_completed(self, token: str) -> Session:
        with self._lock:
            session = self._get_live(token, self._clock())
            if session.completed:
                raise SessionReused()
            session.completed = True
            return replace(session)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                token for token, session in self._sessions.items()
                if self._expired(session, now)
            ]
            for token in expired:
                del self._sessions[token]
        return len(expired)

    def active_count(self) -> int:
        """Sessions still open for a submission: not expired, not completed."""
        now = self._clock()
        with self._lock:
            return sum(
                1 for session in self._sessions.values()
                if not session.completed and not self._expired(session, now)
            )
