import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from . import signing
from .errors import (
    BadSignature,
    InvalidFields,
    InvalidNameLength,
    InvalidSession,
    MissingFields,
    SessionReused,
    SuspiciousTime,
    TimeMismatch,
)
from .models import Session, SubmissionPayload

logger = logging.getLogger("uvicorn")

MAX_CLOCK_SKEW_MS = 10_000
MIN_FINAL_TIME_MS = 30_000
MAX_PLAYER_NAME_LENGTH = 20

REQUIRED_FIELDS = ("sessionToken", "playerName", "finalTime", "signature")


@dataclass(frozen=True)
class ValidationResult:
    session_token: str
    player_name: str  # stripped and truncated, ready to store
    final_time: float
    miss_count: int
    checkpoints: Tuple[Any, ...]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_int(value: float) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def parse_submission(data: Any) -> SubmissionPayload:
    """Turn a decoded JSON body into a payload, or raise MissingFields/InvalidFields."""
    if not isinstance(data, dict):
        raise MissingFields()
    if any(data.get(name) is None for name in REQUIRED_FIELDS):
        raise MissingFields()

    miss_count = data.get("missCount")
    if miss_count is None:
        miss_count = 0
    checkpoints = data.get("checkpoints")
    if checkpoints is None:
        checkpoints = []

    # Non-string tokens can never name a session
    if not isinstance(data["sessionToken"], str):
        raise InvalidSession()
    if not all(isinstance(data[name], str) for name in ("playerName", "signature")):
        raise InvalidFields()
    final_time = data["finalTime"]
    if not _is_number(final_time) or (isinstance(final_time, float) and not math.isfinite(final_time)):
        raise InvalidFields()
    if not _is_number(miss_count) or not isinstance(_as_int(miss_count), int) or miss_count < 0:
        raise InvalidFields()
    if not isinstance(checkpoints, list):
        raise InvalidFields()

    return SubmissionPayload(
        session_token=data["sessionToken"],
        player_name=data["playerName"],
        final_time=data["finalTime"],
        signature=data["signature"],
        miss_count=miss_count,
        checkpoints=checkpoints,
    )


class ScoreValidator:
    """Anti-cheat checks for one submission against its session.

    Checks run in a fixed order and the first failure wins. Nothing is
    mutated here; consuming the session is the caller's job once this
    returns.
    """

    def __init__(
        self,
        secret: str,
        max_skew_ms: int = MAX_CLOCK_SKEW_MS,
        min_final_time_ms: int = MIN_FINAL_TIME_MS,
    ):
        self._secret = secret
        self.max_skew_ms = max_skew_ms
        self.min_final_time_ms = min_final_time_ms

    def validate(
        self, session: Optional[Session], payload: SubmissionPayload, now: int
    ) -> ValidationResult:
        if session is None or session.token != payload.session_token:
            raise InvalidSession()

        if session.completed:
            raise SessionReused()

        if not signing.verify(payload, payload.signature, self._secret):
            raise BadSignature()

        final_time = _as_int(payload.final_time)
        server_elapsed = now - session.start_time
        if abs(server_elapsed - final_time) > self.max_skew_ms:
            logger.warning(
                f"Time mismatch for session {session.token[:8]}: "
                f"server {server_elapsed}ms, client {final_time}ms"
            )
            raise TimeMismatch()

        if final_time < self.min_final_time_ms:
            raise SuspiciousTime()

        player_name = payload.player_name.strip()
        if not player_name:
            raise InvalidNameLength()

        return ValidationResult(
            session_token=session.token,
            player_name=player_name[:MAX_PLAYER_NAME_LENGTH],
            final_time=final_time,
            miss_count=_as_int(payload.miss_count),
            checkpoints=tuple(payload.checkpoints),
        )
