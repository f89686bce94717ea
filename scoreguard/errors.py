from typing import Optional


class ScoreGuardError(Exception):
    """Base error; carries the HTTP status and a client-safe message."""

    status_code = 400
    reason = "error"
    message = "Request rejected"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class RateLimitExceeded(ScoreGuardError):
    status_code = 429
    reason = "rate-limited"
    message = "Too many sessions started. Try again later."


class ValidationError(ScoreGuardError):
    pass


class MissingFields(ValidationError):
    reason = "missing-fields"
    message = "Missing required fields"


class InvalidFields(ValidationError):
    reason = "invalid-fields"
    message = "Invalid field types"


class InvalidSession(ValidationError):
    status_code = 401
    reason = "invalid-session"
    message = "Invalid or expired session"


class SessionReused(ValidationError):
    reason = "session-reused"
    message = "Session already used"


class BadSignature(ValidationError):
    status_code = 401
    reason = "bad-signature"
    message = "Invalid signature"


class TimeMismatch(ValidationError):
    reason = "time-mismatch"
    message = "Time mismatch detected"


class SuspiciousTime(ValidationError):
    reason = "suspicious-time"
    message = "Suspicious completion time"


class InvalidNameLength(ValidationError):
    reason = "invalid-name-length"
    message = "Player name must be 1-20 characters"
