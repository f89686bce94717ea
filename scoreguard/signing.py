"""HMAC-SHA256 tags over submission payloads.

Client and server must hash the same bytes, so the payload is reduced to a
canonical JSON document: the five signed fields under their wire names,
keys sorted, no whitespace, and integral floats written as integers.
"""
import hashlib
import hmac
import json
from typing import Any

from .models import SubmissionPayload


def _stable_number(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [_stable_number(item) for item in value]
    if isinstance(value, dict):
        return {key: _stable_number(item) for key, item in value.items()}
    return value


def canonicalize(payload: SubmissionPayload) -> bytes:
    document = {
        "sessionToken": payload.session_token,
        "playerName": payload.player_name,
        "finalTime": _stable_number(payload.final_time),
        "missCount": _stable_number(payload.miss_count),
        "checkpoints": _stable_number(list(payload.checkpoints)),
    }
    return json.dumps(
        document, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def sign(payload: SubmissionPayload, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), canonicalize(payload), hashlib.sha256).hexdigest()


def verify(payload: SubmissionPayload, tag: Any, secret: str) -> bool:
    if not isinstance(tag, str):
        return False
    expected = sign(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), tag.lower().encode("utf-8"))
