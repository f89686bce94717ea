import pytest

from scoreguard import signing
from scoreguard.errors import (
    BadSignature,
    InvalidFields,
    InvalidNameLength,
    InvalidSession,
    MissingFields,
    SessionReused,
    SuspiciousTime,
    TimeMismatch,
)
from scoreguard.models import Session
from scoreguard.validation import ScoreValidator, parse_submission

SECRET = "k"
START = 1_000_000


def submission(**overrides):
    body = {
        "sessionToken": "tok",
        "playerName": "Alice",
        "finalTime": 45000,
        "missCount": 1,
        "checkpoints": [1, 2, 3],
    }
    body.update(overrides)
    body.setdefault("signature", signing.sign(parse_submission(dict(body, signature="x")), SECRET))
    return parse_submission(body)


def session(**overrides):
    fields = dict(token="tok", start_time=START, client_identity="ip")
    fields.update(overrides)
    return Session(**fields)


@pytest.fixture()
def validator():
    return ScoreValidator(SECRET)


@pytest.mark.parametrize("missing", ["sessionToken", "playerName", "finalTime", "signature"])
def test_required_fields(missing):
    body = {"sessionToken": "t", "playerName": "n", "finalTime": 40000, "signature": "s"}
    del body[missing]
    with pytest.raises(MissingFields):
        parse_submission(body)
    with pytest.raises(MissingFields):
        parse_submission(dict(body, **{missing: None}))


def test_non_object_body_is_missing_fields():
    with pytest.raises(MissingFields):
        parse_submission(["not", "a", "dict"])


def test_zero_final_time_counts_as_present():
    payload = parse_submission({"sessionToken": "t", "playerName": "n", "finalTime": 0, "signature": "s"})
    assert payload.final_time == 0
    assert payload.miss_count == 0
    assert payload.checkpoints == []


@pytest.mark.parametrize("override", [
    {"finalTime": "45000"},
    {"finalTime": True},
    {"finalTime": float("nan")},
    {"missCount": -1},
    {"missCount": 1.5},
    {"missCount": "2"},
    {"checkpoints": "abc"},
    {"playerName": 42},
])
def test_wrong_types_are_invalid_fields(override):
    body = {"sessionToken": "t", "playerName": "n", "finalTime": 40000, "signature": "s"}
    body.update(override)
    with pytest.raises(InvalidFields):
        parse_submission(body)


def test_valid_submission_passes(validator):
    result = validator.validate(session(), submission(), START + 44000)
    assert result.player_name == "Alice"
    assert result.final_time == 45000
    assert result.miss_count == 1
    assert result.checkpoints == (1, 2, 3)


def test_missing_session(validator):
    with pytest.raises(InvalidSession):
        validator.validate(None, submission(), START)


def test_completed_session(validator):
    with pytest.raises(SessionReused):
        validator.validate(session(completed=True), submission(), START + 45000)


def test_bad_signature(validator):
    with pytest.raises(BadSignature):
        validator.validate(session(), submission(signature="0" * 64), START + 45000)


def test_reuse_is_checked_before_signature(validator):
    with pytest.raises(SessionReused):
        validator.validate(session(completed=True), submission(signature="bad"), START + 45000)


@pytest.mark.parametrize("elapsed,accepted", [
    (35000, True),
    (34999, False),
    (55000, True),
    (55001, False),
])
def test_clock_skew_boundary(validator, elapsed, accepted):
    payload = submission()
    if accepted:
        validator.validate(session(), payload, START + elapsed)
    else:
        with pytest.raises(TimeMismatch):
            validator.validate(session(), payload, START + elapsed)


def test_suspicious_time_floor(validator):
    with pytest.raises(SuspiciousTime):
        validator.validate(session(), submission(finalTime=29999), START + 29999)
    result = validator.validate(session(), submission(finalTime=30000), START + 30000)
    assert result.final_time == 30000


def test_time_mismatch_wins_over_suspicious_time(validator):
    with pytest.raises(TimeMismatch):
        validator.validate(session(), submission(finalTime=1000), START + 45000)


def test_blank_name_rejected(validator):
    with pytest.raises(InvalidNameLength):
        validator.validate(session(), submission(playerName="   "), START + 45000)


def test_long_name_truncated_to_twenty(validator):
    result = validator.validate(session(), submission(playerName="x" * 35), START + 45000)
    assert result.player_name == "x" * 20


def test_float_final_time_normalized(validator):
    result = validator.validate(session(), submission(finalTime=45000.0), START + 45000)
    assert result.final_time == 45000
    assert isinstance(result.final_time, int)


def test_non_string_token_is_invalid_session():
    with pytest.raises(InvalidSession):
        parse_submission({"sessionToken": 123, "playerName": "n", "finalTime": 40000, "signature": "s"})


def test_fractional_final_time_kept(validator):
    result = validator.validate(session(), submission(finalTime=45000.5), START + 45000)
    assert result.final_time == 45000.5
