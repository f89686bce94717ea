import pytest
from fastapi.testclient import TestClient

from scoreguard import signing
from scoreguard.config import Settings
from scoreguard.main import create_app
from scoreguard.models import SubmissionPayload

TEST_SECRET = "test-secret"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def signed_body(token, player_name="Alice", final_time=45000, miss_count=0, checkpoints=None, secret=TEST_SECRET):
    checkpoints = checkpoints if checkpoints is not None else []
    payload = SubmissionPayload(
        session_token=token,
        player_name=player_name,
        final_time=final_time,
        signature="",
        miss_count=miss_count,
        checkpoints=checkpoints,
    )
    return {
        "sessionToken": token,
        "playerName": player_name,
        "finalTime": final_time,
        "missCount": miss_count,
        "checkpoints": checkpoints,
        "signature": signing.sign(payload, secret),
    }


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def settings():
    return Settings(secret=TEST_SECRET, environment="development", sweep_interval_sec=3600)


@pytest.fixture()
def api_app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture()
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture()
def sign_body():
    return signed_body


@pytest.fixture()
def service(api_app):
    return api_app.state.service
