# Ensure project root is on sys.path so 'action_auth' and 'tests' are importable
# when running pytest from environments that don't automatically include it.
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def clean_token_environment(monkeypatch):
    """Remove runner variables that would change token resolution."""
    for name in (
        "OVERRIDE_GITHUB_TOKEN",
        "GITHUB_API_URL",
        "GITHUB_GRAPHQL_URL",
        "GITHUB_OUTPUT",
        "ACTIONS_ID_TOKEN_REQUEST_URL",
        "ACTIONS_ID_TOKEN_REQUEST_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def fake_session():
    """Fake HTTP session answering the exchange endpoint with a mock token."""
    from tests.fixtures.http_fixtures import FakeResponse, FakeSession

    return FakeSession(responder=lambda call: FakeResponse(200, {"token": "mock-app-token"}))


@pytest.fixture
def identity_provider():
    from tests.fixtures.http_fixtures import StaticIdentityProvider

    return StaticIdentityProvider()


@pytest.fixture
def token_manager(fake_session, identity_provider):
    """TokenManager wired to fakes, with backoff sleeps disabled."""
    from action_auth.auth_token.manager import TokenManager
    from action_auth.config.model import TokenSettings
    from tests.fixtures.http_fixtures import no_sleep

    manager = TokenManager(
        fake_session,
        TokenSettings(),
        identity_provider=identity_provider,
        sleep=no_sleep,
    )
    yield manager
    manager.reset()
