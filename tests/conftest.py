import os

import pytest

from tribe_client.api.client import AuthenticatedClient
from tribe_client.config import ClientConfig
from tribe_client.logging_config import error_aggregator
from tests.fixtures.fake_http import (
    FakeSession,
    FakeSessionProvider,
    RecordingNotifier,
    token_gate,
)

# Keep test output concise; event context is only rendered in debug mode.
os.environ.setdefault("DEBUG", "false")

BASE_URL = "https://api.tribe.test"


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Isolate structured error counts between tests."""
    error_aggregator.reset()
    yield
    error_aggregator.reset()


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, timeout_seconds=15.0, renewal_timeout_seconds=5.0)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def provider() -> FakeSessionProvider:
    return FakeSessionProvider(token="T1", renewed="T2")


@pytest.fixture
def make_client(client_config, notifier):
    """Factory building an AuthenticatedClient over a FakeSession."""

    def _make(session_provider, handler=None, **kwargs):
        session = FakeSession(handler or token_gate({"T1"}))
        client = AuthenticatedClient(
            session_provider,
            config=kwargs.pop("config", client_config),
            notifier=kwargs.pop("notifier", notifier),
            http_session=session,  # type: ignore[arg-type]
            **kwargs,
        )
        return client, session

    return _make
