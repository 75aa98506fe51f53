from __future__ import annotations

from typing import Any

import aiohttp
import pytest

from tribe_client.api.client import AuthenticatedClient
from tribe_client.config import ClientConfig
from tribe_client.constants import MSG_NETWORK, MSG_TIMEOUT
from tribe_client.errors.internal import (
    ClientRequestError,
    ConfigurationError,
    ErrorKind,
    NetworkUnreachableError,
    RequestTimeoutError,
    ServerError,
)
from tests.fixtures.api_responses import SERVER_ERROR_BODY
from tests.fixtures.fake_http import FakeResponse, FakeSessionProvider


def respond(status: int, payload: Any = None):
    async def _handler(method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
        return FakeResponse(status, payload)

    return _handler


def fail_with(exc: BaseException):
    async def _handler(method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
        raise exc

    return _handler


class _BrokenLookupProvider(FakeSessionProvider):
    async def get_current_token(self) -> str | None:
        raise RuntimeError("identity SDK not loaded")


class TestOutboundStage:
    @pytest.mark.asyncio
    async def test_success_attaches_bearer_and_defaults(self, make_client, provider):
        client, session = make_client(provider, respond(200, {"success": True, "user": {}}))

        response = await client.get("/api/user/data")

        assert response.status == 200
        assert response.success is True
        sent = session.requests[0]
        assert sent.method == "GET"
        assert sent.url == "https://api.tribe.test/api/user/data"
        assert sent.authorization == "Bearer T1"
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers["Content-Type"] == "application/json"
        assert sent.kwargs["timeout"].total == 15.0

    @pytest.mark.asyncio
    async def test_json_body_and_params(self, make_client, provider):
        client, session = make_client(provider, respond(200, {"success": True}))

        await client.post("/api/user/discover", {"input": "tribe"}, params={"page": 2})

        sent = session.requests[0]
        assert sent.kwargs["json"] == {"input": "tribe"}
        assert sent.kwargs["params"] == {"page": 2}
        assert "data" not in sent.kwargs

    @pytest.mark.asyncio
    async def test_multipart_body_omits_content_type(self, make_client, provider):
        client, session = make_client(provider, respond(200, {"success": True}))
        form = aiohttp.FormData()
        form.add_field("full_name", "Test User")

        await client.put("/api/user/update", form)

        sent = session.requests[0]
        assert sent.kwargs["data"] is form
        assert "Content-Type" not in sent.headers
        assert sent.authorization == "Bearer T1"

    @pytest.mark.asyncio
    async def test_caller_headers_override_defaults(self, make_client, provider):
        client, session = make_client(provider, respond(200, {}))

        await client.get("/api/raw", headers={"Accept": "text/plain", "X-Trace": "abc"})

        sent = session.requests[0]
        assert sent.headers["Accept"] == "text/plain"
        assert sent.headers["X-Trace"] == "abc"

    @pytest.mark.asyncio
    async def test_lowercase_overrides_replace_defaults_on_the_wire(self, make_client, provider):
        client, session = make_client(provider, respond(200, {}))

        await client.get(
            "/x",
            headers={"authorization": "Bearer caller", "content-type": "text/plain"},
        )

        sent = session.requests[0].headers
        auth = [v for k, v in sent.items() if k.lower() == "authorization"]
        content_type = [v for k, v in sent.items() if k.lower() == "content-type"]
        assert auth == ["Bearer T1"]
        assert content_type == ["text/plain"]

    @pytest.mark.asyncio
    async def test_missing_token_sends_without_bearer(self, make_client, notifier):
        provider = FakeSessionProvider(token=None)
        client, session = make_client(provider, respond(200, {"success": True}))

        await client.get("/api/public")

        assert session.requests[0].authorization is None
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_failing_token_lookup_is_not_terminal(self, make_client, notifier):
        provider = _BrokenLookupProvider()
        client, session = make_client(provider, respond(200, {"success": True}))

        response = await client.get("/api/public")

        assert response.status == 200
        assert session.requests[0].authorization is None
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_per_call_timeout_override(self, make_client, provider):
        client, session = make_client(provider, respond(200, {}))

        await client.get("/api/post/feed", timeout=2.5)

        assert session.requests[0].kwargs["timeout"].total == 2.5


class TestResponseDecoding:
    @pytest.mark.asyncio
    async def test_no_content(self, make_client, provider):
        client, _ = make_client(provider, respond(204))
        response = await client.delete("/api/post/1")
        assert response.status == 204
        assert response.data is None

    @pytest.mark.asyncio
    async def test_non_json_body_kept_as_text(self, make_client, provider):
        client, _ = make_client(provider, respond(200, "pong"))
        response = await client.get("/health")
        assert response.data == "pong"
        assert response.success is False

    @pytest.mark.asyncio
    async def test_undecodable_body_kept_as_replaced_text(self, make_client, provider):
        client, _ = make_client(provider, respond(200, b"ok \xff\xfe"))
        response = await client.get("/health")
        assert response.data == "ok \ufffd\ufffd"


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connection_error_is_network_unreachable(self, make_client, provider, notifier):
        cause = aiohttp.ClientConnectionError("connection refused")
        client, session = make_client(provider, fail_with(cause))

        with pytest.raises(NetworkUnreachableError) as exc_info:
            await client.get("/api/post/feed")

        assert exc_info.value.kind is ErrorKind.NETWORK_UNREACHABLE
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        assert len(session.requests) == 1
        assert provider.renew_calls == 0
        assert notifier.messages == [MSG_NETWORK]

    @pytest.mark.asyncio
    async def test_server_timeout_is_timeout(self, make_client, provider, notifier):
        client, _ = make_client(provider, fail_with(aiohttp.ServerTimeoutError("read timeout")))

        with pytest.raises(RequestTimeoutError) as exc_info:
            await client.get("/api/post/feed")

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert provider.renew_calls == 0
        assert notifier.messages == [MSG_TIMEOUT]

    @pytest.mark.asyncio
    async def test_os_error_is_network_unreachable(self, make_client, provider):
        client, _ = make_client(provider, fail_with(OSError("dns failure")))
        with pytest.raises(NetworkUnreachableError):
            await client.get("/api/post/feed")


class TestHttpErrors:
    @pytest.mark.asyncio
    async def test_server_error_uses_body_message(self, make_client, provider, notifier):
        client, _ = make_client(provider, respond(503, SERVER_ERROR_BODY))

        with pytest.raises(ServerError) as exc_info:
            await client.get("/api/post/feed")

        assert exc_info.value.status == 503
        assert exc_info.value.message == "Database unavailable"
        assert notifier.messages == ["Database unavailable"]

    @pytest.mark.asyncio
    async def test_client_error_falls_back_to_status_message(self, make_client, provider, notifier):
        client, _ = make_client(provider, respond(404))

        with pytest.raises(ClientRequestError) as exc_info:
            await client.get("/api/missing")

        assert exc_info.value.kind is ErrorKind.CLIENT_ERROR
        assert exc_info.value.message == "Request failed with status code 404"
        assert notifier.messages == ["Request failed with status code 404"]

    @pytest.mark.asyncio
    async def test_forbidden_never_triggers_renewal(self, make_client, provider):
        client, session = make_client(provider, respond(403, {"message": "Forbidden"}))

        with pytest.raises(ClientRequestError):
            await client.post("/api/user/accept", {"id": "u1"})

        assert provider.renew_calls == 0
        assert len(session.requests) == 1

    @pytest.mark.asyncio
    async def test_report_is_idempotent_per_error(self, make_client, provider, notifier):
        client, _ = make_client(provider, respond(500))

        with pytest.raises(ServerError) as exc_info:
            await client.get("/api/post/feed")

        assert client.report(exc_info.value) is False
        assert len(notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_undecodable_error_body_is_normalised(self, make_client, provider, notifier):
        client, _ = make_client(provider, respond(500, b"\xff\xfe\xfa bad"))

        with pytest.raises(ServerError) as exc_info:
            await client.get("/x")

        assert exc_info.value.status == 500
        assert exc_info.value.message == "Request failed with status code 500"
        assert notifier.messages == ["Request failed with status code 500"]


class TestLifecycle:
    def test_invalid_config_rejected(self, provider):
        with pytest.raises(ConfigurationError):
            AuthenticatedClient(provider, config=ClientConfig(base_url="ftp://nope"))

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self, make_client, provider):
        client, session = make_client(provider, respond(200, {}))
        async with client:
            await client.get("/api/user/data")
        assert session.closed is False

    @pytest.mark.asyncio
    async def test_owned_session_created_lazily_and_closed(self, provider, client_config):
        client = AuthenticatedClient(provider, config=client_config)
        http_session = client._get_http_session()
        assert isinstance(http_session, aiohttp.ClientSession)
        assert client._get_http_session() is http_session

        await client.close()

        assert http_session.closed is True
