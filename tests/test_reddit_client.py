"""RedditClientAdapter 테스트 (httpx.MockTransport)"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from adapters.external.reddit_client import RedditClientAdapter, user_agent
from core.domain.exceptions import ProviderRejectedError, ProviderUnavailableError

REDDIT_CONFIG = {
    "client_id": "client",
    "client_secret": "secret",
    "authorize_url": "https://www.reddit.com/api/v1/authorize",
    "token_url": "https://www.reddit.com/api/v1/access_token",
    "callback_url": "http://localhost:5000/signin/reddit/callback",
    "owner_username": "owner",
}


def make_client(handler, logger):
    return RedditClientAdapter(REDDIT_CONFIG, logger, transport=httpx.MockTransport(handler))


class TestAuthorizationUrl:
    def test_parameters(self, logger):
        client = RedditClientAdapter(REDDIT_CONFIG, logger)

        url = urlparse(client.get_authorization_url("anonymous..1.sig"))
        params = parse_qs(url.query)

        assert url.netloc == "www.reddit.com"
        assert params["response_type"] == ["code"]
        assert params["scope"] == ["identity"]
        assert params["duration"] == ["temporary"]
        assert params["client_id"] == ["client"]
        assert params["redirect_uri"] == [REDDIT_CONFIG["callback_url"]]
        assert params["state"] == ["anonymous..1.sig"]

    def test_user_agent(self):
        assert user_agent("client", "owner").startswith("cmflairs:client:")
        assert user_agent("client", "owner").endswith("(by /u/owner)")


@pytest.mark.asyncio
class TestTokenExchange:
    async def test_success(self, logger):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            seen["body"] = parse_qs(request.content.decode())
            seen["user_agent"] = request.headers["user-agent"]
            return httpx.Response(200, json={"access_token": "abc", "token_type": "bearer"})

        token = await make_client(handler, logger).exchange_code_for_token("code-1")

        assert token == "abc"
        assert seen["auth"].startswith("Basic ")
        assert seen["body"]["grant_type"] == ["authorization_code"]
        assert seen["body"]["code"] == ["code-1"]
        assert seen["user_agent"].startswith("cmflairs:client:")

    async def test_error_body_rejected(self, logger):
        def handler(request):
            return httpx.Response(200, json={"error": "invalid_grant"})

        with pytest.raises(ProviderRejectedError):
            await make_client(handler, logger).exchange_code_for_token("code-1")

    async def test_unauthorized_rejected(self, logger):
        def handler(request):
            return httpx.Response(401, json={"message": "Unauthorized"})

        with pytest.raises(ProviderRejectedError):
            await make_client(handler, logger).exchange_code_for_token("code-1")

    async def test_server_error_unavailable(self, logger):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(ProviderUnavailableError):
            await make_client(handler, logger).exchange_code_for_token("code-1")

    async def test_network_error_unavailable(self, logger):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderUnavailableError):
            await make_client(handler, logger).exchange_code_for_token("code-1")


@pytest.mark.asyncio
class TestIdentity:
    async def test_base36_id_decoded(self, logger):
        def handler(request):
            assert request.url.path == "/api/v1/me"
            assert request.headers["authorization"] == "bearer abc"
            return httpx.Response(200, json={"id": "16", "name": "Foo"})

        identity = await make_client(handler, logger).get_identity("abc")

        assert identity.external_user_id == 42
        assert identity.display_name == "Foo"

    async def test_missing_fields_rejected(self, logger):
        def handler(request):
            return httpx.Response(200, json={"name": "Foo"})

        with pytest.raises(ProviderRejectedError):
            await make_client(handler, logger).get_identity("abc")

    async def test_non_json_rejected(self, logger):
        def handler(request):
            return httpx.Response(200, text="<html>")

        with pytest.raises(ProviderRejectedError):
            await make_client(handler, logger).get_identity("abc")
