"""FastAPI 라우터 테스트 (TestClient)"""

import asyncio
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

import web_server
from adapters.db.database import initialize_database
from adapters.factory import AdapterFactory
from adapters.web.dependencies import get_factory
from config.adapters import get_config
from core.domain.exceptions import ConflictingAccountError, ProviderUnavailableError
from tests.fakes import FakeIdentityProvider, FakeStatsClient, RecordingLogger
from web_server import app, status_code_for


class RouteTestFactory(AdapterFactory):
    """외부 공급자를 가짜로 바꾼 팩토리"""

    def __init__(self):
        super().__init__(get_config())
        self.identity_provider = FakeIdentityProvider()
        self.stats_client = FakeStatsClient()

    def create_identity_provider(self):
        return self.identity_provider

    def create_stats_client(self):
        return self.stats_client


@pytest.fixture
def factory():
    return RouteTestFactory()


@pytest.fixture
def client(factory):
    app.dependency_overrides[get_factory] = lambda: factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def sign_in(client):
    """익명 -> 전환 -> 세션 순서로 로그인하고 세션 토큰을 반환합니다."""
    anonymous = client.get("/signin/anonymous").json()["token"]

    callback = client.get(
        "/signin/reddit/callback",
        params={"code": "code-1", "state": anonymous},
        follow_redirects=False,
    )
    params = parse_qs(urlparse(callback.headers["location"]).query)

    response = client.get(
        "/signin/upgrade",
        params={"code": params["code"][0], "anonymous": anonymous},
        headers=bearer(params["token"][0]),
    )
    assert response.status_code == 200
    return response.json()["token"]


class TestSignin:
    def test_anonymous_token(self, client):
        response = client.get("/signin/anonymous")

        assert response.status_code == 200
        assert response.json()["kind"] == "anonymous"
        assert response.json()["token"].startswith("anonymous..")

    def test_provider_redirect(self, client):
        anonymous = client.get("/signin/anonymous").json()["token"]

        response = client.get("/signin/reddit", params={"token": anonymous}, follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"].endswith(f"state={anonymous}")

    def test_provider_redirect_requires_anonymous_token(self, client):
        response = client.get("/signin/reddit", params={"token": "garbage"}, follow_redirects=False)

        assert response.status_code == 401

    def test_unknown_provider(self, client):
        anonymous = client.get("/signin/anonymous").json()["token"]

        response = client.get("/signin/github", params={"token": anonymous}, follow_redirects=False)

        assert response.status_code == 404

    def test_callback_redirects_to_pages(self, client):
        response = client.get(
            "/signin/reddit/callback",
            params={"code": "code-1", "state": "state-1"},
            follow_redirects=False,
        )

        location = urlparse(response.headers["location"])
        params = parse_qs(location.query)
        assert response.status_code == 302
        assert f"{location.scheme}://{location.netloc}/" == get_config().get_pages_origin()
        assert location.path == "/signin/reddit"
        assert params["code"] == ["code-1"]
        assert params["token"][0].startswith("transition.")

    def test_callback_error_redirects_with_error(self, client):
        response = client.get(
            "/signin/reddit/callback",
            params={"error": "access_denied", "state": "state-1"},
            follow_redirects=False,
        )

        params = parse_qs(urlparse(response.headers["location"]).query)
        assert response.status_code == 302
        assert params == {"error": ["access_denied"]}

    def test_full_flow_creates_session(self, client, factory):
        session_token = sign_in(client)

        response = client.get("/user/me", headers=bearer(session_token))

        assert response.status_code == 200
        assert response.json()["display_name"] == "Foo"
        assert factory.identity_provider.exchanged_codes == ["code-1"]

    def test_upgrade_with_other_anonymous_token(self, client):
        anonymous = client.get("/signin/anonymous").json()["token"]
        transition = client.get(
            "/signin/reddit/callback",
            params={"code": "code-1", "state": anonymous + "x"},
            follow_redirects=False,
        )
        params = parse_qs(urlparse(transition.headers["location"]).query)

        response = client.get(
            "/signin/upgrade",
            params={"code": "code-1", "anonymous": anonymous},
            headers=bearer(params["token"][0]),
        )

        assert response.status_code == 400

    def test_upgrade_provider_unavailable(self, client, factory):
        async def unavailable(code):
            raise ProviderUnavailableError("reddit down")

        factory.identity_provider.exchange_code_for_token = unavailable
        anonymous = client.get("/signin/anonymous").json()["token"]
        transition = client.get(
            "/signin/reddit/callback",
            params={"code": "code-1", "state": anonymous},
            follow_redirects=False,
        )
        params = parse_qs(urlparse(transition.headers["location"]).query)

        response = client.get(
            "/signin/upgrade",
            params={"code": "code-1", "anonymous": anonymous},
            headers=bearer(params["token"][0]),
        )

        assert response.status_code == 503


class TestUser:
    def test_requires_token(self, client):
        assert client.get("/user/me").status_code == 401

    def test_rejects_anonymous_token(self, client):
        anonymous = client.get("/signin/anonymous").json()["token"]

        assert client.get("/user/me", headers=bearer(anonymous)).status_code == 401

    def test_rejects_non_bearer_scheme(self, client):
        response = client.get("/user/me", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401

    def test_update_profile(self, client):
        session_token = sign_in(client)

        response = client.patch(
            "/user/me",
            json={"is_public": False, "decoration": 266001},
            headers=bearer(session_token),
        )

        assert response.status_code == 200
        assert response.json()["is_public"] is False
        assert response.json()["decoration"] == 266001

    def test_invalid_decoration(self, client):
        session_token = sign_in(client)

        response = client.patch("/user/me", json={"decoration": -1}, headers=bearer(session_token))

        assert response.status_code == 400


class TestSummoner:
    def test_link_and_request_refresh(self, client):
        session_token = sign_in(client)

        linked = client.post(
            "/summoner/link",
            json={"code": "rso-code", "platform": "kr"},
            headers=bearer(session_token),
        )
        entity_id = linked.json()["id"]
        refresh = client.post(f"/summoner/{entity_id}/update", headers=bearer(session_token))
        profile = client.get("/user/me", headers=bearer(session_token)).json()

        assert linked.status_code == 200
        assert linked.json()["region"] == "KR"
        assert refresh.status_code == 202
        assert refresh.json()["entity_key"] == "puuid-1"
        assert [entity["id"] for entity in profile["entities"]] == [entity_id]

    def test_unknown_platform(self, client):
        session_token = sign_in(client)

        response = client.post(
            "/summoner/link",
            json={"code": "rso-code", "platform": "MOON1"},
            headers=bearer(session_token),
        )

        assert response.status_code == 400

    def test_refresh_unknown_entity(self, client):
        session_token = sign_in(client)

        response = client.post(
            "/summoner/00000000-0000-4000-8000-000000000000/update",
            headers=bearer(session_token),
        )

        assert response.status_code == 404


class TestServer:
    def test_root(self, client):
        assert client.get("/").json()["service"] == "cmflairs"

    def test_cors_allows_pages_origin(self, client):
        origin = get_config().get_pages_origin().rstrip("/")

        response = client.get("/", headers={"Origin": origin})

        assert response.headers["access-control-allow-origin"] == origin

    def test_status_codes(self):
        assert status_code_for(ProviderUnavailableError("down")) == 503
        assert status_code_for(ConflictingAccountError("taken")) == 409


@pytest.mark.asyncio
class TestEmbeddedWorkerShutdown:
    async def test_shutdown_after_worker_crash_closes_database(self, monkeypatch):
        recorded = RecordingLogger()
        monkeypatch.setattr(web_server, "logger", recorded)
        db_adapter = initialize_database(get_config())
        close = AsyncMock()
        monkeypatch.setattr(db_adapter, "close", close)

        async def crash():
            raise RuntimeError("storage unavailable")

        task = asyncio.create_task(crash())
        task.add_done_callback(web_server._on_worker_done)
        await asyncio.wait([task])
        monkeypatch.setattr(web_server, "_worker_task", task)

        await web_server.shutdown_event()

        close.assert_awaited_once()
        assert web_server._worker_task is None
        errors = recorded.messages("error")
        assert any("작업 큐 소비자 없음" in message for message in errors)
        assert any("storage unavailable" in message for message in errors)

    async def test_shutdown_cancels_running_worker(self, monkeypatch):
        monkeypatch.setattr(web_server, "logger", RecordingLogger())
        db_adapter = initialize_database(get_config())
        close = AsyncMock()
        monkeypatch.setattr(db_adapter, "close", close)
        task = asyncio.create_task(asyncio.sleep(60))
        task.add_done_callback(web_server._on_worker_done)
        monkeypatch.setattr(web_server, "_worker_task", task)

        await web_server.shutdown_event()

        assert task.cancelled()
        close.assert_awaited_once()
