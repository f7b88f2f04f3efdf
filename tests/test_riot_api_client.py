"""RiotApiClientAdapter 테스트 (httpx.MockTransport)"""

import httpx
import pytest

from adapters.external.riot_api_client import RiotApiClientAdapter
from core.domain.exceptions import (
    ProviderRejectedError,
    ProviderUnavailableError,
    SyncFetchFailedError,
)

RSO_CONFIG = {
    "client_id": "rso-client",
    "client_secret": "rso-secret",
    "authorize_url": "https://auth.riotgames.com/authorize",
    "token_url": "https://auth.riotgames.com/token",
    "callback_url": "http://localhost:5173/signin-rso",
}

MASTERIES = [
    {"puuid": "p", "championId": 266, "championLevel": 7, "championPoints": 123456},
    {"puuid": "p", "championId": 1, "championLevel": 3, "championPoints": 2000},
]

DDRAGON_CHAMPIONS = {
    "data": {
        "Aatrox": {"key": "266", "name": "Aatrox"},
        "Annie": {"key": "1", "name": "Annie"},
    }
}


def make_client(handler, logger, resolve_champion_names=True):
    return RiotApiClientAdapter(
        api_key="RGAPI-test",
        rso_config=RSO_CONFIG,
        logger=logger,
        resolve_champion_names=resolve_champion_names,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
class TestChampionMasteries:
    async def test_masteries_with_names(self, logger):
        requested = []

        def handler(request):
            requested.append(request.url.host)
            if request.url.host == "kr.api.riotgames.com":
                assert request.headers["x-riot-token"] == "RGAPI-test"
                assert request.url.path.endswith("/by-puuid/puuid-1")
                return httpx.Response(200, json=MASTERIES)
            if request.url.path == "/api/versions.json":
                return httpx.Response(200, json=["14.1.1", "13.24.1"])
            if request.url.path == "/cdn/14.1.1/data/en_US/champion.json":
                return httpx.Response(200, json=DDRAGON_CHAMPIONS)
            return httpx.Response(404)

        client = make_client(handler, logger)
        items = await client.get_champion_masteries("KR", "puuid-1")
        await client.get_champion_masteries("KR", "puuid-1")

        assert [(i.champion_id, i.points, i.level, i.name) for i in items] == [
            (266, 123456, 7, "Aatrox"),
            (1, 2000, 3, "Annie"),
        ]
        # 챔피언 이름 표는 한 번만 가져온다
        assert requested.count("ddragon.leagueoflegends.com") == 2

    async def test_names_unavailable_falls_back(self, logger):
        def handler(request):
            if request.url.host == "na1.api.riotgames.com":
                return httpx.Response(200, json=MASTERIES)
            return httpx.Response(500)

        items = await make_client(handler, logger).get_champion_masteries("NA1", "puuid-1")

        assert [i.name for i in items] == [None, None]
        assert logger.messages("warning")

    async def test_non_200_fails(self, logger):
        def handler(request):
            return httpx.Response(429, json={"status": {"message": "Rate limit exceeded"}})

        with pytest.raises(SyncFetchFailedError) as exc_info:
            await make_client(handler, logger, False).get_champion_masteries("NA1", "puuid-1")

        assert exc_info.value.entity_key == "puuid-1"

    async def test_timeout_fails(self, logger):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SyncFetchFailedError):
            await make_client(handler, logger, False).get_champion_masteries("NA1", "puuid-1")

    async def test_malformed_body_fails(self, logger):
        def handler(request):
            return httpx.Response(200, json=[{"championId": 1}])

        with pytest.raises(SyncFetchFailedError):
            await make_client(handler, logger, False).get_champion_masteries("NA1", "puuid-1")


@pytest.mark.asyncio
class TestRiotSignOn:
    async def test_exchange_and_identity(self, logger):
        def handler(request):
            if request.url.host == "auth.riotgames.com":
                assert request.headers["authorization"].startswith("Basic ")
                return httpx.Response(200, json={"access_token": "rso-token"})
            assert request.url.host == "americas.api.riotgames.com"
            assert request.headers["authorization"] == "Bearer rso-token"
            return httpx.Response(200, json={"puuid": "puuid-1", "gameName": "Faker", "tagLine": "KR1"})

        client = make_client(handler, logger)
        access_token = await client.exchange_code_for_token("code-1")
        identity = await client.get_game_identity(access_token)

        assert identity.puuid == "puuid-1"
        assert identity.game_name == "Faker"
        assert identity.tag_line == "KR1"

    async def test_exchange_rejected(self, logger):
        def handler(request):
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(ProviderRejectedError):
            await make_client(handler, logger).exchange_code_for_token("code-1")

    async def test_identity_unavailable(self, logger):
        def handler(request):
            return httpx.Response(502)

        with pytest.raises(ProviderUnavailableError):
            await make_client(handler, logger).get_game_identity("rso-token")
