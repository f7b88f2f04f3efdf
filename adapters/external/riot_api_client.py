"""
Riot API 클라이언트 어댑터

GameStatsClientPort 구현입니다.
- RSO(Riot Sign On) 인증 코드 교환 및 게임 계정(account-v1) 조회
- champion-mastery-v4 숙련도 조회
- Data Dragon 챔피언 이름 조회 (실패해도 동기화는 계속)
"""

from typing import Dict, List, Optional

import httpx

from core.domain.entities import GameIdentity, RawStatItem
from core.domain.exceptions import (
    ProviderRejectedError,
    ProviderUnavailableError,
    SyncFetchFailedError,
)
from core.domain.ports import GameStatsClientPort, LoggerPort

DDRAGON_BASE_URL = "https://ddragon.leagueoflegends.com"


class RiotApiClientAdapter(GameStatsClientPort):
    """Riot API 클라이언트 어댑터"""

    def __init__(
        self,
        api_key: str,
        rso_config: dict,
        logger: LoggerPort,
        regional_route: str = "americas",
        timeout: float = 5.0,
        resolve_champion_names: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.rso_config = rso_config
        self.logger = logger
        self.regional_route = regional_route.lower()
        self.timeout = timeout
        self.resolve_champion_names = resolve_champion_names
        self.transport = transport
        self._champion_names: Optional[Dict[int, str]] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def exchange_code_for_token(self, code: str) -> str:
        """RSO 인증 코드를 액세스 토큰으로 교환합니다."""
        self.logger.debug("RSO 토큰 교환 요청")

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.rso_config["callback_url"],
        }
        try:
            async with self._client() as client:
                response = await client.post(
                    self.rso_config["token_url"],
                    data=data,
                    auth=(self.rso_config["client_id"], self.rso_config["client_secret"]),
                )
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"RSO 호출 실패: {str(e)}")

        result = self._provider_json(response, "RSO 토큰 교환")
        access_token = result.get("access_token")
        if not access_token:
            raise ProviderRejectedError("RSO 토큰 교환 응답에 access_token이 없습니다")

        self.logger.debug("RSO 토큰 교환 성공")
        return access_token

    async def get_game_identity(self, access_token: str) -> GameIdentity:
        """RSO 액세스 토큰으로 Riot 계정(PUUID, Riot ID)을 조회합니다."""
        url = f"https://{self.regional_route}.api.riotgames.com/riot/account/v1/accounts/me"
        try:
            async with self._client() as client:
                response = await client.get(
                    url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"Riot 계정 조회 실패: {str(e)}")

        result = self._provider_json(response, "Riot 계정 조회")
        try:
            identity = GameIdentity(
                puuid=result["puuid"],
                game_name=result["gameName"],
                tag_line=result["tagLine"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderRejectedError(f"Riot 계정 응답 형식 오류: {str(e)}")

        self.logger.debug(f"Riot 계정 조회 성공: {identity.game_name}#{identity.tag_line}")
        return identity

    async def get_champion_masteries(self, region: str, external_key: str) -> List[RawStatItem]:
        """
        엔티티의 챔피언 숙련도 목록을 조회합니다.

        Raises:
            SyncFetchFailedError: 네트워크 오류, 타임아웃 또는 200이 아닌 응답
        """
        platform = region.lower()
        url = (
            f"https://{platform}.api.riotgames.com"
            f"/lol/champion-mastery/v4/champion-masteries/by-puuid/{external_key}"
        )
        try:
            async with self._client() as client:
                response = await client.get(url, headers={"X-Riot-Token": self.api_key})
        except httpx.HTTPError as e:
            raise SyncFetchFailedError(external_key, f"숙련도 조회 실패: {str(e)}")

        if response.status_code != 200:
            raise SyncFetchFailedError(
                external_key,
                f"숙련도 조회 실패: {response.status_code} - {response.text}",
            )

        try:
            masteries = response.json()
            names = await self._get_champion_names()
            items = [
                RawStatItem(
                    champion_id=mastery["championId"],
                    points=mastery["championPoints"],
                    level=mastery["championLevel"],
                    name=names.get(mastery["championId"]),
                )
                for mastery in masteries
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise SyncFetchFailedError(external_key, f"숙련도 응답 형식 오류: {str(e)}")

        self.logger.debug(f"숙련도 조회 성공: {external_key}, {len(items)}개")
        return items

    async def _get_champion_names(self) -> Dict[int, str]:
        """Data Dragon에서 챔피언 ID -> 이름 표를 가져옵니다 (프로세스 내 캐시)."""
        if not self.resolve_champion_names:
            return {}
        if self._champion_names is not None:
            return self._champion_names

        try:
            async with self._client() as client:
                versions = await client.get(f"{DDRAGON_BASE_URL}/api/versions.json")
                versions.raise_for_status()
                latest = versions.json()[0]

                champions = await client.get(
                    f"{DDRAGON_BASE_URL}/cdn/{latest}/data/en_US/champion.json"
                )
                champions.raise_for_status()
                data = champions.json()["data"]
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            self.logger.warning(f"챔피언 이름 조회 실패, ID로 대체합니다: {str(e)}")
            return {}

        self._champion_names = {int(champ["key"]): champ["name"] for champ in data.values()}
        self.logger.info(f"챔피언 이름 표 로드 완료: {latest}, {len(self._champion_names)}개")
        return self._champion_names

    def _provider_json(self, response: httpx.Response, action: str) -> dict:
        """공급자 응답 상태 코드를 검사하고 JSON 본문을 반환합니다."""
        if response.status_code >= 500:
            raise ProviderUnavailableError(f"{action} 서버 오류: {response.status_code}")
        if response.status_code != 200:
            self.logger.error(f"{action} 거부: {response.status_code} - {response.text}")
            raise ProviderRejectedError(f"{action} 거부: {response.status_code}")

        try:
            result = response.json()
        except ValueError:
            raise ProviderRejectedError(f"{action} 응답을 해석할 수 없습니다")

        if not isinstance(result, dict):
            raise ProviderRejectedError(f"{action} 응답 형식 오류")
        return result
