"""테스트용 포트 구현"""

from typing import List, Optional

from core.domain.entities import GameIdentity, ProviderIdentity, RawStatItem
from core.domain.exceptions import SyncFetchFailedError
from core.domain.ports import GameStatsClientPort, IdentityProviderPort, LoggerPort


class RecordingLogger(LoggerPort):
    """로그 메시지를 수준별로 기록하는 로거"""

    def __init__(self):
        self.records = []

    def info(self, message: str, **kwargs) -> None:
        self.records.append(("info", message))

    def warning(self, message: str, **kwargs) -> None:
        self.records.append(("warning", message))

    def error(self, message: str, **kwargs) -> None:
        self.records.append(("error", message))

    def debug(self, message: str, **kwargs) -> None:
        self.records.append(("debug", message))

    def messages(self, level: str) -> List[str]:
        return [message for lvl, message in self.records if lvl == level]


class FakeIdentityProvider(IdentityProviderPort):
    """어떤 코드에도 같은 사용자를 돌려주는 ID 공급자"""

    def __init__(self, external_user_id: int = 42, display_name: str = "Foo"):
        self.external_user_id = external_user_id
        self.display_name = display_name
        self.exchanged_codes: List[str] = []

    def get_authorization_url(self, state: str) -> str:
        return f"https://provider.test/authorize?state={state}"

    async def exchange_code_for_token(self, code: str) -> str:
        self.exchanged_codes.append(code)
        return f"access-{code}"

    async def get_identity(self, access_token: str) -> ProviderIdentity:
        return ProviderIdentity(
            external_user_id=self.external_user_id,
            display_name=self.display_name,
        )


class FakeStatsClient(GameStatsClientPort):
    """엔티티 키별로 미리 정한 숙련도를 돌려주는 통계 클라이언트"""

    def __init__(self, masteries: Optional[dict] = None, failing: Optional[set] = None):
        self.masteries = masteries or {}
        self.failing = failing or set()
        self.fetched: List[str] = []
        self.identity = GameIdentity(puuid="puuid-1", game_name="Faker", tag_line="KR1")

    async def exchange_code_for_token(self, code: str) -> str:
        return f"rso-{code}"

    async def get_game_identity(self, access_token: str) -> GameIdentity:
        return self.identity

    async def get_champion_masteries(self, region: str, external_key: str) -> List[RawStatItem]:
        self.fetched.append(external_key)
        if external_key in self.failing:
            raise SyncFetchFailedError(external_key, "숙련도 조회 실패: 503")
        return list(self.masteries.get(external_key, []))
