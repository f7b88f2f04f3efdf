"""
계정 관리 유즈케이스

로그인한 사용자의 프로필 조회/수정, 게임 계정(소환사) 연동,
통계 갱신 요청 등의 비즈니스 로직을 구현합니다.
"""

from typing import List, Optional
from uuid import UUID

from ..domain.entities import (
    Account,
    AccountSummary,
    EntitySummary,
    RefreshJob,
    TrackedEntity,
)
from ..domain.exceptions import EntityNotFoundError
from ..domain.ports import (
    AccountRepositoryPort,
    EntityRepositoryPort,
    GameStatsClientPort,
    JobQueuePort,
    LoggerPort,
)
from .stats_sync import deserialize_scores

# Riot 플랫폼 라우팅 값
PLATFORMS = (
    "BR1", "EUN1", "EUW1", "JP1", "KR", "LA1", "LA2", "ME1", "NA1",
    "OC1", "PH2", "RU", "SG2", "TH2", "TR1", "TW2", "VN2",
)


class AccountManagementUseCase:
    """계정 관리 유즈케이스"""

    def __init__(
        self,
        account_repository: AccountRepositoryPort,
        entity_repository: EntityRepositoryPort,
        job_queue: JobQueuePort,
        stats_client: GameStatsClientPort,
        logger: LoggerPort,
    ):
        self.account_repository = account_repository
        self.entity_repository = entity_repository
        self.job_queue = job_queue
        self.stats_client = stats_client
        self.logger = logger

    async def get_profile(self, account_id: UUID) -> AccountSummary:
        """
        계정과 연동된 게임 엔티티 요약을 조회합니다.

        Raises:
            EntityNotFoundError: 계정이 존재하지 않는 경우
        """
        account = await self.account_repository.find_by_id(account_id)
        if account is None:
            raise EntityNotFoundError(f"계정을 찾을 수 없습니다: {account_id}")

        entities = await self.entity_repository.list_by_account(account_id)
        return AccountSummary(
            id=account.id,
            display_name=account.display_name,
            is_public=account.is_public,
            decoration=account.decoration,
            entities=[self._summarize(entity) for entity in entities],
        )

    async def update_profile(
        self,
        account_id: UUID,
        is_public: Optional[bool] = None,
        decoration: Optional[int] = None,
    ) -> Account:
        """프로필 공개 여부와 배경 장식을 수정합니다."""
        self.logger.info(f"프로필 수정 시작: {account_id}")

        if decoration is not None and decoration < 0:
            raise ValueError(f"유효하지 않은 배경 장식 값입니다: {decoration}")

        account = await self.account_repository.update_profile(
            account_id,
            is_public=is_public,
            decoration=decoration,
        )
        if account is None:
            raise EntityNotFoundError(f"계정을 찾을 수 없습니다: {account_id}")

        self.logger.info(f"프로필 수정 완료: {account_id}")
        return account

    async def link_game_identity(
        self,
        account_id: UUID,
        authorization_code: str,
        platform: str,
    ) -> TrackedEntity:
        """
        RSO 인증 코드로 게임 계정을 확인하여 계정에 연동합니다.

        이미 다른 계정에 연동된 게임 계정이면 소유권을 이 계정으로 옮깁니다.
        연동 후 통계 갱신 작업을 등록합니다.

        Args:
            account_id: 로그인한 계정 ID
            authorization_code: RSO 인증 코드
            platform: Riot 플랫폼 (예: NA1)

        Returns:
            연동된 엔티티

        Raises:
            ValueError: 알 수 없는 플랫폼
            EntityNotFoundError: 계정이 존재하지 않는 경우
            ProviderUnavailableError, ProviderRejectedError: RSO 호출 실패
        """
        platform = platform.upper()
        if platform not in PLATFORMS:
            raise ValueError(f"알 수 없는 플랫폼입니다: {platform}")

        account = await self.account_repository.find_by_id(account_id)
        if account is None:
            raise EntityNotFoundError(f"계정을 찾을 수 없습니다: {account_id}")

        self.logger.info(f"게임 계정 연동 시작: {account_id}, 플랫폼: {platform}")

        access_token = await self.stats_client.exchange_code_for_token(authorization_code)
        identity = await self.stats_client.get_game_identity(access_token)

        previous = await self.entity_repository.find_by_external_key(identity.puuid)
        if previous is not None and previous.account_id != account_id:
            self.logger.warning(
                f"게임 계정 소유권 이전: {identity.game_name}#{identity.tag_line}, "
                f"{previous.account_id} -> {account_id}"
            )

        entity = await self.entity_repository.upsert_entity(
            account_id=account_id,
            external_key=identity.puuid,
            game_name=identity.game_name,
            tag_line=identity.tag_line,
            region=platform,
        )
        await self.job_queue.enqueue(entity.external_key)

        self.logger.info(f"게임 계정 연동 완료: {account_id}, {entity.riot_id}")
        return entity

    async def request_refresh(self, account_id: UUID, entity_id: UUID) -> RefreshJob:
        """
        소유한 엔티티의 통계 갱신 작업을 등록합니다.

        Raises:
            EntityNotFoundError: 엔티티가 없거나 이 계정의 소유가 아닌 경우
        """
        entity = await self.entity_repository.find_by_id(entity_id)
        if entity is None or entity.account_id != account_id:
            raise EntityNotFoundError(f"엔티티를 찾을 수 없습니다: {entity_id}")

        job = await self.job_queue.enqueue(entity.external_key)
        self.logger.info(f"통계 갱신 요청: {entity.riot_id}")
        return job

    async def list_accounts(self, skip: int = 0, limit: int = 100) -> List[Account]:
        """계정 목록을 조회합니다."""
        return await self.account_repository.list_all(skip=skip, limit=limit)

    def _summarize(self, entity: TrackedEntity) -> EntitySummary:
        try:
            scores = deserialize_scores(entity.stats_blob)
        except ValueError as e:
            self.logger.warning(f"저장된 통계 해석 실패: {entity.external_key}, {str(e)}")
            scores = []

        return EntitySummary(
            id=entity.id,
            external_key=entity.external_key,
            game_name=entity.game_name,
            tag_line=entity.tag_line,
            region=entity.region,
            last_sync=entity.last_sync,
            champion_scores=scores,
        )
