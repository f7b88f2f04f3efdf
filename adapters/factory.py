"""
어댑터 팩토리

모든 어댑터들을 생성하고 의존성을 주입하는 팩토리 클래스입니다.
클린 아키텍처의 의존성 역전 원칙을 구현합니다.

프로세스 수명 동안 공유하는 어댑터(로거, 토큰 코덱, 외부 클라이언트,
메모리 작업 큐)는 한 번만 생성하고, 세션에 묶인 어댑터는 요청마다 생성합니다.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.ports import (
    AccountRepositoryPort,
    ConfigPort,
    EntityRepositoryPort,
    GameStatsClientPort,
    IdentityProviderPort,
    JobQueuePort,
    LoggerPort,
    TokenCodecPort,
)
from core.usecases.account_management import AccountManagementUseCase
from core.usecases.identity_linking import IdentityLinkingUseCase
from core.usecases.stats_sync import RequestThrottle, StatsSyncUseCase

from .db.job_queue import DatabaseJobQueueAdapter
from .db.repositories import AccountRepositoryAdapter, EntityRepositoryAdapter
from .external.job_queue import InMemoryJobQueueAdapter
from .external.reddit_client import RedditClientAdapter
from .external.riot_api_client import RiotApiClientAdapter
from .external.token_codec import TokenCodecAdapter
from .logger import LoggerAdapter
from config.adapters import get_config


class AdapterFactory:
    """어댑터 팩토리"""

    def __init__(self, config: Optional[ConfigPort] = None):
        self.config = config or get_config()
        self._logger: Optional[LoggerPort] = None
        self._token_codec: Optional[TokenCodecPort] = None
        self._identity_provider: Optional[IdentityProviderPort] = None
        self._stats_client: Optional[GameStatsClientPort] = None
        self._memory_job_queue: Optional[JobQueuePort] = None
        self._throttle: Optional[RequestThrottle] = None

    def create_logger(self) -> LoggerPort:
        """로거 어댑터를 생성합니다."""
        if self._logger is None:
            self._logger = LoggerAdapter(
                name="cmflairs",
                level=self.config.get_log_level(),
                format_string=self.config.get_log_format(),
            )
        return self._logger

    def create_token_codec(self) -> TokenCodecPort:
        """토큰 코덱 어댑터를 생성합니다."""
        if self._token_codec is None:
            self._token_codec = TokenCodecAdapter(
                secret=self.config.get_token_secret(),
                logger=self.create_logger(),
            )
        return self._token_codec

    def create_identity_provider(self) -> IdentityProviderPort:
        """Reddit OAuth 클라이언트 어댑터를 생성합니다."""
        if self._identity_provider is None:
            self._identity_provider = RedditClientAdapter(
                reddit_config=self.config.get_reddit_config(),
                logger=self.create_logger(),
                timeout=self.config.get_http_timeout(),
            )
        return self._identity_provider

    def create_stats_client(self) -> GameStatsClientPort:
        """Riot API 클라이언트 어댑터를 생성합니다."""
        if self._stats_client is None:
            self._stats_client = RiotApiClientAdapter(
                api_key=self.config.get_rgapi_key(),
                rso_config=self.config.get_rso_config(),
                logger=self.create_logger(),
                regional_route=self.config.get_riot_regional_route(),
                timeout=self.config.get_http_timeout(),
            )
        return self._stats_client

    def create_job_queue(self, session: AsyncSession) -> JobQueuePort:
        """설정된 백엔드의 작업 큐 어댑터를 생성합니다."""
        if self.config.get_job_queue_backend() == "memory":
            if self._memory_job_queue is None:
                self._memory_job_queue = InMemoryJobQueueAdapter(
                    logger=self.create_logger(),
                    visibility_timeout=self.config.get_job_visibility_timeout(),
                )
            return self._memory_job_queue

        return DatabaseJobQueueAdapter(
            session=session,
            logger=self.create_logger(),
            visibility_timeout=self.config.get_job_visibility_timeout(),
        )

    def create_request_throttle(self) -> RequestThrottle:
        """외부 API 호출 간격 조절기를 생성합니다."""
        if self._throttle is None:
            self._throttle = RequestThrottle(self.config.get_sync_min_request_interval())
        return self._throttle

    def create_account_repository(self, session: AsyncSession) -> AccountRepositoryPort:
        """계정 Repository 어댑터를 생성합니다."""
        return AccountRepositoryAdapter(session)

    def create_entity_repository(self, session: AsyncSession) -> EntityRepositoryPort:
        """엔티티 Repository 어댑터를 생성합니다."""
        return EntityRepositoryAdapter(session)

    def create_identity_linking_usecase(self, session: AsyncSession) -> IdentityLinkingUseCase:
        """ID 연동 유즈케이스를 생성합니다."""
        return IdentityLinkingUseCase(
            account_repository=self.create_account_repository(session),
            identity_provider=self.create_identity_provider(),
            token_codec=self.create_token_codec(),
            logger=self.create_logger(),
        )

    def create_account_management_usecase(self, session: AsyncSession) -> AccountManagementUseCase:
        """계정 관리 유즈케이스를 생성합니다."""
        return AccountManagementUseCase(
            account_repository=self.create_account_repository(session),
            entity_repository=self.create_entity_repository(session),
            job_queue=self.create_job_queue(session),
            stats_client=self.create_stats_client(),
            logger=self.create_logger(),
        )

    def create_stats_sync_usecase(self, session: AsyncSession) -> StatsSyncUseCase:
        """통계 동기화 유즈케이스를 생성합니다."""
        return StatsSyncUseCase(
            entity_repository=self.create_entity_repository(session),
            job_queue=self.create_job_queue(session),
            stats_client=self.create_stats_client(),
            logger=self.create_logger(),
            throttle=self.create_request_throttle(),
        )

    def get_config(self) -> ConfigPort:
        """설정 객체를 반환합니다."""
        return self.config


# 전역 팩토리 인스턴스
_factory: Optional[AdapterFactory] = None


def get_adapter_factory() -> AdapterFactory:
    """전역 어댑터 팩토리 인스턴스를 반환합니다."""
    global _factory
    if _factory is None:
        _factory = AdapterFactory()
    return _factory


def initialize_adapter_factory(config: Optional[ConfigPort] = None) -> AdapterFactory:
    """어댑터 팩토리를 초기화합니다."""
    global _factory
    _factory = AdapterFactory(config)
    return _factory
