"""
포트 인터페이스 정의

클린 아키텍처의 핵심으로, Core 레이어와 외부 어댑터 간의 계약을 정의합니다.
모든 포트는 추상 기본 클래스(ABC)로 정의되어 구현을 강제합니다.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from .entities import (
    Account,
    GameIdentity,
    ProviderIdentity,
    RawStatItem,
    RefreshJob,
    Token,
    TokenKind,
    TrackedEntity,
)


class TokenCodecPort(ABC):
    """토큰 서명/검증 포트"""

    @abstractmethod
    def issue(self, kind: TokenKind, subject: Optional[str] = None) -> Token:
        """토큰 발급"""
        pass

    @abstractmethod
    def verify(self, raw: str, expected_kind: TokenKind) -> Optional[str]:
        """토큰 검증 후 subject 반환"""
        pass


class AccountRepositoryPort(ABC):
    """계정 저장소 포트"""

    @abstractmethod
    async def find_by_id(self, account_id: UUID) -> Optional[Account]:
        """ID로 계정 조회"""
        pass

    @abstractmethod
    async def find_by_external_id(self, external_user_id: int) -> Optional[Account]:
        """공급자 사용자 ID로 계정 조회"""
        pass

    @abstractmethod
    async def find_by_display_name(self, display_name: str) -> Optional[Account]:
        """사용자 이름으로 계정 조회 (대소문자 무시)"""
        pass

    @abstractmethod
    async def upsert_account(self, external_user_id: int, display_name: str) -> Account:
        """공급자 사용자 ID 기준 원자적 생성 또는 갱신"""
        pass

    @abstractmethod
    async def update_profile(
        self,
        account_id: UUID,
        is_public: Optional[bool] = None,
        decoration: Optional[int] = None,
    ) -> Optional[Account]:
        """프로필 설정 갱신"""
        pass

    @abstractmethod
    async def list_all(self, skip: int = 0, limit: int = 100) -> List[Account]:
        """모든 계정 목록 조회"""
        pass


class EntityRepositoryPort(ABC):
    """게임 엔티티 저장소 포트"""

    @abstractmethod
    async def find_by_id(self, entity_id: UUID) -> Optional[TrackedEntity]:
        """ID로 엔티티 조회"""
        pass

    @abstractmethod
    async def find_by_external_key(self, external_key: str) -> Optional[TrackedEntity]:
        """외부 키(PUUID)로 엔티티 조회"""
        pass

    @abstractmethod
    async def list_by_account(self, account_id: UUID) -> List[TrackedEntity]:
        """계정별 엔티티 목록 조회"""
        pass

    @abstractmethod
    async def upsert_entity(
        self,
        account_id: UUID,
        external_key: str,
        game_name: str,
        tag_line: str,
        region: str,
    ) -> TrackedEntity:
        """외부 키 기준 원자적 생성 또는 소유권 재지정"""
        pass

    @abstractmethod
    async def upsert_entity_statistics(
        self,
        external_key: str,
        stats_blob: str,
        synced_at: datetime,
    ) -> bool:
        """통계 및 동기화 시간 갱신. 대상이 없으면 False"""
        pass

    @abstractmethod
    async def list_least_recently_synced(self, limit: int) -> List[TrackedEntity]:
        """가장 오래전에 동기화된 엔티티 목록 조회"""
        pass


class JobQueuePort(ABC):
    """갱신 작업 큐 포트 (단일 소비자, 최소 1회 전달)"""

    @abstractmethod
    async def enqueue(self, entity_key: str) -> RefreshJob:
        """작업 등록"""
        pass

    @abstractmethod
    async def receive_batch(self, max_size: int, max_wait: float) -> List[RefreshJob]:
        """최대 max_wait초 동안 최대 max_size개의 작업을 모아 반환"""
        pass

    @abstractmethod
    async def acknowledge(self, job: RefreshJob) -> None:
        """작업 확인 (큐에서 제거)"""
        pass

    @abstractmethod
    async def reject(self, job: RefreshJob) -> None:
        """작업 폐기 (재전달 없음)"""
        pass

    @abstractmethod
    async def pending_count(self) -> int:
        """확인되지 않은 작업 수 조회"""
        pass


class IdentityProviderPort(ABC):
    """OAuth ID 공급자 (Reddit) 클라이언트 포트"""

    @abstractmethod
    def get_authorization_url(self, state: str) -> str:
        """인증 URL 생성"""
        pass

    @abstractmethod
    async def exchange_code_for_token(self, code: str) -> str:
        """인증 코드를 액세스 토큰으로 교환"""
        pass

    @abstractmethod
    async def get_identity(self, access_token: str) -> ProviderIdentity:
        """사용자 식별 정보 조회"""
        pass


class GameStatsClientPort(ABC):
    """게임 통계 API (Riot) 클라이언트 포트"""

    @abstractmethod
    async def exchange_code_for_token(self, code: str) -> str:
        """RSO 인증 코드를 액세스 토큰으로 교환"""
        pass

    @abstractmethod
    async def get_game_identity(self, access_token: str) -> GameIdentity:
        """RSO 액세스 토큰으로 게임 계정 조회"""
        pass

    @abstractmethod
    async def get_champion_masteries(self, region: str, external_key: str) -> List[RawStatItem]:
        """엔티티의 챔피언 숙련도 목록 조회"""
        pass


class LoggerPort(ABC):
    """로거 포트"""

    @abstractmethod
    def info(self, message: str, **kwargs) -> None:
        """정보 로그"""
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs) -> None:
        """경고 로그"""
        pass

    @abstractmethod
    def error(self, message: str, **kwargs) -> None:
        """오류 로그"""
        pass

    @abstractmethod
    def debug(self, message: str, **kwargs) -> None:
        """디버그 로그"""
        pass


class ConfigPort(ABC):
    """설정 포트"""

    # 환경 설정
    @abstractmethod
    def get_environment(self) -> str:
        """환경 조회 (development, production, testing)"""
        pass

    @abstractmethod
    def is_debug(self) -> bool:
        """디버그 모드 여부"""
        pass

    # 데이터베이스 설정
    @abstractmethod
    def get_database_url(self) -> str:
        """데이터베이스 URL 조회"""
        pass

    # 토큰 서명 설정
    @abstractmethod
    def get_token_secret(self) -> bytes:
        """토큰 서명 키 (디코딩된 바이트) 조회"""
        pass

    # Reddit OAuth 설정
    @abstractmethod
    def get_reddit_config(self) -> dict:
        """Reddit OAuth 설정 조회"""
        pass

    # Riot 설정
    @abstractmethod
    def get_rso_config(self) -> dict:
        """RSO OAuth 설정 조회"""
        pass

    @abstractmethod
    def get_rgapi_key(self) -> str:
        """Riot API 키 조회"""
        pass

    @abstractmethod
    def get_riot_regional_route(self) -> str:
        """Riot 지역 라우트 조회 (americas, asia, europe)"""
        pass

    @abstractmethod
    def get_http_timeout(self) -> float:
        """외부 호출 타임아웃(초) 조회"""
        pass

    # 프론트엔드 설정
    @abstractmethod
    def get_pages_origin(self) -> str:
        """프론트엔드 origin 조회 (CORS, 콜백 리다이렉트)"""
        pass

    # 작업 큐 / 동기화 설정
    @abstractmethod
    def get_job_queue_backend(self) -> str:
        """작업 큐 백엔드 조회 (database, memory)"""
        pass

    @abstractmethod
    def get_job_visibility_timeout(self) -> float:
        """미확인 작업 재전달 대기 시간(초) 조회"""
        pass

    @abstractmethod
    def get_bulk_update_batch_size(self) -> int:
        """일괄 갱신 배치 크기 조회"""
        pass

    @abstractmethod
    def get_sync_min_request_interval(self) -> float:
        """외부 API 호출 최소 간격(초) 조회"""
        pass

    @abstractmethod
    def run_embedded_worker(self) -> bool:
        """웹 서버 프로세스 안에서 동기화 워커를 실행할지 여부"""
        pass

    # 로깅 설정
    @abstractmethod
    def get_log_level(self) -> str:
        """로그 레벨 조회"""
        pass

    @abstractmethod
    def get_log_format(self) -> str:
        """로그 포맷 조회"""
        pass

    # 웹 서버 설정
    @abstractmethod
    def get_web_host(self) -> str:
        """웹 서버 호스트 조회"""
        pass

    @abstractmethod
    def get_web_port(self) -> int:
        """웹 서버 포트 조회"""
        pass
