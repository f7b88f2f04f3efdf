"""
도메인 엔티티 정의

비즈니스 핵심 개념을 나타내는 엔티티들을 정의합니다.
모든 엔티티는 Pydantic 모델을 기반으로 하여 타입 안정성을 보장합니다.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class TokenKind(str, Enum):
    """토큰 종류"""
    ANONYMOUS = "anonymous"
    TRANSITION = "transition"
    SESSION = "session"


class Account(BaseModel):
    """커뮤니티 사용자 계정 엔티티 (Reddit 계정과 1:1)"""

    id: UUID = Field(default_factory=uuid4, description="계정 고유 ID")
    external_user_id: int = Field(..., description="Reddit 사용자 ID (base36 디코딩 값)")
    display_name: str = Field(..., description="Reddit 사용자 이름")
    is_public: bool = Field(default=True, description="프로필 공개 여부")
    decoration: Optional[int] = Field(None, description="프로필 배경 스킨 ID (champion_id * 1000 + skin_index)")

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        """사용자 이름 검증"""
        v = v.strip()
        if not v or len(v) > 21:
            raise ValueError('유효한 Reddit 사용자 이름이 아닙니다')
        return v


class TrackedEntity(BaseModel):
    """연동된 게임 계정 (소환사) 엔티티"""

    id: UUID = Field(default_factory=uuid4, description="엔티티 고유 ID")
    account_id: UUID = Field(..., description="소유 계정 ID")
    external_key: str = Field(..., description="Riot PUUID")
    game_name: str = Field(..., description="Riot ID 게임 이름 (game_name#tag_line)")
    tag_line: str = Field(..., description="Riot ID 태그 (game_name#tag_line)")
    region: str = Field(..., description="플랫폼 (예: NA1)")
    last_sync: Optional[datetime] = Field(None, description="마지막 통계 동기화 시간")
    stats_blob: Optional[str] = Field(None, description="집계된 통계 (JSON)")

    @field_validator('region')
    @classmethod
    def validate_region(cls, v):
        """플랫폼 값 정규화"""
        return v.upper()

    @property
    def riot_id(self) -> str:
        return f"{self.game_name}#{self.tag_line}"

    def is_synced(self) -> bool:
        """한 번이라도 동기화되었는지 확인"""
        return self.last_sync is not None


class Token(BaseModel):
    """서명된 베어러 토큰 (저장되지 않음)"""

    kind: TokenKind = Field(..., description="토큰 종류")
    subject: Optional[str] = Field(None, description="익명: 없음, 전환: state, 세션: 계정 ID")
    issued_at: int = Field(..., description="발급 시각 (unix 밀리초)")
    value: str = Field(..., description="인코딩된 토큰 문자열")

    class Config:
        frozen = True


class RefreshJob(BaseModel):
    """통계 갱신 작업 메시지"""

    id: UUID = Field(default_factory=uuid4, description="작업 ID (확인 응답용)")
    entity_key: str = Field(..., description="대상 엔티티의 외부 키 (PUUID)")
    enqueued_at: datetime = Field(default_factory=datetime.utcnow, description="큐 등록 시간")
    attempts: int = Field(default=0, description="전달 시도 횟수")


class RawStatItem(BaseModel):
    """외부 API에서 받은 원시 통계 항목 (챔피언 숙련도)"""

    champion_id: int
    points: int
    level: int
    name: Optional[str] = None


class ChampionScore(BaseModel):
    """챔피언별 집계 통계"""

    champion_id: int = Field(..., description="챔피언 ID")
    name: str = Field(..., description="챔피언 이름")
    points: int = Field(default=0, description="숙련도 점수 합계")
    level: int = Field(default=0, description="최고 숙련도 레벨")


class ProviderIdentity(BaseModel):
    """ID 공급자가 반환한 사용자 정보"""

    external_user_id: int
    display_name: str


class GameIdentity(BaseModel):
    """RSO로 확인한 게임 계정 정보"""

    puuid: str
    game_name: str
    tag_line: str


class EntitySummary(BaseModel):
    """/user/me 응답용 엔티티 요약"""

    id: UUID
    external_key: str
    game_name: str
    tag_line: str
    region: str
    last_sync: Optional[datetime] = None
    champion_scores: List[ChampionScore] = Field(default_factory=list)


class AccountSummary(BaseModel):
    """/user/me 응답"""

    id: UUID
    display_name: str
    is_public: bool
    decoration: Optional[int] = None
    entities: List[EntitySummary] = Field(default_factory=list)


class BatchReport(BaseModel):
    """배치 처리 결과"""

    received: int = 0
    unique: int = 0
    succeeded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return self.received == 0
