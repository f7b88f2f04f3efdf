"""
SQLAlchemy 데이터베이스 모델

도메인 엔티티와 매핑되는 데이터베이스 테이블 모델을 정의합니다.
SQLite 호환성을 위해 UUID는 String으로 처리합니다.
"""

import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class AccountModel(Base):
    """계정 테이블 모델"""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    external_user_id = Column(BigInteger, unique=True, nullable=False)
    display_name = Column(String(64), nullable=False)
    is_public = Column(Boolean, nullable=False, default=True)
    decoration = Column(Integer)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # 사용자 이름은 대소문자 구분 없이 유일
    __table_args__ = (
        Index("uq_accounts_display_name_lower", func.lower(display_name), unique=True),
    )

    # 관계 설정
    entities = relationship("EntityModel", back_populates="account")


class EntityModel(Base):
    """게임 엔티티 (소환사) 테이블 모델"""

    __tablename__ = "entities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    external_key = Column(String(128), unique=True, nullable=False)
    game_name = Column(String(64), nullable=False)
    tag_line = Column(String(16), nullable=False)
    region = Column(String(8), nullable=False)
    last_sync = Column(DateTime, index=True)
    stats_blob = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # 관계 설정
    account = relationship("AccountModel", back_populates="entities")


class RefreshJobModel(Base):
    """갱신 작업 큐 테이블 모델"""

    __tablename__ = "refresh_jobs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    entity_key = Column(String(128), nullable=False)
    enqueued_at = Column(DateTime, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    visible_at = Column(DateTime, nullable=False)

    # 복합 인덱스
    __table_args__ = (
        Index("idx_refresh_jobs_visible_enqueued", "visible_at", "enqueued_at"),
    )
