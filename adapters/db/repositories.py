"""
데이터베이스 Repository 어댑터

Core 레이어의 Repository 포트를 구현하는 SQLAlchemy 기반 어댑터들입니다.
SQLite 호환성을 위해 UUID를 문자열로 변환하여 처리합니다.

모든 쓰기는 유일 컬럼을 기준으로 한 단일 INSERT ... ON CONFLICT DO UPDATE
또는 조건부 UPDATE 문으로 수행합니다.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import desc, func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.domain.entities import Account, TrackedEntity
from core.domain.exceptions import ConflictingAccountError
from core.domain.ports import AccountRepositoryPort, EntityRepositoryPort
from .models import AccountModel, EntityModel


def dialect_insert(session: AsyncSession):
    """세션 바인드의 dialect에 맞는 insert 생성자를 반환합니다."""
    if session.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


class AccountRepositoryAdapter(AccountRepositoryPort):
    """계정 Repository 어댑터"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, account_id: UUID) -> Optional[Account]:
        """ID로 계정을 조회합니다."""
        stmt = select(AccountModel).where(AccountModel.id == str(account_id))
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._model_to_entity(model)

    async def find_by_external_id(self, external_user_id: int) -> Optional[Account]:
        """Reddit 사용자 ID로 계정을 조회합니다."""
        stmt = select(AccountModel).where(AccountModel.external_user_id == external_user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._model_to_entity(model)

    async def find_by_display_name(self, display_name: str) -> Optional[Account]:
        """사용자 이름으로 계정을 조회합니다 (대소문자 무시)."""
        stmt = select(AccountModel).where(
            func.lower(AccountModel.display_name) == display_name.strip().lower()
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._model_to_entity(model)

    async def upsert_account(self, external_user_id: int, display_name: str) -> Account:
        """
        Reddit 사용자 ID 기준으로 계정을 생성하거나 사용자 이름을 갱신합니다.

        Raises:
            ConflictingAccountError: 사용자 이름이 다른 계정과 충돌하는 경우
        """
        insert = dialect_insert(self.session)
        stmt = insert(AccountModel).values(
            id=str(uuid4()),
            external_user_id=external_user_id,
            display_name=display_name,
            is_public=True,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AccountModel.external_user_id],
            set_={
                "display_name": stmt.excluded.display_name,
                "updated_at": func.now(),
            },
        )

        try:
            await self.session.execute(stmt)
            await self.session.commit()
            self.session.expire_all()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictingAccountError(
                f"계정 유일성 제약 위반: external_id={external_user_id}, name={display_name}"
            ) from e

        account = await self.find_by_external_id(external_user_id)
        if account is None:
            raise ConflictingAccountError(f"생성한 계정을 찾을 수 없습니다: {external_user_id}")
        return account

    async def update_profile(
        self,
        account_id: UUID,
        is_public: Optional[bool] = None,
        decoration: Optional[int] = None,
    ) -> Optional[Account]:
        """프로필 설정을 갱신합니다. None인 필드는 변경하지 않습니다."""
        values = {}
        if is_public is not None:
            values["is_public"] = is_public
        if decoration is not None:
            values["decoration"] = decoration

        if values:
            stmt = (
                update(AccountModel)
                .where(AccountModel.id == str(account_id))
                .values(**values)
            )
            await self.session.execute(stmt)
            await self.session.commit()
            self.session.expire_all()

        return await self.find_by_id(account_id)

    async def list_all(
        self,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Account]:
        """모든 계정을 조회합니다."""
        stmt = (
            select(AccountModel)
            .order_by(desc(AccountModel.created_at))
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        models = result.scalars().all()

        return [self._model_to_entity(model) for model in models]

    def _model_to_entity(self, model: AccountModel) -> Account:
        """모델을 엔티티로 변환합니다."""
        return Account(
            id=UUID(model.id),  # 문자열을 UUID로 변환
            external_user_id=model.external_user_id,
            display_name=model.display_name,
            is_public=model.is_public,
            decoration=model.decoration,
        )


class EntityRepositoryAdapter(EntityRepositoryPort):
    """게임 엔티티 Repository 어댑터"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, entity_id: UUID) -> Optional[TrackedEntity]:
        """ID로 엔티티를 조회합니다."""
        stmt = select(EntityModel).where(EntityModel.id == str(entity_id))
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._model_to_entity(model)

    async def find_by_external_key(self, external_key: str) -> Optional[TrackedEntity]:
        """PUUID로 엔티티를 조회합니다."""
        stmt = select(EntityModel).where(EntityModel.external_key == external_key)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._model_to_entity(model)

    async def list_by_account(self, account_id: UUID) -> List[TrackedEntity]:
        """계정이 소유한 엔티티 목록을 조회합니다."""
        stmt = (
            select(EntityModel)
            .where(EntityModel.account_id == str(account_id))
            .order_by(EntityModel.created_at, EntityModel.game_name)
        )
        result = await self.session.execute(stmt)
        models = result.scalars().all()

        return [self._model_to_entity(model) for model in models]

    async def upsert_entity(
        self,
        account_id: UUID,
        external_key: str,
        game_name: str,
        tag_line: str,
        region: str,
    ) -> TrackedEntity:
        """PUUID 기준으로 엔티티를 생성하거나 다른 계정에서 재지정합니다."""
        insert = dialect_insert(self.session)
        stmt = insert(EntityModel).values(
            id=str(uuid4()),
            account_id=str(account_id),
            external_key=external_key,
            game_name=game_name,
            tag_line=tag_line,
            region=region.upper(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[EntityModel.external_key],
            set_={
                "account_id": stmt.excluded.account_id,
                "game_name": stmt.excluded.game_name,
                "tag_line": stmt.excluded.tag_line,
                "region": stmt.excluded.region,
                "updated_at": func.now(),
            },
        )

        await self.session.execute(stmt)
        await self.session.commit()
        self.session.expire_all()

        entity = await self.find_by_external_key(external_key)
        if entity is None:
            raise RuntimeError(f"저장한 엔티티를 찾을 수 없습니다: {external_key}")
        return entity

    async def upsert_entity_statistics(
        self,
        external_key: str,
        stats_blob: str,
        synced_at: datetime,
    ) -> bool:
        """통계와 동기화 시간을 갱신합니다."""
        stmt = (
            update(EntityModel)
            .where(EntityModel.external_key == external_key)
            .values(stats_blob=stats_blob, last_sync=synced_at)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        self.session.expire_all()

        return result.rowcount > 0

    async def list_least_recently_synced(self, limit: int) -> List[TrackedEntity]:
        """가장 오래전에 동기화된 엔티티부터 조회합니다 (미동기화 우선)."""
        stmt = (
            select(EntityModel)
            .order_by(EntityModel.last_sync.asc().nullsfirst(), EntityModel.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        models = result.scalars().all()

        return [self._model_to_entity(model) for model in models]

    def _model_to_entity(self, model: EntityModel) -> TrackedEntity:
        """모델을 엔티티로 변환합니다."""
        return TrackedEntity(
            id=UUID(model.id),
            account_id=UUID(model.account_id),
            external_key=model.external_key,
            game_name=model.game_name,
            tag_line=model.tag_line,
            region=model.region,
            last_sync=model.last_sync,
            stats_blob=model.stats_blob,
        )
