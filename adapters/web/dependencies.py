"""
FastAPI 의존성

라우터에서 공통으로 사용하는 팩토리, 베어러 토큰, 로그인 계정 의존성입니다.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.db.database import get_db_session
from adapters.factory import AdapterFactory, get_adapter_factory
from core.domain.exceptions import MalformedTokenError


def get_factory() -> AdapterFactory:
    """어댑터 팩토리 의존성"""
    return get_adapter_factory()


def bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Authorization 헤더에서 베어러 토큰을 꺼냅니다."""
    if not authorization:
        raise MalformedTokenError("Authorization 헤더가 없습니다")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MalformedTokenError("Bearer 토큰 형식이 아닙니다")
    return token.strip()


async def current_account_id(
    token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
) -> UUID:
    """세션 토큰을 검증하고 로그인한 계정 ID를 반환합니다."""
    usecase = factory.create_identity_linking_usecase(session)
    return usecase.authenticate(token)
