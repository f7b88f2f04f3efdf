"""
FastAPI 사용자/소환사 라우터

세션 토큰으로 인증된 사용자의 프로필과 게임 계정 엔드포인트입니다.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.db.database import get_db_session
from adapters.factory import AdapterFactory
from core.domain.entities import AccountSummary
from .dependencies import current_account_id, get_factory

user_router = APIRouter(prefix="/user", tags=["user"])
summoner_router = APIRouter(prefix="/summoner", tags=["summoner"])


class ProfileUpdateRequest(BaseModel):
    """프로필 수정 요청"""

    is_public: Optional[bool] = Field(None, description="프로필 공개 여부")
    decoration: Optional[int] = Field(None, description="배경 스킨 ID")


class SummonerLinkRequest(BaseModel):
    """게임 계정 연동 요청"""

    code: str = Field(..., description="RSO 인증 코드")
    platform: str = Field(..., description="Riot 플랫폼 (예: NA1)")


class SummonerResponse(BaseModel):
    """연동된 게임 계정 응답"""

    id: UUID
    external_key: str
    game_name: str
    tag_line: str
    region: str


class RefreshResponse(BaseModel):
    """갱신 작업 등록 응답"""

    job_id: UUID
    entity_key: str


@user_router.get("/me", response_model=AccountSummary)
async def get_me(
    account_id: UUID = Depends(current_account_id),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """로그인한 계정과 연동된 게임 계정 요약을 반환합니다."""
    usecase = factory.create_account_management_usecase(session)
    return await usecase.get_profile(account_id)


@user_router.patch("/me", response_model=AccountSummary)
async def update_me(
    request: ProfileUpdateRequest,
    account_id: UUID = Depends(current_account_id),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """프로필 공개 여부와 배경 장식을 수정합니다."""
    usecase = factory.create_account_management_usecase(session)
    await usecase.update_profile(
        account_id,
        is_public=request.is_public,
        decoration=request.decoration,
    )
    return await usecase.get_profile(account_id)


@summoner_router.post("/link", response_model=SummonerResponse)
async def link_summoner(
    request: SummonerLinkRequest,
    account_id: UUID = Depends(current_account_id),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """RSO 인증 코드로 게임 계정을 연동합니다."""
    usecase = factory.create_account_management_usecase(session)
    entity = await usecase.link_game_identity(
        account_id,
        authorization_code=request.code,
        platform=request.platform,
    )
    return SummonerResponse(
        id=entity.id,
        external_key=entity.external_key,
        game_name=entity.game_name,
        tag_line=entity.tag_line,
        region=entity.region,
    )


@summoner_router.post("/{entity_id}/update", response_model=RefreshResponse, status_code=202)
async def update_summoner(
    entity_id: UUID,
    account_id: UUID = Depends(current_account_id),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """게임 계정의 통계 갱신 작업을 등록합니다."""
    usecase = factory.create_account_management_usecase(session)
    job = await usecase.request_refresh(account_id, entity_id)
    return RefreshResponse(job_id=job.id, entity_key=job.entity_key)
