"""
FastAPI 로그인 라우터

익명 -> 전환 -> 세션 토큰으로 이어지는 단계적 로그인 엔드포인트입니다.

    GET /signin/anonymous                  익명 토큰 발급
    GET /signin/{provider}?token=A         공급자 인증 페이지로 리다이렉트
    GET /signin/{provider}/callback        전환 토큰 발급 후 프론트엔드로 리다이렉트
    GET /signin/upgrade                    전환 토큰 + 코드 + 익명 토큰 -> 세션 토큰
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.db.database import get_db_session
from adapters.factory import AdapterFactory
from adapters.logger import create_logger
from .dependencies import bearer_token, get_factory

router = APIRouter(prefix="/signin", tags=["signin"])
logger = create_logger("signin_router")

SUPPORTED_PROVIDERS = ("reddit",)


class TokenResponse(BaseModel):
    """토큰 응답"""

    token: str = Field(..., description="서명된 베어러 토큰")
    kind: str = Field(..., description="토큰 종류")


def _check_provider(provider: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise HTTPException(status_code=404, detail=f"지원하지 않는 공급자입니다: {provider}")


@router.get("/anonymous", response_model=TokenResponse)
async def signin_anonymous(
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """익명 토큰을 발급합니다."""
    usecase = factory.create_identity_linking_usecase(session)
    token = usecase.issue_anonymous_token()
    return TokenResponse(token=token.value, kind=token.kind.value)


@router.get("/upgrade", response_model=TokenResponse)
async def signin_upgrade(
    code: str = Query(..., description="공급자 인증 코드"),
    anonymous: str = Query(..., description="클라이언트가 보관한 익명 토큰"),
    transition_token: str = Depends(bearer_token),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """전환 토큰으로 로그인을 완료하고 세션 토큰을 발급합니다."""
    usecase = factory.create_identity_linking_usecase(session)
    token = await usecase.complete_from_transition(
        transition_token=transition_token,
        authorization_code=code,
        anonymous_token_value=anonymous,
    )
    return TokenResponse(token=token.value, kind=token.kind.value)


@router.get("/{provider}")
async def signin_provider(
    provider: str,
    token: str = Query(..., description="익명 토큰 (state로 사용)"),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """공급자 인증 페이지로 리다이렉트합니다."""
    _check_provider(provider)

    usecase = factory.create_identity_linking_usecase(session)
    authorization_url = usecase.begin_provider_flow(token)
    return RedirectResponse(url=authorization_url, status_code=302)


@router.get("/{provider}/callback")
async def signin_provider_callback(
    provider: str,
    code: Optional[str] = Query(None, description="공급자 인증 코드"),
    state: Optional[str] = Query(None, description="공급자가 되돌려준 state"),
    error: Optional[str] = Query(None, description="공급자 오류 (사용자 거부 등)"),
    session: AsyncSession = Depends(get_db_session),
    factory: AdapterFactory = Depends(get_factory),
):
    """공급자 콜백을 받아 전환 토큰을 발급하고 프론트엔드로 리다이렉트합니다."""
    _check_provider(provider)
    pages_origin = factory.get_config().get_pages_origin()

    if error or not code or not state:
        logger.warning(f"공급자 콜백 오류: provider={provider}, error={error}")
        params = {"error": error or "missing_parameters"}
        return RedirectResponse(
            url=f"{pages_origin}signin/{provider}?{urlencode(params)}",
            status_code=302,
        )

    usecase = factory.create_identity_linking_usecase(session)
    transition = usecase.accept_provider_callback(state)

    params = {"token": transition.value, "code": code}
    return RedirectResponse(
        url=f"{pages_origin}signin/{provider}?{urlencode(params)}",
        status_code=302,
    )
