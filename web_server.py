"""
FastAPI 웹 서버

단계적 로그인(익명 -> 전환 -> 세션)과 사용자/소환사 API를 제공합니다.
화면은 별도로 배포된 프론트엔드(PAGES_ORIGIN)가 담당합니다.
"""

import asyncio
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.database import get_database_adapter, initialize_database
from adapters.factory import get_adapter_factory
from adapters.logger import create_logger
from adapters.web.signin_routes import router as signin_router
from adapters.web.user_routes import summoner_router, user_router
from adapters.worker import run_sync_worker
from config import __version__
from config.adapters import get_config
from core.domain.exceptions import (
    CmflairsError,
    ConflictingAccountError,
    EntityNotFoundError,
    ProviderRejectedError,
    ProviderUnavailableError,
    StateMismatchError,
    TokenError,
)

# 도메인 예외 -> HTTP 상태 코드
ERROR_STATUS_CODES = (
    (TokenError, 401),
    (StateMismatchError, 400),
    (ProviderUnavailableError, 503),
    (ProviderRejectedError, 502),
    (EntityNotFoundError, 404),
    (ConflictingAccountError, 409),
)

# FastAPI 앱 생성
app = FastAPI(
    title="cmflairs",
    description="Reddit 로그인과 Riot 챔피언 숙련도 동기화 API",
    version=__version__,
)

# CORS 설정 (프론트엔드 origin만 허용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_config().get_pages_origin().rstrip("/")],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Authorization", "Content-Type"],
)

# 로거 설정
logger = create_logger("web_server")

# 내장 동기화 워커
_worker_task: Optional[asyncio.Task] = None

# 라우터 등록
app.include_router(signin_router)
app.include_router(user_router)
app.include_router(summoner_router)


def status_code_for(error: CmflairsError) -> int:
    """도메인 예외에 대응하는 HTTP 상태 코드를 반환합니다."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


def _on_worker_done(task: asyncio.Task) -> None:
    """내장 워커가 취소 외의 이유로 끝나면 기록합니다."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"내장 동기화 워커 중단, 작업 큐 소비자 없음: {str(error)}")
    else:
        logger.warning("내장 동기화 워커가 종료됨, 작업 큐 소비자 없음")


@app.exception_handler(CmflairsError)
async def domain_error_handler(request: Request, exc: CmflairsError):
    """도메인 예외를 HTTP 응답으로 변환합니다."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"요청 처리 실패: {request.url.path}, 오류: {str(exc)}")
    else:
        logger.info(f"요청 거부: {request.url.path}, {status_code}, {str(exc)}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """잘못된 입력 값을 400으로 변환합니다."""
    logger.info(f"잘못된 요청: {request.url.path}, {str(exc)}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event():
    """서버 시작 시 실행되는 이벤트"""
    global _worker_task
    logger.info("FastAPI 웹 서버 시작")

    # 데이터베이스 초기화
    config = get_config()
    db_adapter = initialize_database(config)
    await db_adapter.initialize()
    await db_adapter.create_tables()

    if config.run_embedded_worker():
        _worker_task = asyncio.create_task(run_sync_worker(db_adapter, get_adapter_factory()))
        _worker_task.add_done_callback(_on_worker_done)
        logger.info("내장 동기화 워커 시작")

    logger.info(f"환경: {config.get_environment()}")
    logger.info(f"작업 큐: {config.get_job_queue_backend()}")
    logger.info("웹 서버 준비 완료")


@app.on_event("shutdown")
async def shutdown_event():
    """서버 종료 시 실행되는 이벤트"""
    global _worker_task
    logger.info("FastAPI 웹 서버 종료")

    try:
        if _worker_task is not None:
            _worker_task.cancel()
            try:
                await _worker_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"내장 동기화 워커 오류로 종료됨: {str(e)}")
            _worker_task = None
    finally:
        # 데이터베이스 연결 종료
        await get_database_adapter().close()


@app.get("/")
async def root():
    """서비스 상태"""
    return {"service": "cmflairs", "version": __version__}


if __name__ == "__main__":
    # 설정 로드
    config = get_config()

    # 서버 실행
    uvicorn.run(
        "web_server:app",
        host=config.get_web_host(),
        port=config.get_web_port(),
        reload=config.is_debug(),
        log_level=config.get_log_level().lower(),
    )
