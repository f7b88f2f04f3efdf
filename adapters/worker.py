"""
통계 동기화 워커

작업 큐를 소비하는 단일 소비자 루프입니다.
배치마다 새 DB 세션과 유즈케이스를 만들고, 이전 배치의 확인이 끝난 뒤에만
다음 배치를 수신합니다. 배치 처리 중 오류가 나도 루프는 멈추지 않고
잠시 쉰 뒤 다시 수신합니다.
"""

import asyncio
from typing import Optional

from core.domain.entities import BatchReport
from core.usecases.stats_sync import BATCH_SIZE, BATCH_WAIT_SECONDS

from .db.database import DatabaseAdapter
from .factory import AdapterFactory

# 배치 오류 후 재시도 대기 (초), 연속 오류마다 두 배로 늘어난다
ERROR_BACKOFF_SECONDS = 1.0
MAX_ERROR_BACKOFF_SECONDS = 60.0


async def run_sync_batch(db_adapter: DatabaseAdapter, factory: AdapterFactory) -> BatchReport:
    """배치 하나를 처리합니다."""
    async with db_adapter.get_session() as session:
        usecase = factory.create_stats_sync_usecase(session)
        return await usecase.run_once(max_size=BATCH_SIZE, max_wait=BATCH_WAIT_SECONDS)


async def _wait_backoff(stop_event: Optional[asyncio.Event], seconds: float) -> None:
    """중지 이벤트가 설정되면 대기를 일찍 끝냅니다."""
    if stop_event is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass


async def run_sync_worker(
    db_adapter: DatabaseAdapter,
    factory: AdapterFactory,
    stop_event: Optional[asyncio.Event] = None,
    max_batches: Optional[int] = None,
) -> int:
    """
    워커 루프를 실행합니다.

    Args:
        db_adapter: 초기화된 데이터베이스 어댑터
        factory: 어댑터 팩토리
        stop_event: 설정되면 현재 배치를 마친 뒤 종료
        max_batches: 작업이 있었던 배치를 이 수만큼 처리하면 종료

    Returns:
        처리한 (비어 있지 않은) 배치 수
    """
    logger = factory.create_logger()
    processed = 0
    consecutive_errors = 0
    logger.info("통계 동기화 워커 시작")

    try:
        while stop_event is None or not stop_event.is_set():
            try:
                report = await run_sync_batch(db_adapter, factory)
            except Exception as e:
                consecutive_errors += 1
                backoff = min(
                    ERROR_BACKOFF_SECONDS * 2 ** (consecutive_errors - 1),
                    MAX_ERROR_BACKOFF_SECONDS,
                )
                logger.error(
                    f"배치 처리 실패, {backoff:.1f}초 후 재시도: {str(e)}",
                    consecutive_errors=consecutive_errors,
                )
                await _wait_backoff(stop_event, backoff)
                continue

            consecutive_errors = 0
            if report.is_empty():
                continue

            processed += 1
            if max_batches is not None and processed >= max_batches:
                break
    except asyncio.CancelledError:
        logger.info("통계 동기화 워커 취소됨")
        raise
    finally:
        logger.info(f"통계 동기화 워커 종료: 처리한 배치 {processed}개")

    return processed
