"""
통계 동기화 유즈케이스

갱신 작업 큐를 소비하여 게임 엔티티의 챔피언 숙련도 통계를 동기화합니다.

배치 처리 순서:
    수신 -> 중복 제거 -> 엔티티별 {조회 -> 집계 -> 저장 | 실패} -> 전체 확인

외부 API의 호출 제한 때문에 소비자는 시스템 전체에서 하나이며,
배치 내 조회도 순차적으로 수행합니다.
"""

import asyncio
import json
from datetime import datetime
from typing import Dict, List, Optional

from ..domain.entities import BatchReport, ChampionScore, RawStatItem, RefreshJob
from ..domain.exceptions import SyncAggregateFailedError, SyncError, SyncFetchFailedError
from ..domain.ports import (
    EntityRepositoryPort,
    GameStatsClientPort,
    JobQueuePort,
    LoggerPort,
)

# 큐 소비 계약 (설정으로 바꿀 수 없음)
BATCH_SIZE = 10
BATCH_WAIT_SECONDS = 5.0
CONSUMER_CONCURRENCY = 1
MAX_RETRIES = 0


def deduplicate_keys(jobs: List[RefreshJob]) -> List[str]:
    """작업 목록에서 엔티티 키를 처음 등장한 순서대로 중복 없이 반환합니다."""
    seen = set()
    keys = []
    for job in jobs:
        if job.entity_key not in seen:
            seen.add(job.entity_key)
            keys.append(job.entity_key)
    return keys


def aggregate_scores(items: List[RawStatItem]) -> List[ChampionScore]:
    """
    원시 통계를 챔피언별로 집계합니다.

    점수는 합산하고 레벨은 최댓값을 취하며, 점수 내림차순으로 정렬합니다.
    """
    scores: Dict[int, ChampionScore] = {}
    for item in items:
        score = scores.get(item.champion_id)
        if score is None:
            scores[item.champion_id] = ChampionScore(
                champion_id=item.champion_id,
                name=item.name or str(item.champion_id),
                points=item.points,
                level=item.level,
            )
            continue

        score.points += item.points
        score.level = max(score.level, item.level)
        if item.name and score.name == str(score.champion_id):
            score.name = item.name

    return sorted(scores.values(), key=lambda s: (-s.points, s.champion_id))


def serialize_scores(scores: List[ChampionScore]) -> str:
    """집계 결과를 저장용 JSON 문자열로 변환합니다."""
    return json.dumps([score.model_dump() for score in scores], separators=(",", ":"))


def deserialize_scores(stats_blob: Optional[str]) -> List[ChampionScore]:
    """저장된 JSON 문자열을 집계 결과로 변환합니다."""
    if not stats_blob:
        return []
    return [ChampionScore(**item) for item in json.loads(stats_blob)]


class RequestThrottle:
    """외부 API 호출 사이에 최소 간격을 두는 조절기 (배치 간에도 공유)"""

    def __init__(self, min_interval: float = 0.0):
        self.min_interval = min_interval
        self._last_request_at: Optional[float] = None

    async def wait(self) -> None:
        """직전 호출로부터 최소 간격이 지날 때까지 대기합니다."""
        if self.min_interval <= 0:
            return

        loop = asyncio.get_running_loop()
        if self._last_request_at is not None:
            delay = self._last_request_at + self.min_interval - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
        self._last_request_at = loop.time()


class StatsSyncUseCase:
    """통계 동기화 유즈케이스"""

    def __init__(
        self,
        entity_repository: EntityRepositoryPort,
        job_queue: JobQueuePort,
        stats_client: GameStatsClientPort,
        logger: LoggerPort,
        throttle: Optional[RequestThrottle] = None,
    ):
        self.entity_repository = entity_repository
        self.job_queue = job_queue
        self.stats_client = stats_client
        self.logger = logger
        self.throttle = throttle or RequestThrottle()

    async def run_once(
        self,
        max_size: int = BATCH_SIZE,
        max_wait: float = BATCH_WAIT_SECONDS,
    ) -> BatchReport:
        """
        배치 하나를 수신하여 처리하고 모든 작업을 확인합니다.

        엔티티별 실패는 기록만 하고 배치를 계속 진행합니다.
        확인은 처리 결과와 무관하게 원본 배치의 모든 작업(중복 포함)에 대해 수행합니다.

        Returns:
            배치 처리 결과
        """
        jobs = await self.job_queue.receive_batch(max_size=max_size, max_wait=max_wait)
        report = BatchReport(received=len(jobs))
        if not jobs:
            return report

        keys = deduplicate_keys(jobs)
        report.unique = len(keys)
        self.logger.info(f"통계 동기화 배치 시작: 수신 {len(jobs)}개, 고유 {len(keys)}개")

        try:
            for key in keys:
                try:
                    await self.sync_entity(key)
                    report.succeeded.append(key)
                except SyncError as e:
                    self.logger.error(f"엔티티 동기화 실패: {str(e)}")
                    report.failed.append(key)
                except Exception as e:
                    self.logger.error(f"엔티티 동기화 오류: {key}, 오류: {str(e)}")
                    report.failed.append(key)
        finally:
            for job in jobs:
                await self.job_queue.acknowledge(job)

        self.logger.info(
            f"통계 동기화 배치 완료: 성공 {len(report.succeeded)}개, 실패 {len(report.failed)}개"
        )
        return report

    async def sync_entity(self, entity_key: str) -> List[ChampionScore]:
        """
        엔티티 하나의 통계를 조회, 집계, 저장합니다.

        Raises:
            SyncFetchFailedError: 엔티티가 없거나 통계 조회에 실패한 경우
            SyncAggregateFailedError: 집계에 실패한 경우
        """
        entity = await self.entity_repository.find_by_external_key(entity_key)
        if entity is None:
            raise SyncFetchFailedError(entity_key, "엔티티를 찾을 수 없습니다")

        await self.throttle.wait()
        items = await self.stats_client.get_champion_masteries(entity.region, entity_key)

        try:
            scores = aggregate_scores(items)
            stats_blob = serialize_scores(scores)
        except (TypeError, ValueError) as e:
            raise SyncAggregateFailedError(entity_key, str(e))

        updated = await self.entity_repository.upsert_entity_statistics(
            entity_key, stats_blob, datetime.utcnow()
        )
        if not updated:
            raise SyncFetchFailedError(entity_key, "저장 대상 엔티티가 사라졌습니다")

        self.logger.debug(f"엔티티 동기화 완료: {entity_key}, 챔피언 {len(scores)}개")
        return scores

    async def enqueue_stale(self, batch_size: int) -> List[str]:
        """가장 오래전에 동기화된 엔티티들의 갱신 작업을 등록합니다."""
        self.logger.info(f"오래된 엔티티 갱신 등록 시작: 최대 {batch_size}개")

        entities = await self.entity_repository.list_least_recently_synced(batch_size)
        keys = []
        for entity in entities:
            await self.job_queue.enqueue(entity.external_key)
            keys.append(entity.external_key)

        self.logger.info(f"오래된 엔티티 갱신 등록 완료: {len(keys)}개")
        return keys
