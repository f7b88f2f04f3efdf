"""
메모리 작업 큐 어댑터

단일 프로세스 배포와 테스트를 위한 asyncio 기반 JobQueuePort 구현입니다.
확인되지 않은 작업은 가시성 타임아웃이 지나면 다시 전달됩니다.
"""

import asyncio
from collections import deque
from typing import Deque, Dict, List, Tuple
from uuid import UUID

from core.domain.entities import RefreshJob
from core.domain.ports import JobQueuePort, LoggerPort


class InMemoryJobQueueAdapter(JobQueuePort):
    """메모리 작업 큐 어댑터"""

    def __init__(self, logger: LoggerPort, visibility_timeout: float = 60.0):
        self.logger = logger
        self.visibility_timeout = visibility_timeout
        self._ready: Deque[RefreshJob] = deque()
        self._in_flight: Dict[UUID, Tuple[RefreshJob, float]] = {}
        self._condition = asyncio.Condition()

    async def enqueue(self, entity_key: str) -> RefreshJob:
        """작업을 등록합니다."""
        job = RefreshJob(entity_key=entity_key)
        async with self._condition:
            self._ready.append(job)
            self._condition.notify_all()

        self.logger.debug(f"작업 등록: {entity_key}")
        return job

    async def receive_batch(self, max_size: int, max_wait: float) -> List[RefreshJob]:
        """
        최대 max_wait초 동안 최대 max_size개의 작업을 모아 반환합니다.

        배치가 가득 차면 즉시 반환하고, 시간이 다 되면 모인 만큼 반환합니다.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_wait
        batch: List[RefreshJob] = []

        async with self._condition:
            while True:
                now = loop.time()
                self._requeue_expired(now)

                while self._ready and len(batch) < max_size:
                    job = self._ready.popleft()
                    delivered = job.model_copy(update={"attempts": job.attempts + 1})
                    self._in_flight[delivered.id] = (delivered, now + self.visibility_timeout)
                    batch.append(delivered)

                remaining = deadline - now
                if len(batch) >= max_size or remaining <= 0:
                    break

                # 미확인 작업의 재전달 시점에도 깨어나야 한다
                timeout = remaining
                if self._in_flight:
                    next_expiry = min(expires for _, expires in self._in_flight.values())
                    timeout = max(0.0, min(timeout, next_expiry - now))

                try:
                    await asyncio.wait_for(self._condition.wait(), timeout)
                except asyncio.TimeoutError:
                    pass

        if batch:
            self.logger.debug(f"배치 수신: {len(batch)}개")
        return batch

    async def acknowledge(self, job: RefreshJob) -> None:
        """작업을 확인하고 제거합니다."""
        async with self._condition:
            self._in_flight.pop(job.id, None)

    async def reject(self, job: RefreshJob) -> None:
        """작업을 재전달 없이 폐기합니다."""
        async with self._condition:
            removed = self._in_flight.pop(job.id, None)

        if removed is not None:
            self.logger.warning(f"작업 폐기: {job.entity_key}")

    async def pending_count(self) -> int:
        """확인되지 않은 작업 수 (대기 + 처리 중)를 반환합니다."""
        async with self._condition:
            return len(self._ready) + len(self._in_flight)

    def _requeue_expired(self, now: float) -> None:
        """가시성 타임아웃이 지난 작업을 대기열 앞으로 되돌립니다."""
        expired = [
            job for job, expires in self._in_flight.values()
            if expires <= now
        ]
        for job in reversed(expired):
            del self._in_flight[job.id]
            self._ready.appendleft(job)
            self.logger.warning(f"미확인 작업 재전달 예정: {job.entity_key} (시도 {job.attempts}회)")
