"""
데이터베이스 작업 큐 어댑터

refresh_jobs 테이블을 사용하는 JobQueuePort 구현입니다.
웹 서버와 워커가 별도 프로세스로 실행될 때 사용합니다.

작업 수령은 visible_at 조건부 UPDATE로 수행하므로 같은 작업이
동시에 두 번 수령되지 않습니다. 확인(acknowledge)은 행 삭제입니다.
"""

import asyncio
from datetime import datetime, timedelta
from typing import List
from uuid import UUID, uuid4

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.domain.entities import RefreshJob
from core.domain.ports import JobQueuePort, LoggerPort
from .models import RefreshJobModel


class DatabaseJobQueueAdapter(JobQueuePort):
    """데이터베이스 작업 큐 어댑터"""

    def __init__(
        self,
        session: AsyncSession,
        logger: LoggerPort,
        visibility_timeout: float = 60.0,
        poll_interval: float = 0.5,
    ):
        self.session = session
        self.logger = logger
        self.visibility_timeout = visibility_timeout
        self.poll_interval = poll_interval

    async def enqueue(self, entity_key: str) -> RefreshJob:
        """작업을 등록합니다."""
        now = datetime.utcnow()
        model = RefreshJobModel(
            id=str(uuid4()),
            entity_key=entity_key,
            enqueued_at=now,
            attempts=0,
            visible_at=now,
        )

        self.session.add(model)
        await self.session.commit()

        self.logger.debug(f"작업 등록: {entity_key}")
        return self._model_to_entity(model)

    async def receive_batch(self, max_size: int, max_wait: float) -> List[RefreshJob]:
        """최대 max_wait초 동안 폴링하며 최대 max_size개의 작업을 수령합니다."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max_wait
        batch: List[RefreshJob] = []

        while True:
            batch.extend(await self._claim(max_size - len(batch)))

            remaining = deadline - loop.time()
            if len(batch) >= max_size or remaining <= 0:
                break

            await asyncio.sleep(min(self.poll_interval, remaining))

        if batch:
            self.logger.debug(f"배치 수신: {len(batch)}개")
        return batch

    async def acknowledge(self, job: RefreshJob) -> None:
        """작업을 확인하고 삭제합니다."""
        stmt = delete(RefreshJobModel).where(RefreshJobModel.id == str(job.id))
        await self.session.execute(stmt)
        await self.session.commit()

    async def reject(self, job: RefreshJob) -> None:
        """작업을 재전달 없이 폐기합니다."""
        stmt = delete(RefreshJobModel).where(RefreshJobModel.id == str(job.id))
        result = await self.session.execute(stmt)
        await self.session.commit()

        if result.rowcount:
            self.logger.warning(f"작업 폐기: {job.entity_key}")

    async def pending_count(self) -> int:
        """확인되지 않은 작업 수를 반환합니다."""
        stmt = select(func.count()).select_from(RefreshJobModel)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def _claim(self, limit: int) -> List[RefreshJob]:
        """보이는 작업을 조건부 UPDATE로 수령합니다."""
        if limit <= 0:
            return []

        now = datetime.utcnow()
        stmt = (
            select(RefreshJobModel)
            .where(RefreshJobModel.visible_at <= now)
            .order_by(RefreshJobModel.enqueued_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        candidates = result.scalars().all()

        claimed: List[RefreshJob] = []
        hidden_until = now + timedelta(seconds=self.visibility_timeout)
        for model in candidates:
            job_id, entity_key = model.id, model.entity_key
            enqueued_at, attempts = model.enqueued_at, model.attempts

            # 다른 소비자가 먼저 수령했으면 visible_at이 바뀌어 있다
            claim = (
                update(RefreshJobModel)
                .where(
                    RefreshJobModel.id == job_id,
                    RefreshJobModel.visible_at == model.visible_at,
                )
                .values(
                    visible_at=hidden_until,
                    attempts=RefreshJobModel.attempts + 1,
                )
            )
            claim_result = await self.session.execute(claim)
            if claim_result.rowcount == 1:
                if attempts > 0:
                    self.logger.warning(
                        f"미확인 작업 재전달: {entity_key} (시도 {attempts + 1}회)"
                    )
                claimed.append(
                    RefreshJob(
                        id=UUID(job_id),
                        entity_key=entity_key,
                        enqueued_at=enqueued_at,
                        attempts=attempts + 1,
                    )
                )

        await self.session.commit()
        self.session.expire_all()
        return claimed

    def _model_to_entity(self, model: RefreshJobModel) -> RefreshJob:
        """모델을 엔티티로 변환합니다."""
        return RefreshJob(
            id=UUID(model.id),
            entity_key=model.entity_key,
            enqueued_at=model.enqueued_at,
            attempts=model.attempts,
        )
