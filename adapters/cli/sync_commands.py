"""
통계 동기화 CLI 명령어

갱신 작업 등록과 동기화 워커 실행을 위한 CLI 명령어입니다.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from adapters.db.database import initialize_database
from adapters.factory import get_adapter_factory
from adapters.worker import run_sync_batch, run_sync_worker
from config.adapters import get_config

# CLI 앱 생성
app = typer.Typer(name="sync", help="통계 동기화 명령어")
console = Console()


def _warn_memory_queue(config) -> None:
    if config.get_job_queue_backend() == "memory":
        console.print("[yellow]메모리 작업 큐는 이 프로세스가 끝나면 사라집니다. (JOB_QUEUE_BACKEND=database 권장)[/yellow]")


@app.command("enqueue")
def enqueue(
    entity_key: str = typer.Argument(..., help="갱신할 게임 계정의 PUUID"),
):
    """게임 계정 하나의 갱신 작업을 등록합니다."""

    async def _enqueue():
        try:
            config = get_config()
            _warn_memory_queue(config)
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            factory = get_adapter_factory()
            async with db_adapter.get_session() as session:
                entity = await factory.create_entity_repository(session).find_by_external_key(entity_key)
                if entity is None:
                    console.print(f"[red]오류: 게임 계정을 찾을 수 없습니다: {entity_key}[/red]")
                    raise typer.Exit(1)

                job = await factory.create_job_queue(session).enqueue(entity_key)

            console.print(f"[green]✓ 갱신 작업이 등록되었습니다: {entity.riot_id} ({job.id})[/green]")

            await db_adapter.close()

        except typer.Exit:
            raise
        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_enqueue())


@app.command("enqueue-stale")
def enqueue_stale(
    batch_size: Optional[int] = typer.Option(None, help="등록할 최대 수 (기본: WEBJOB_BULK_UPDATE_BATCH_SIZE)"),
):
    """가장 오래전에 동기화된 게임 계정들의 갱신 작업을 등록합니다."""

    async def _enqueue_stale():
        try:
            config = get_config()
            _warn_memory_queue(config)
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            size = batch_size or config.get_bulk_update_batch_size()
            async with db_adapter.get_session() as session:
                usecase = get_adapter_factory().create_stats_sync_usecase(session)
                keys = await usecase.enqueue_stale(size)

            console.print(f"[green]✓ 갱신 작업 {len(keys)}개가 등록되었습니다.[/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_enqueue_stale())


@app.command("run-once")
def run_once():
    """배치 하나를 수신하여 처리합니다."""

    async def _run_once():
        try:
            config = get_config()
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            report = await run_sync_batch(db_adapter, get_adapter_factory())

            if report.is_empty():
                console.print("[yellow]처리할 작업이 없습니다.[/yellow]")
            else:
                table = Table(title="배치 처리 결과")
                table.add_column("항목", style="cyan")
                table.add_column("값", style="green", justify="right")
                table.add_row("수신", str(report.received))
                table.add_row("고유", str(report.unique))
                table.add_row("성공", str(len(report.succeeded)))
                table.add_row("실패", str(len(report.failed)))
                console.print(table)

                for key in report.failed:
                    console.print(f"[red]실패: {key}[/red]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_run_once())


@app.command("run-worker")
def run_worker(
    max_batches: Optional[int] = typer.Option(None, help="처리할 최대 배치 수 (기본: 무제한)"),
):
    """동기화 워커를 실행합니다. (Ctrl+C로 종료)"""

    async def _run_worker():
        config = get_config()
        db_adapter = initialize_database(config)
        await db_adapter.initialize()

        try:
            console.print("[blue]동기화 워커 실행 중...[/blue]")
            processed = await run_sync_worker(
                db_adapter,
                get_adapter_factory(),
                max_batches=max_batches,
            )
            console.print(f"[green]✓ 배치 {processed}개를 처리했습니다.[/green]")
        finally:
            await db_adapter.close()

    try:
        asyncio.run(_run_worker())
    except KeyboardInterrupt:
        console.print("[yellow]워커를 종료합니다.[/yellow]")
    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)
