"""
데이터베이스 관리 CLI 명령어

데이터베이스 초기화, 리셋, 현황 조회를 위한 CLI 명령어입니다.
"""

import asyncio
import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import func, select

from adapters.db.database import initialize_database
from adapters.db.models import AccountModel, EntityModel, RefreshJobModel
from config.adapters import get_config

# CLI 앱 생성
app = typer.Typer(name="db", help="데이터베이스 관리 명령어")
console = Console()


@app.command("init")
def init_database():
    """데이터베이스를 초기화합니다."""

    async def _init():
        try:
            console.print("[blue]데이터베이스 초기화 시작...[/blue]")

            # 설정 및 데이터베이스 초기화
            config = get_config()
            db_adapter = initialize_database(config)

            # 데이터베이스 초기화 (테이블 생성)
            await db_adapter.initialize()
            await db_adapter.create_tables()

            console.print("[green]✓ 데이터베이스 초기화가 완료되었습니다![/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_init())


@app.command("reset")
def reset_database(
    yes: bool = typer.Option(False, "--yes", "-y", help="확인 없이 진행"),
):
    """데이터베이스를 리셋합니다. (모든 데이터 삭제)"""

    if not yes:
        confirm = typer.confirm("모든 데이터가 삭제됩니다. 계속하시겠습니까?")
        if not confirm:
            console.print("[yellow]취소되었습니다.[/yellow]")
            return

    async def _reset():
        try:
            console.print("[blue]데이터베이스 리셋 시작...[/blue]")

            config = get_config()
            db_adapter = initialize_database(config)

            # 테이블 삭제 후 재생성
            await db_adapter.initialize()
            await db_adapter.reset()

            console.print("[green]✓ 데이터베이스 리셋이 완료되었습니다![/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_reset())


@app.command("stats")
def show_stats():
    """테이블별 데이터 현황을 조회합니다."""

    async def _stats():
        try:
            config = get_config()
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            async with db_adapter.get_session() as session:
                counts = {}
                for label, stmt in (
                    ("계정", select(func.count()).select_from(AccountModel)),
                    ("게임 계정", select(func.count()).select_from(EntityModel)),
                    (
                        "미동기화 게임 계정",
                        select(func.count()).select_from(EntityModel).where(EntityModel.last_sync.is_(None)),
                    ),
                    ("대기 중인 갱신 작업", select(func.count()).select_from(RefreshJobModel)),
                ):
                    result = await session.execute(stmt)
                    counts[label] = result.scalar_one()

                oldest = await session.execute(select(func.min(EntityModel.last_sync)))
                oldest_sync = oldest.scalar_one_or_none()

            table = Table(title="데이터베이스 현황")
            table.add_column("항목", style="cyan")
            table.add_column("값", style="green", justify="right")
            for label, count in counts.items():
                table.add_row(label, str(count))
            table.add_row(
                "가장 오래된 동기화",
                oldest_sync.strftime("%Y-%m-%d %H:%M:%S") if oldest_sync else "-",
            )
            console.print(table)

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_stats())
