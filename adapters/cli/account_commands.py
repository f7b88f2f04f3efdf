"""
계정 관리 CLI 명령어

AccountManagementUseCase를 CLI 명령으로 노출하는 어댑터입니다.
"""

import asyncio
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from adapters.db.database import initialize_database
from adapters.factory import get_adapter_factory
from config.adapters import get_config

# CLI 앱 생성
app = typer.Typer(name="account", help="계정 관리 명령어")
console = Console()


@app.command("list")
def list_accounts(
    limit: int = typer.Option(10, help="조회할 계정 수"),
    skip: int = typer.Option(0, help="건너뛸 계정 수"),
):
    """등록된 계정 목록을 조회합니다."""

    async def _list():
        try:
            # 설정 및 데이터베이스 초기화
            config = get_config()
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            async with db_adapter.get_session() as session:
                usecase = get_adapter_factory().create_account_management_usecase(session)
                accounts = await usecase.list_accounts(skip=skip, limit=limit)

            if not accounts:
                console.print("[yellow]등록된 계정이 없습니다.[/yellow]")
            else:
                table = Table(title=f"계정 목록 ({len(accounts)}개)")
                table.add_column("ID", style="cyan")
                table.add_column("사용자 이름", style="green")
                table.add_column("Reddit ID", style="blue")
                table.add_column("공개", style="yellow")
                table.add_column("배경 장식", style="magenta")

                for account in accounts:
                    table.add_row(
                        str(account.id),
                        account.display_name,
                        str(account.external_user_id),
                        "예" if account.is_public else "아니오",
                        str(account.decoration) if account.decoration is not None else "-",
                    )

                console.print(table)

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_list())


@app.command("show")
def show_account(
    account: str = typer.Argument(..., help="계정 ID 또는 Reddit 사용자 이름"),
):
    """계정과 연동된 게임 계정의 상세 정보를 조회합니다."""

    async def _show():
        try:
            config = get_config()
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            factory = get_adapter_factory()
            async with db_adapter.get_session() as session:
                try:
                    account_id = UUID(account)
                except ValueError:
                    found = await factory.create_account_repository(session).find_by_display_name(account)
                    if found is None:
                        console.print(f"[red]오류: 계정을 찾을 수 없습니다: {account}[/red]")
                        raise typer.Exit(1)
                    account_id = found.id

                usecase = factory.create_account_management_usecase(session)
                summary = await usecase.get_profile(account_id)

            console.print(f"[bold]{summary.display_name}[/bold] ({summary.id})")
            console.print(f"공개: {'예' if summary.is_public else '아니오'}")
            console.print(f"배경 장식: {summary.decoration if summary.decoration is not None else '-'}")

            for entity in summary.entities:
                synced = entity.last_sync.strftime("%Y-%m-%d %H:%M:%S") if entity.last_sync else "미동기화"
                table = Table(title=f"{entity.game_name}#{entity.tag_line} [{entity.region}] - {synced}")
                table.add_column("챔피언", style="cyan")
                table.add_column("레벨", style="yellow", justify="right")
                table.add_column("점수", style="green", justify="right")
                for score in entity.champion_scores[:10]:
                    table.add_row(score.name, str(score.level), f"{score.points:,}")
                console.print(table)

            await db_adapter.close()

        except typer.Exit:
            raise
        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_show())
