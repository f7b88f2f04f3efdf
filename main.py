"""
cmflairs 관리 CLI

메인 진입점 파일입니다.
"""

import asyncio
import typer
from rich.console import Console

from adapters.cli.account_commands import app as account_app
from adapters.cli.db_commands import app as db_app
from adapters.cli.sync_commands import app as sync_app
from adapters.cli.token_commands import token_app
from adapters.db.database import initialize_database
from config import __version__
from config.adapters import get_config

# 메인 CLI 앱
app = typer.Typer(
    name="cmflairs",
    help="Reddit 커뮤니티 플레어 및 Riot 통계 동기화 시스템",
    no_args_is_help=True,
)

# 서브 명령어 추가
app.add_typer(account_app, name="account")
app.add_typer(db_app, name="db")
app.add_typer(sync_app, name="sync")
app.add_typer(token_app, name="token")

console = Console()


def _mask(value: str) -> str:
    if not value:
        return "(미설정)"
    return value[:4] + "*" * max(len(value) - 4, 4)


@app.command("init-db")
def init_database(
    drop_existing: bool = typer.Option(False, "--drop", help="기존 테이블을 삭제하고 재생성"),
):
    """데이터베이스를 초기화합니다."""

    async def _init_db():
        try:
            config = get_config()
            console.print(f"[blue]환경: {config.get_environment()}[/blue]")
            console.print(f"[blue]데이터베이스: {config.get_database_url()}[/blue]")

            # 데이터베이스 어댑터 초기화
            db_adapter = initialize_database(config)
            await db_adapter.initialize()

            if drop_existing:
                console.print("[yellow]기존 테이블을 삭제하는 중...[/yellow]")
                await db_adapter.drop_tables()

            console.print("[blue]데이터베이스 테이블을 생성하는 중...[/blue]")
            await db_adapter.create_tables()

            console.print("[green]✓ 데이터베이스가 성공적으로 초기화되었습니다![/green]")

            await db_adapter.close()

        except Exception as e:
            console.print(f"[red]오류: {str(e)}[/red]")
            raise typer.Exit(1)

    asyncio.run(_init_db())


@app.command("version")
def show_version():
    """버전 정보를 표시합니다."""
    console.print("[bold]cmflairs[/bold]")
    console.print(f"버전: {__version__}")


@app.command("config")
def show_config():
    """현재 설정을 표시합니다. (비밀 값은 가려서 표시)"""
    try:
        config = get_config()
        reddit = config.get_reddit_config()
        rso = config.get_rso_config()

        console.print("[bold]현재 설정[/bold]")
        console.print(f"환경: {config.get_environment()}")
        console.print(f"디버그 모드: {config.is_debug()}")
        console.print(f"데이터베이스 URL: {config.get_database_url()}")
        console.print(f"프론트엔드 origin: {config.get_pages_origin()}")
        console.print(f"Reddit 클라이언트 ID: {reddit['client_id'] or '(미설정)'}")
        console.print(f"Reddit 콜백 URL: {reddit['callback_url']}")
        console.print(f"RSO 클라이언트 ID: {rso['client_id'] or '(미설정)'}")
        console.print(f"Riot API 키: {_mask(config.get_rgapi_key())}")
        console.print(f"Riot 지역 라우트: {config.get_riot_regional_route()}")
        console.print(f"작업 큐 백엔드: {config.get_job_queue_backend()}")
        console.print(f"작업 가시성 타임아웃(초): {config.get_job_visibility_timeout()}")
        console.print(f"일괄 갱신 배치 크기: {config.get_bulk_update_batch_size()}")
        console.print(f"API 호출 최소 간격(초): {config.get_sync_min_request_interval()}")
        console.print(f"내장 워커: {config.run_embedded_worker()}")
        console.print(f"웹 호스트: {config.get_web_host()}")
        console.print(f"웹 포트: {config.get_web_port()}")
        console.print(f"로그 레벨: {config.get_log_level()}")

    except Exception as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
