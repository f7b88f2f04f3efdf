"""
토큰 관련 CLI 명령어

프론트엔드 없이 로그인 흐름을 점검할 때 쓰는 토큰 발급/검증 명령어입니다.
"""

from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.factory import get_adapter_factory
from core.domain.entities import TokenKind
from core.domain.exceptions import TokenError

console = Console()
token_app = typer.Typer(help="토큰 관련 명령어")


@token_app.command("issue")
def issue_token(
    kind: TokenKind = typer.Option(TokenKind.ANONYMOUS, "--kind", "-k", help="토큰 종류"),
    subject: Optional[str] = typer.Option(None, "--subject", "-s", help="subject (전환: state, 세션: 계정 ID)"),
):
    """서명된 토큰을 발급합니다."""
    try:
        codec = get_adapter_factory().create_token_codec()
        token = codec.issue(kind, subject)
    except ValueError as e:
        console.print(f"[red]오류: {str(e)}[/red]")
        raise typer.Exit(1)

    console.print(Panel(token.value, title=f"{token.kind.value} 토큰", expand=False))


@token_app.command("verify")
def verify_token(
    raw: str = typer.Argument(..., help="검증할 토큰 문자열"),
    kind: TokenKind = typer.Option(..., "--kind", "-k", help="기대하는 토큰 종류"),
):
    """토큰의 서명과 종류를 검증합니다."""
    codec = get_adapter_factory().create_token_codec()

    try:
        subject = codec.verify(raw, kind)
        token, _ = codec.decode(raw)
    except TokenError as e:
        console.print(f"[red]✗ 유효하지 않은 토큰: {str(e)}[/red]")
        raise typer.Exit(1)

    issued = datetime.fromtimestamp(token.issued_at / 1000).strftime("%Y-%m-%d %H:%M:%S")

    table = Table(title="토큰 정보")
    table.add_column("항목", style="cyan")
    table.add_column("값", style="green")
    table.add_row("종류", token.kind.value)
    table.add_row("subject", subject if subject is not None else "-")
    table.add_row("발급 시각", issued)
    console.print(table)
    console.print("[green]✓ 유효한 토큰입니다.[/green]")
