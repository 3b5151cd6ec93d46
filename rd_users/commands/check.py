"""疎通確認コマンド"""

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..api import RedmineClient
from ..config import Config, load_config

check_command = typer.Typer()
console = Console()


def load_and_override_config(
    config_path: str | None, base_url: str | None, api_key: str | None
) -> Config:
    """設定を読み込み、コマンドライン引数で上書き"""
    config = load_config(config_path)

    if base_url:
        config.redmine.base_url = base_url
    if api_key:
        config.redmine.api_key = api_key

    return config


def _print_connection_header(config: Config) -> None:
    """接続確認のヘッダー情報を表示"""
    console.print("[bold blue]Redmine 疎通確認[/bold blue]")
    console.print(f"URL: {config.redmine.base_url}")
    console.print(f"API Key: {'設定済み' if config.redmine.api_key else '未設定'}")
    console.print()


def _print_result_panel(message: str, success: bool) -> None:
    if success:
        console.print(
            Panel(
                f"[bold green]✓ {message}[/bold green]",
                title="接続結果",
                border_style="green",
            )
        )
    else:
        console.print(
            Panel(
                f"[bold red]✗ {message}[/bold red]",
                title="接続結果",
                border_style="red",
            )
        )


@check_command.command("connection")
def check_connection(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="設定ファイルのパス"
    ),
    base_url: str | None = typer.Option(None, "--url", help="Redmine ベースURL"),
    api_key: str | None = typer.Option(None, "--api-key", help="API キー"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="詳細な情報を表示"),
) -> None:
    """Redmine との疎通確認"""

    config = load_and_override_config(config_path, base_url, api_key)
    _print_connection_header(config)

    with RedmineClient(config) as client:
        result = client.test_connection()

    if not result["success"]:
        _print_result_panel(result["message"], success=False)
        raise typer.Exit(1)

    _print_result_panel(result["message"], success=True)
    console.print(f"\n[bold]ユーザー数:[/bold] {result['users_count']}")
    if verbose:
        console.print(f"タイムアウト: {config.redmine.timeout_sec}秒")


@check_command.command("config")
def check_config(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="設定ファイルのパス"
    ),
) -> None:
    """設定ファイルの確認"""

    config = load_config(config_path)

    console.print("[bold blue]設定確認[/bold blue]")

    # Redmine 設定
    redmine_table = Table(title="Redmine 設定")
    redmine_table.add_column("項目", style="blue")
    redmine_table.add_column("値", style="green")

    redmine_table.add_row("Base URL", config.redmine.base_url)
    redmine_table.add_row("API Key", "設定済み" if config.redmine.api_key else "未設定")
    redmine_table.add_row("Timeout", f"{config.redmine.timeout_sec}秒")
    redmine_table.add_row("Page Size", str(config.users.page_size))

    console.print(redmine_table)
