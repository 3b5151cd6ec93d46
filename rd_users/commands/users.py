"""users コマンド - ユーザーの参照・ステータス更新"""

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..api import RedmineAPIError, RedmineClient, UserByIdFilter, UsersFilter
from ..api.filters import (
    USER_INCLUDE_GROUPS,
    USER_INCLUDE_MEMBERSHIPS,
    USER_STATUS_ACTIVE_FILTER,
    USER_STATUS_ALL,
    USER_STATUS_LOCKED_FILTER,
    USER_STATUS_REGISTERED_FILTER,
)
from ..models import (
    USER_STATUS_ACTIVE,
    USER_STATUS_LOCKED,
    USER_STATUS_REGISTERED,
    Pagination,
    User,
)
from .check import load_and_override_config

users_command = typer.Typer()
console = Console()

STATUS_FILTERS = {
    "all": USER_STATUS_ALL,
    "active": USER_STATUS_ACTIVE_FILTER,
    "registered": USER_STATUS_REGISTERED_FILTER,
    "locked": USER_STATUS_LOCKED_FILTER,
}

STATUS_CODES = {
    "active": USER_STATUS_ACTIVE,
    "registered": USER_STATUS_REGISTERED,
    "locked": USER_STATUS_LOCKED,
}

STATUS_LABELS = {
    USER_STATUS_ACTIVE: "有効",
    USER_STATUS_REGISTERED: "登録済み",
    USER_STATUS_LOCKED: "ロック中",
}

INCLUDES = (USER_INCLUDE_MEMBERSHIPS, USER_INCLUDE_GROUPS)


def _handle_api_error(error: RedmineAPIError) -> None:
    """API エラーを表示して終了"""
    console.print(
        Panel(
            f"[bold red]✗ API Error: {str(error)}[/bold red]",
            title="エラー",
            border_style="red",
        )
    )
    raise typer.Exit(1) from error


def _build_users_filter(
    status: str | None, name: str | None, group_id: int | None
) -> UsersFilter | None:
    """オプションからフィルタを組み立てる（指定がなければ None）"""
    if status is None and name is None and group_id is None:
        return None

    users_filter = UsersFilter()
    if status is not None:
        if status not in STATUS_FILTERS:
            console.print(f"[red]エラー: 不明なステータス '{status}'[/red]")
            raise typer.Exit(1)
        users_filter.status(STATUS_FILTERS[status])
    if name is not None:
        users_filter.name(name)
    if group_id is not None:
        users_filter.group_id(group_id)
    return users_filter


def _parse_status_code(status: str) -> int:
    if status in STATUS_CODES:
        return STATUS_CODES[status]
    if status.isdigit() and int(status) in STATUS_LABELS:
        return int(status)
    console.print(f"[red]エラー: 不明なステータス '{status}'[/red]")
    raise typer.Exit(1)


def _display_users(users: list[User]) -> None:
    """ユーザー一覧をテーブル表示"""
    console.print(f"\n[bold]ユーザー数:[/bold] {len(users)}")
    if not users:
        return

    table = Table(title="ユーザー一覧")
    table.add_column("ID", style="yellow")
    table.add_column("ログイン", style="blue")
    table.add_column("名前", style="green")
    table.add_column("メール")
    table.add_column("最終ログイン")

    for user in users:
        table.add_row(
            str(user.id),
            user.login,
            user.full_name,
            user.mail,
            user.last_login_on or "",
        )

    console.print(table)


def _display_user(user: User) -> None:
    """ユーザー詳細を表示"""
    table = Table(title=f"ユーザー #{user.id}")
    table.add_column("項目", style="blue")
    table.add_column("値", style="green")

    table.add_row("ログイン", user.login)
    table.add_row("名前", user.full_name)
    table.add_row("メール", user.mail)
    table.add_row("ステータス", STATUS_LABELS.get(user.status, str(user.status or "")))
    table.add_row("作成日時", user.created_on or "")
    table.add_row("最終ログイン", user.last_login_on or "")
    for field in user.custom_fields or []:
        table.add_row(field.name, str(field.value))

    console.print(table)

    if user.memberships:
        memberships_table = Table(title="メンバーシップ")
        memberships_table.add_column("プロジェクト", style="blue")
        memberships_table.add_column("ロール", style="green")
        for membership in user.memberships:
            project = membership.project.name if membership.project else ""
            roles = ", ".join(role.name for role in membership.roles)
            memberships_table.add_row(project, roles)
        console.print(memberships_table)

    if user.groups:
        console.print(
            f"[bold]グループ:[/bold] {', '.join(group.name for group in user.groups)}"
        )


@users_command.command("list")
def list_users(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="設定ファイルのパス"
    ),
    base_url: str | None = typer.Option(None, "--url", help="Redmine ベースURL"),
    api_key: str | None = typer.Option(None, "--api-key", help="API キー"),
    fetch_all: bool = typer.Option(False, "--all", "-a", help="全ページを取得"),
    status: str | None = typer.Option(
        None, "--status", help="ステータス (all/active/registered/locked)"
    ),
    name: str | None = typer.Option(None, "--name", help="名前・ログインの部分一致"),
    group_id: int | None = typer.Option(None, "--group-id", help="グループID"),
    offset: int = typer.Option(0, "--offset", min=0, help="取得開始位置"),
    limit: int | None = typer.Option(None, "--limit", min=1, help="取得件数"),
) -> None:
    """ユーザー一覧を表示"""

    config = load_and_override_config(config_path, base_url, api_key)
    users_filter = _build_users_filter(status, name, group_id)
    paginated = offset > 0 or limit is not None
    if users_filter is not None and (fetch_all or paginated):
        raise typer.BadParameter(
            "--status/--name/--group-id は --all/--offset/--limit と併用できません"
        )
    if fetch_all and paginated:
        raise typer.BadParameter("--all は --offset/--limit と併用できません")

    try:
        with RedmineClient(config) as client:
            if users_filter is not None:
                users = client.list_users_filtered(users_filter)
            elif fetch_all:
                users = client.list_all_users(config.users.page_size)
            else:
                users = client.list_users(Pagination(offset=offset, limit=limit))
    except RedmineAPIError as e:
        _handle_api_error(e)

    _display_users(users)


@users_command.command("show")
def show_user(
    user_id: int = typer.Argument(..., help="ユーザーID"),
    include: list[str] | None = typer.Option(
        None, "--include", "-i", help="関連データ (memberships/groups)"
    ),
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="設定ファイルのパス"
    ),
    base_url: str | None = typer.Option(None, "--url", help="Redmine ベースURL"),
    api_key: str | None = typer.Option(None, "--api-key", help="API キー"),
) -> None:
    """ユーザーの詳細を表示"""

    config = load_and_override_config(config_path, base_url, api_key)

    for value in include or []:
        if value not in INCLUDES:
            console.print(f"[red]エラー: 不明な include '{value}'[/red]")
            raise typer.Exit(1)

    try:
        with RedmineClient(config) as client:
            if include:
                user = client.get_user_filtered(
                    user_id, UserByIdFilter().include(*include)
                )
            else:
                user = client.get_user(user_id)
    except RedmineAPIError as e:
        _handle_api_error(e)

    _display_user(user)


@users_command.command("set-status")
def set_status(
    user_id: int = typer.Argument(..., help="ユーザーID"),
    status: str = typer.Argument(..., help="ステータス (active/registered/locked)"),
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="設定ファイルのパス"
    ),
    base_url: str | None = typer.Option(None, "--url", help="Redmine ベースURL"),
    api_key: str | None = typer.Option(None, "--api-key", help="API キー"),
) -> None:
    """ユーザーのステータスを更新"""

    config = load_and_override_config(config_path, base_url, api_key)
    code = _parse_status_code(status)

    try:
        with RedmineClient(config) as client:
            client.set_user_status(code, user_id)
    except RedmineAPIError as e:
        _handle_api_error(e)

    console.print(
        f"[green]✓ ユーザー #{user_id} のステータスを「{STATUS_LABELS[code]}」に更新しました[/green]"
    )
