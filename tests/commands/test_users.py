"""users コマンドのテスト"""

from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from rd_users.api.client import ServerError
from rd_users.api.filters import UserByIdFilter, UsersFilter
from rd_users.commands.users import users_command
from rd_users.models import Pagination, User


@pytest.fixture
def mock_client(mock_config):
    """RedmineClient と load_config をモック化"""
    with (
        patch("rd_users.commands.check.load_config", return_value=mock_config),
        patch("rd_users.commands.users.RedmineClient") as mock_client_class,
    ):
        client = Mock()
        mock_client_class.return_value.__enter__.return_value = client
        yield client


def _users() -> list[User]:
    return [
        User(id=1, login="taro", firstname="Taro", lastname="Yamada"),
        User(id=2, login="hana", firstname="Hanako", lastname="Sato"),
    ]


class TestListCommand:
    """users list のテストクラス"""

    def setup_method(self):
        self.runner = CliRunner()

    def test_list_default_page(self, mock_client):
        """オプションなしは 1 ページ取得"""
        mock_client.list_users.return_value = _users()

        result = self.runner.invoke(users_command, ["list"])

        assert result.exit_code == 0
        assert "ユーザー数: 2" in result.stdout
        assert "taro" in result.stdout
        mock_client.list_users.assert_called_once_with(Pagination(offset=0, limit=None))

    def test_list_with_offset_limit(self, mock_client):
        mock_client.list_users.return_value = []

        result = self.runner.invoke(users_command, ["list", "--offset", "20", "--limit", "10"])

        assert result.exit_code == 0
        mock_client.list_users.assert_called_once_with(Pagination(offset=20, limit=10))

    def test_list_all(self, mock_client, mock_config):
        """--all は全ページ取得"""
        mock_client.list_all_users.return_value = _users()

        result = self.runner.invoke(users_command, ["list", "--all"])

        assert result.exit_code == 0
        mock_client.list_all_users.assert_called_once_with(mock_config.users.page_size)
        mock_client.list_users.assert_not_called()

    def test_list_filtered(self, mock_client):
        """フィルタ指定時はフィルタ付き取得"""
        mock_client.list_users_filtered.return_value = _users()[:1]

        result = self.runner.invoke(
            users_command,
            ["list", "--status", "locked", "--name", "taro", "--group-id", "7"],
        )

        assert result.exit_code == 0
        assert "ユーザー数: 1" in result.stdout
        mock_client.list_users_filtered.assert_called_once_with(
            UsersFilter().status("3").name("taro").group_id(7)
        )

    @pytest.mark.parametrize(
        "args",
        [
            ["--status", "locked", "--all"],
            ["--name", "taro", "--offset", "10"],
            ["--group-id", "7", "--limit", "5"],
            ["--all", "--offset", "100"],
            ["--all", "--limit", "10"],
        ],
    )
    def test_list_conflicting_options(self, mock_client, args):
        """併用できないオプションは使用法エラー"""
        result = self.runner.invoke(users_command, ["list", *args])

        assert result.exit_code == 2
        mock_client.list_users.assert_not_called()
        mock_client.list_all_users.assert_not_called()
        mock_client.list_users_filtered.assert_not_called()

    def test_list_unknown_status(self, mock_client):
        result = self.runner.invoke(users_command, ["list", "--status", "deleted"])

        assert result.exit_code == 1
        assert "不明なステータス" in result.stdout
        mock_client.list_users_filtered.assert_not_called()

    def test_list_api_error(self, mock_client):
        """API エラーは終了コード 1"""
        mock_client.list_users.side_effect = ServerError(403, ["Forbidden"])

        result = self.runner.invoke(users_command, ["list"])

        assert result.exit_code == 1
        assert "Forbidden" in result.stdout


class TestShowCommand:
    """users show のテストクラス"""

    def setup_method(self):
        self.runner = CliRunner()

    def test_show(self, mock_client):
        mock_client.get_user.return_value = User(
            id=5, login="taro", mail="taro@example.com", status=3
        )

        result = self.runner.invoke(users_command, ["show", "5"])

        assert result.exit_code == 0
        assert "taro@example.com" in result.stdout
        assert "ロック中" in result.stdout
        mock_client.get_user.assert_called_once_with(5)

    def test_show_with_include(self, mock_client, mock_redmine_response):
        mock_client.get_user_filtered.return_value = User.model_validate(
            mock_redmine_response["user"]["user"]
        )

        result = self.runner.invoke(
            users_command, ["show", "1", "-i", "memberships", "-i", "groups"]
        )

        assert result.exit_code == 0
        assert "Test Project" in result.stdout
        assert "Developers" in result.stdout
        mock_client.get_user_filtered.assert_called_once_with(
            1, UserByIdFilter().include("memberships", "groups")
        )

    def test_show_unknown_include(self, mock_client):
        result = self.runner.invoke(users_command, ["show", "1", "-i", "issues"])

        assert result.exit_code == 1
        mock_client.get_user_filtered.assert_not_called()


class TestSetStatusCommand:
    """users set-status のテストクラス"""

    def setup_method(self):
        self.runner = CliRunner()

    @pytest.mark.parametrize("status, code", [("locked", 3), ("active", 1), ("2", 2)])
    def test_set_status(self, mock_client, status, code):
        result = self.runner.invoke(users_command, ["set-status", "5", status])

        assert result.exit_code == 0
        mock_client.set_user_status.assert_called_once_with(code, 5)

    def test_set_status_unknown(self, mock_client):
        result = self.runner.invoke(users_command, ["set-status", "5", "deleted"])

        assert result.exit_code == 1
        mock_client.set_user_status.assert_not_called()

    def test_set_status_server_error(self, mock_client):
        mock_client.set_user_status.side_effect = ServerError(422, ["Status is invalid"])

        result = self.runner.invoke(users_command, ["set-status", "5", "locked"])

        assert result.exit_code == 1
        assert "Status is invalid" in result.stdout
