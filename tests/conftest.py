"""pytest設定とフィクスチャ"""

from pathlib import Path
from tempfile import NamedTemporaryFile

import httpx
import pytest
import yaml

from rd_users.api.client import RedmineClient
from rd_users.config import Config, RedmineConfig, UsersConfig


@pytest.fixture
def mock_config():
    """テスト用の設定オブジェクト"""
    return Config(
        redmine=RedmineConfig(
            base_url="http://test-redmine:3000",
            api_key="test-api-key",
            timeout_sec=10,
        ),
        users=UsersConfig(page_size=100),
    )


@pytest.fixture
def temp_config_file():
    """一時的な設定ファイル"""
    config_data = {
        "redmine": {
            "base_url": "http://temp-redmine:3000",
            "api_key": "temp-api-key",
            "timeout_sec": 20,
        },
        "users": {"page_size": 50},
    }

    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_data, f, default_flow_style=False)
        temp_file = f.name

    yield temp_file

    # クリーンアップ
    Path(temp_file).unlink(missing_ok=True)


def make_user(user_id: int, **overrides) -> dict:
    """Redmine のユーザー JSON を生成"""
    user = {
        "id": user_id,
        "login": f"user{user_id}",
        "firstname": "Taro",
        "lastname": f"Yamada{user_id}",
        "mail": f"user{user_id}@example.com",
        "created_on": "2024-01-01T00:00:00Z",
        "last_login_on": "2025-01-01T09:00:00Z",
        "status": 1,
    }
    user.update(overrides)
    return user


@pytest.fixture
def mock_redmine_response():
    """モックRedmineレスポンス"""
    return {
        "users": {
            "users": [make_user(1), make_user(2)],
            "total_count": 2,
            "offset": 0,
            "limit": 25,
        },
        "user": {
            "user": make_user(
                1,
                memberships=[
                    {
                        "id": 10,
                        "project": {"id": 3, "name": "Test Project"},
                        "roles": [{"id": 4, "name": "開発者"}],
                    }
                ],
                groups=[{"id": 7, "name": "Developers"}],
                custom_fields=[{"id": 1, "name": "部署", "value": "開発部"}],
            )
        },
        "errors": {"errors": ["Status is invalid", "Login has already been taken"]},
    }


class RecordingTransport:
    """リクエストを記録しつつ handler の応答を返すモックトランスポート"""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)


@pytest.fixture
def user_factory():
    """ユーザー JSON 生成関数"""
    return make_user


@pytest.fixture
def make_client(mock_config):
    """handler を受け取り、モックトランスポート付きクライアントを返すファクトリ"""
    clients = []

    def factory(handler, config=None):
        recorder = RecordingTransport(handler)
        client = RedmineClient(config or mock_config, transport=recorder.transport)
        clients.append(client)
        return client, recorder

    yield factory

    for client in clients:
        client.client.close()
