"""Redmine API クライアント（ユーザーリソース）"""

from enum import Enum
from typing import Any, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from ..config import Config
from ..models import (
    ErrorsEnvelope,
    Pagination,
    StatusUpdate,
    User,
    UserEnvelope,
    UsersPage,
)
from .filters import UserByIdFilter, UsersFilter

# list_all_users の 1 ページあたりの件数
PAGE_SIZE = 100

API_KEY_HEADER = "X-Redmine-API-Key"
API_KEY_PARAM = "key"

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)


class RedmineAPIError(Exception):
    """Redmine API エラー"""

    pass


class TransportError(RedmineAPIError):
    """通信エラー（接続失敗・タイムアウトなど）"""

    pass


class DecodeError(RedmineAPIError):
    """レスポンスボディが期待する JSON 形式でない"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ServerError(RedmineAPIError):
    """サーバーがエラーリストを返した"""

    def __init__(self, status_code: int, errors: list[str]):
        message = "\n".join(errors) if errors else f"HTTP {status_code}"
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors


class SerializeError(RedmineAPIError):
    """リクエストペイロードのエンコード失敗"""

    pass


class AuthMode(str, Enum):
    """API キーの渡し方"""

    QUERY = "query"
    HEADER = "header"


class RedmineClient:
    """Redmine API Client

    ページネーション状態は保持しないため、複数の呼び出しから同時に利用できる。
    """

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.base_url = config.redmine.base_url
        self.api_key = config.redmine.api_key
        self.timeout = config.redmine.timeout_sec

        # HTTPクライアントを初期化（API キーはリクエストごとに付与）
        headers = {"Content-Type": "application/json"}
        self.client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.client.close()

    def _request(
        self,
        method: str,
        path: str,
        envelope: Optional[type[EnvelopeT]],
        *,
        params: Optional[dict[str, Any]] = None,
        auth_mode: AuthMode = AuthMode.QUERY,
        content: Optional[bytes] = None,
        success_codes: tuple[int, ...] = (200,),
    ) -> Optional[EnvelopeT]:
        """API リクエストを実行し、レスポンスをエンベロープにデコード

        成功ステータス以外ではエラーエンベロープをデコードして ServerError を送出する。
        """
        query = dict(params or {})
        headers = {}
        if self.api_key:
            if auth_mode is AuthMode.HEADER:
                headers[API_KEY_HEADER] = self.api_key
            else:
                query[API_KEY_PARAM] = self.api_key

        try:
            response = self.client.request(
                method, path, params=query, headers=headers, content=content
            )
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {str(e)}") from e

        if response.status_code not in success_codes:
            errors = self._decode(response, ErrorsEnvelope)
            raise ServerError(response.status_code, errors.errors)

        if envelope is None:
            return None
        return self._decode(response, envelope)

    @staticmethod
    def _decode(response: httpx.Response, envelope: type[EnvelopeT]) -> EnvelopeT:
        try:
            return envelope.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid JSON response (HTTP {response.status_code}): {str(e)}",
                status_code=response.status_code,
            ) from e

    def get_users_page(self, page: Optional[Pagination] = None) -> UsersPage:
        """ユーザー一覧の 1 ページ分をエンベロープごと取得"""
        params = page.params() if page else {}
        return self._request("GET", "/users.json", UsersPage, params=params)

    def list_users(self, page: Optional[Pagination] = None) -> list[User]:
        """ユーザー一覧を 1 ページ分取得"""
        return self.get_users_page(page).users

    def total_user_count(self) -> int:
        """ユーザーの総数を取得"""
        return self.get_users_page(Pagination(limit=1)).total_count

    def list_all_users(self, page_size: int = PAGE_SIZE) -> list[User]:
        """全ページを順に取得して連結

        1 ページ目の total_count で残りのページ数を決める。
        サーバーは limit を上限値に丸めることがあるため、1 ページ目で実際に返された
        limit（なければ件数）で offset を進める。
        途中のページでエラーが起きた場合は取得済みの結果を破棄して送出する。
        """
        first = self.get_users_page(Pagination(offset=0, limit=page_size))
        all_users = list(first.users)

        step = min(page_size, first.limit or len(first.users))
        if step <= 0:
            return all_users

        page = Pagination(offset=step, limit=step)
        while page.offset < first.total_count:
            users = self.list_users(page)
            if not users:
                break
            all_users.extend(users)
            page = page.advance()

        return all_users

    def list_users_filtered(self, users_filter: UsersFilter) -> list[User]:
        """フィルタ付きでユーザー一覧を取得"""
        result = self._request(
            "GET",
            "/users.json",
            UsersPage,
            params=users_filter.params,
            auth_mode=AuthMode.HEADER,
        )
        return result.users

    def get_user(self, user_id: int) -> User:
        """特定ユーザーを取得"""
        result = self._request("GET", f"/users/{user_id}.json", UserEnvelope)
        return result.user

    def get_user_filtered(self, user_id: int, user_filter: UserByIdFilter) -> User:
        """関連データを含めて特定ユーザーを取得"""
        result = self._request(
            "GET",
            f"/users/{user_id}.json",
            UserEnvelope,
            params=user_filter.params,
            auth_mode=AuthMode.HEADER,
        )
        return result.user

    def set_user_status(self, status: Union[StatusUpdate, int], user_id: int) -> None:
        """ユーザーのステータスを更新

        成功は 204 No Content。201 Created を返すサーバーもあるため同様に成功扱いとする。
        """
        try:
            if not isinstance(status, StatusUpdate):
                status = StatusUpdate.of(status)
            body = status.model_dump_json().encode("utf-8")
        except ValueError as e:
            raise SerializeError(f"Invalid status payload: {str(e)}") from e

        self._request(
            "PUT",
            f"/users/{user_id}.json",
            None,
            content=body,
            success_codes=(204, 201),
        )

    def test_connection(self) -> dict[str, Any]:
        """接続テスト（ユーザー総数の取得で確認）"""
        try:
            users_count = self.total_user_count()

            return {
                "success": True,
                "message": "接続成功",
                "users_count": users_count,
            }

        except RedmineAPIError as e:
            return {
                "success": False,
                "message": f"接続失敗: {str(e)}",
                "users_count": 0,
            }
