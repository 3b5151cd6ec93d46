"""ユーザーリソースのデータモデル定義"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Redmine のユーザーステータス値
USER_STATUS_ACTIVE = 1
USER_STATUS_REGISTERED = 2
USER_STATUS_LOCKED = 3


class RedmineRecord(BaseModel):
    """サーバーから返されるレコードの基底クラス（不変）"""

    model_config = ConfigDict(frozen=True, extra="ignore")


class IdName(RedmineRecord):
    """他エンティティへの参照（プロジェクト・ロール・グループ）"""

    id: int
    name: str = ""


class Membership(RedmineRecord):
    """プロジェクトメンバーシップ"""

    id: int
    project: Optional[IdName] = None
    roles: list[IdName] = Field(default_factory=list)


class CustomField(RedmineRecord):
    """カスタムフィールド"""

    id: int
    name: str = ""
    value: Any = None
    multiple: Optional[bool] = None


class User(RedmineRecord):
    """Redmine ユーザー"""

    id: int
    login: str = ""
    firstname: str = ""
    lastname: str = ""
    mail: str = ""
    admin: Optional[bool] = None
    status: Optional[int] = None
    created_on: Optional[str] = None
    updated_on: Optional[str] = None
    last_login_on: Optional[str] = None
    memberships: list[Membership] = Field(default_factory=list)
    groups: list[IdName] = Field(default_factory=list)
    custom_fields: Optional[list[CustomField]] = None

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()


class UsersPage(RedmineRecord):
    """ユーザー一覧のエンベロープ"""

    users: list[User] = Field(default_factory=list)
    total_count: int = 0
    offset: int = 0
    limit: Optional[int] = None


class UserEnvelope(RedmineRecord):
    """単一ユーザーのエンベロープ"""

    user: User


class ErrorsEnvelope(RedmineRecord):
    """エラーレスポンスのエンベロープ"""

    errors: list[str] = Field(default_factory=list)


class UserStatus(BaseModel):
    status: int


class StatusUpdate(BaseModel):
    """ステータス更新リクエストのペイロード

    JSON 形式: {"user": {"status": <int>}}
    """

    user: UserStatus

    @classmethod
    def of(cls, code: int) -> "StatusUpdate":
        """ステータスコードからペイロードを生成"""
        return cls(user=UserStatus(status=code))

    @property
    def code(self) -> int:
        return self.user.status


class Pagination(BaseModel):
    """ページネーションカーソル（offset/limit）

    クライアントの状態としてではなく、呼び出しごとに値として渡す。
    """

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, gt=0)

    def params(self) -> dict[str, int]:
        """クエリパラメータに変換"""
        params: dict[str, int] = {}
        if self.offset > 0:
            params["offset"] = self.offset
        if self.limit is not None:
            params["limit"] = self.limit
        return params

    def advance(self) -> "Pagination":
        """次のページのカーソルを返す"""
        if self.limit is None:
            raise ValueError("limit が未設定のカーソルは進められません")
        return Pagination(offset=self.offset + self.limit, limit=self.limit)
