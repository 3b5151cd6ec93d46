"""クエリフィルタ"""

# ユーザー一覧のステータス絞り込み値
USER_STATUS_ALL = ""
USER_STATUS_ACTIVE_FILTER = "1"
USER_STATUS_REGISTERED_FILTER = "2"
USER_STATUS_LOCKED_FILTER = "3"

# 単一ユーザー取得時の include 値
USER_INCLUDE_MEMBERSHIPS = "memberships"
USER_INCLUDE_GROUPS = "groups"


class Filter:
    """クエリパラメータを蓄積するフィルタ

    同じキーへの書き込みは後勝ちで上書きする。
    """

    def __init__(self) -> None:
        self._pairs: dict[str, str] = {}

    def add_pair(self, key: str, value: str) -> None:
        self._pairs[key] = value

    @property
    def params(self) -> dict[str, str]:
        return dict(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Filter):
            return NotImplemented
        return type(self) is type(other) and self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._pairs!r})"


class UsersFilter(Filter):
    """ユーザー一覧のフィルタ"""

    def status(self, status: str) -> "UsersFilter":
        self.add_pair("status", status)
        return self

    def name(self, name: str) -> "UsersFilter":
        self.add_pair("name", name)
        return self

    def group_id(self, group_id: int) -> "UsersFilter":
        self.add_pair("group_id", str(group_id))
        return self


class UserByIdFilter(Filter):
    """単一ユーザー取得のフィルタ（関連データの include 指定）"""

    def include(self, *includes: str) -> "UserByIdFilter":
        """include パラメータを設定（複数指定はカンマ区切りで結合）"""
        self.add_pair("include", ",".join(includes))
        return self
