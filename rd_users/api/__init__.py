"""API クライアントモジュール"""

from .client import (
    PAGE_SIZE,
    AuthMode,
    DecodeError,
    RedmineAPIError,
    RedmineClient,
    SerializeError,
    ServerError,
    TransportError,
)
from .filters import Filter, UserByIdFilter, UsersFilter

__all__ = [
    "PAGE_SIZE",
    "AuthMode",
    "RedmineClient",
    "RedmineAPIError",
    "TransportError",
    "DecodeError",
    "ServerError",
    "SerializeError",
    "Filter",
    "UsersFilter",
    "UserByIdFilter",
]
