"""設定管理モジュール"""

from .settings import Config, RedmineConfig, UsersConfig, load_config

__all__ = ["Config", "RedmineConfig", "UsersConfig", "load_config"]
