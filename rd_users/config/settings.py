"""設定管理"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class RedmineConfig(BaseModel):
    """Redmine設定"""

    base_url: str = Field(default="http://redmine:3000")
    api_key: Optional[str] = Field(default=None)
    timeout_sec: int = Field(default=15)


class UsersConfig(BaseModel):
    """ユーザー取得設定"""

    page_size: int = Field(default=100, gt=0)


class Config(BaseModel):
    """全体設定"""

    redmine: RedmineConfig = Field(default_factory=RedmineConfig)
    users: UsersConfig = Field(default_factory=UsersConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """設定ファイルを読み込み"""
    if config_path is None:
        # デフォルトの設定ファイルパスを探索
        candidates = [
            Path.cwd() / "rd-users.yaml",
            Path.home() / ".config" / "rd-users" / "config.yaml",
        ]
        config_path = None
        for candidate in candidates:
            if candidate.exists():
                config_path = str(candidate)
                break

    if config_path and Path(config_path).exists():
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return Config(**(data or {}))

    # 設定ファイルがない場合はデフォルト設定を返す
    config = Config()

    # 環境変数からAPI_KEYを取得
    if os.getenv("REDMINE_API_KEY"):
        config.redmine.api_key = os.getenv("REDMINE_API_KEY")

    return config
