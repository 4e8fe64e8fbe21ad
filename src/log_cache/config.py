"""日志缓存配置模块

提供统一的配置管理，支持 LOG_CACHE_ 前缀的环境变量和 .env 文件。
"""

import os
import sys
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 快照文件的固定文件名
DEFAULT_CACHE_FILE_NAME = "log-cache.json"

# 单次 pop 默认最多取出的条数
DEFAULT_MAX_POP_SIZE = 100


def user_cache_dir() -> Path:
    """当前平台的用户级缓存目录"""
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    if os.name == "nt":
        local_app_data = os.getenv("LOCALAPPDATA", "").strip()
        if local_app_data:
            return Path(local_app_data)
        return Path.home() / "AppData" / "Local"
    xdg_cache = os.getenv("XDG_CACHE_HOME", "").strip()
    if xdg_cache:
        return Path(xdg_cache)
    return Path.home() / ".cache"


class LogCacheSettings(BaseSettings):
    """日志缓存配置类"""

    # === 诊断配置 ===
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # === 快照文件配置 ===
    CACHE_DIR: str = Field(default="")
    CACHE_FILE_NAME: str = Field(default=DEFAULT_CACHE_FILE_NAME)

    # === 缓冲区配置 ===
    MAX_POP_SIZE: int = Field(default=DEFAULT_MAX_POP_SIZE, ge=1)
    DRAIN_INTERVAL: float = Field(default=5.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("CACHE_FILE_NAME")
    @classmethod
    def validate_file_name(cls, value: str) -> str:
        """快照文件名不能包含目录"""
        value = value.strip()
        if not value or Path(value).name != value:
            raise ValueError(f"CACHE_FILE_NAME 必须是单纯的文件名: {value!r}")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def cache_dir(self) -> Path:
        if self.CACHE_DIR:
            return Path(os.path.expandvars(os.path.expanduser(self.CACHE_DIR)))
        return user_cache_dir()

    @property
    def cache_file(self) -> Path:
        return self.cache_dir / self.CACHE_FILE_NAME


@lru_cache
def get_settings() -> LogCacheSettings:
    """获取全局配置实例"""
    return LogCacheSettings()
