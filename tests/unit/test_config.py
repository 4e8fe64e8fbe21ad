"""
配置单元测试
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from log_cache.config import LogCacheSettings, get_settings, user_cache_dir


class TestLogCacheSettings:
    """配置测试"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_CACHE_CACHE_DIR", raising=False)
        settings = LogCacheSettings(_env_file=None)

        assert settings.DEBUG is False
        assert settings.MAX_POP_SIZE == 100
        assert settings.CACHE_FILE_NAME == "log-cache.json"
        assert settings.cache_file == user_cache_dir() / "log-cache.json"

    def test_env_overrides(self, monkeypatch, tmp_path):
        """测试环境变量覆盖"""
        monkeypatch.setenv("LOG_CACHE_DEBUG", "true")
        monkeypatch.setenv("LOG_CACHE_MAX_POP_SIZE", "25")
        monkeypatch.setenv("LOG_CACHE_CACHE_FILE_NAME", "pending.json")
        monkeypatch.setenv("LOG_CACHE_LOG_LEVEL", "warning")
        get_settings.cache_clear()

        settings = get_settings()

        assert settings.DEBUG is True
        assert settings.MAX_POP_SIZE == 25
        assert settings.LOG_LEVEL == "WARNING"
        assert settings.cache_file == tmp_path / "cache" / "pending.json"

    def test_invalid_pop_size(self):
        with pytest.raises(ValidationError):
            LogCacheSettings(MAX_POP_SIZE=0, _env_file=None)

    def test_file_name_must_not_contain_directory(self):
        with pytest.raises(ValidationError):
            LogCacheSettings(CACHE_FILE_NAME="sub/log.json", _env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestUserCacheDir:
    """用户缓存目录测试"""

    def test_xdg_cache_home(self, monkeypatch, tmp_path):
        monkeypatch.setattr("log_cache.config.sys.platform", "linux")
        monkeypatch.setattr("log_cache.config.os.name", "posix")
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))

        assert user_cache_dir() == tmp_path / "xdg"

    def test_linux_fallback(self, monkeypatch):
        monkeypatch.setattr("log_cache.config.sys.platform", "linux")
        monkeypatch.setattr("log_cache.config.os.name", "posix")
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)

        assert user_cache_dir() == Path.home() / ".cache"

    def test_macos(self, monkeypatch):
        monkeypatch.setattr("log_cache.config.sys.platform", "darwin")

        assert user_cache_dir() == Path.home() / "Library" / "Caches"
