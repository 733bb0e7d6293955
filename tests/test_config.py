"""Tests for the config module."""

import os
from pathlib import Path

import pytest

from session_reports.config import Config


class TestEnvFile:
    def test_ensure_env_file_creates_file(self, tmp_path):
        config = Config(env_file=tmp_path / "sr" / "env")
        assert config.ensure_env_file() is True
        assert config.env_file.exists()
        # Check permissions (owner-only)
        assert oct(config.env_file.stat().st_mode & 0o777) == "0o600"

    def test_ensure_env_file_idempotent(self, tmp_path):
        config = Config(env_file=tmp_path / "sr" / "env")
        config.ensure_env_file()
        assert config.ensure_env_file() is False  # already exists

    def test_load_env_file_skips_comments(self, tmp_path, monkeypatch):
        env_file = tmp_path / "env"
        env_file.write_text("# SHOULD_NOT_SET=value\nACTUAL_KEY=works\nnot a setting\n")
        monkeypatch.delenv("SHOULD_NOT_SET", raising=False)
        monkeypatch.delenv("ACTUAL_KEY", raising=False)

        config = Config(env_file=env_file)
        config.load_env_file()

        assert os.environ.get("SHOULD_NOT_SET") is None
        assert os.environ.get("ACTUAL_KEY") == "works"
        monkeypatch.delenv("ACTUAL_KEY", raising=False)

    def test_load_env_file_does_not_overwrite(self, tmp_path, monkeypatch):
        env_file = tmp_path / "env"
        env_file.write_text("SESSION_REPORTS_PORT=9999\n")
        monkeypatch.setenv("SESSION_REPORTS_PORT", "4000")

        config = Config(env_file=env_file)
        config.load_env_file()

        assert os.environ.get("SESSION_REPORTS_PORT") == "4000"

    def test_load_env_file_strips_quotes(self, tmp_path, monkeypatch):
        env_file = tmp_path / "env"
        env_file.write_text("SESSION_REPORTS_HOST='0.0.0.0'\nSESSION_REPORTS_LOG_LEVEL=\"debug\"\n")
        monkeypatch.delenv("SESSION_REPORTS_HOST", raising=False)
        monkeypatch.delenv("SESSION_REPORTS_LOG_LEVEL", raising=False)

        Config(env_file=env_file).load_env_file()
        config = Config(env_file=env_file)

        assert config.host == "0.0.0.0"
        assert config.log_level == "DEBUG"
        monkeypatch.delenv("SESSION_REPORTS_HOST", raising=False)
        monkeypatch.delenv("SESSION_REPORTS_LOG_LEVEL", raising=False)

    def test_load_missing_env_file_is_noop(self, tmp_path):
        config = Config(env_file=tmp_path / "nonexistent")
        config.load_env_file()  # should not raise


class TestDefaults:
    def test_defaults(self, tmp_path, monkeypatch):
        for name in (
            "SESSION_REPORTS_DATA_FILE",
            "SESSION_REPORTS_HOST",
            "SESSION_REPORTS_PORT",
            "SESSION_REPORTS_MAX_BYTES",
            "SESSION_REPORTS_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

        config = Config()
        assert config.data_file == tmp_path / "data" / "session-reports" / "reports.json"
        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.max_content_length == 50 * 1024 * 1024
        assert config.log_level == "INFO"

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SESSION_REPORTS_DATA_FILE", str(tmp_path / "custom.json"))
        monkeypatch.setenv("SESSION_REPORTS_PORT", "8080")
        monkeypatch.setenv("SESSION_REPORTS_MAX_BYTES", "1024")

        config = Config()
        assert config.data_file == tmp_path / "custom.json"
        assert config.port == 8080
        assert config.max_content_length == 1024

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("SESSION_REPORTS_PORT", "eighty")
        with pytest.raises(ValueError, match="SESSION_REPORTS_PORT"):
            Config()

    def test_ensure_data_dir(self, tmp_path):
        config = Config(data_file=tmp_path / "a" / "b" / "reports.json")
        config.ensure_data_dir()
        assert (tmp_path / "a" / "b").is_dir()

    def test_config_env_file_under_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert Config().env_file == Path(tmp_path) / "session-reports" / "env"
