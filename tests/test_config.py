"""Tests for configuration loading."""

import os

import pytest
from pydantic import ValidationError

from uptime_monitor.config import (
    Config,
    LoggingConfig,
    TwilioConfig,
    WorkerConfig,
    load_config,
)

ENV_VARS = (
    "APP_ENV", "CONFIG_PATH", "LOG_LEVEL", "STORAGE_BACKEND", "DATABASE_URL",
    "DATA_DIR", "LOG_DIR", "TWILIO_ENABLED", "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN", "TWILIO_FROM_PHONE", "PROMETHEUS_ENABLED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test in an empty directory without config overrides."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def write_config(tmp_path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


@pytest.mark.unit
class TestConfigModels:
    """Model defaults and validators."""

    def test_defaults(self):
        config = Config()

        assert config.worker.interval_seconds == 60
        assert config.worker.max_overlapping_cycles is None
        assert config.storage.backend == "file"
        assert config.storage.data_dir == ".data"
        assert config.log_sink.log_dir == ".logs"
        assert config.twilio.enabled is False
        assert config.logging.level == "INFO"
        assert config.prometheus.enabled is False

    def test_worker_values_must_be_positive(self):
        with pytest.raises(ValidationError):
            WorkerConfig(interval_seconds=0)
        with pytest.raises(ValidationError):
            WorkerConfig(max_overlapping_cycles=0)
        assert WorkerConfig(max_overlapping_cycles=None).max_overlapping_cycles is None

    def test_log_level_is_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")

    def test_twilio_requires_credentials_when_enabled(self):
        with pytest.raises(ValidationError):
            TwilioConfig(enabled=True, account_sid="AC1")

        config = TwilioConfig(
            enabled=True, account_sid="AC1", auth_token="t", from_phone="+15550006666"
        )
        assert config.enabled is True

    def test_unknown_backend_is_rejected(self):
        with pytest.raises(ValidationError):
            Config(storage={"backend": "redis"})


@pytest.mark.unit
class TestLoadConfig:
    """YAML file and environment overrides."""

    def test_missing_file_in_development_uses_defaults(self):
        config = load_config()
        assert config.worker.interval_seconds == 60

    def test_missing_file_in_production_fails(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")

        with pytest.raises(FileNotFoundError):
            load_config()

    def test_yaml_values_are_loaded(self, monkeypatch, tmp_path):
        path = write_config(tmp_path, (
            "worker:\n"
            "  interval_seconds: 30\n"
            "storage:\n"
            "  backend: database\n"
            "  database_url: sqlite+aiosqlite:///:memory:\n"
        ))
        monkeypatch.setenv("CONFIG_PATH", path)

        config = load_config()

        assert config.worker.interval_seconds == 30
        assert config.storage.backend == "database"
        assert config.storage.database_url == "sqlite+aiosqlite:///:memory:"

    def test_invalid_yaml(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CONFIG_PATH", write_config(tmp_path, "worker: [unclosed\n"))

        with pytest.raises(ValueError):
            load_config()

    def test_invalid_values(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CONFIG_PATH", write_config(tmp_path, "worker:\n  interval_seconds: -1\n"))

        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config()

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DATA_DIR", str(tmp_path / "records"))
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "streams"))
        monkeypatch.setenv("PROMETHEUS_ENABLED", "true")
        monkeypatch.setenv("TWILIO_ENABLED", "yes")
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC1")
        monkeypatch.setenv("TWILIO_AUTH_TOKEN", "token")
        monkeypatch.setenv("TWILIO_FROM_PHONE", "+15550006666")

        config = load_config()

        assert config.logging.level == "DEBUG"
        assert config.storage.data_dir == str(tmp_path / "records")
        assert config.log_sink.log_dir == str(tmp_path / "streams")
        assert config.prometheus.enabled is True
        assert config.twilio.enabled is True
        assert config.twilio.account_sid == "AC1"

    def test_twilio_enabled_from_env_without_credentials(self, monkeypatch):
        monkeypatch.setenv("TWILIO_ENABLED", "true")

        with pytest.raises(ValueError, match="credentials"):
            load_config()

    def test_unsupported_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "redis")

        with pytest.raises(ValueError):
            load_config()

    def test_dotenv_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("# local settings\nLOG_DIR='/tmp/uptime-logs'\n")

        try:
            config = load_config()
            assert config.log_sink.log_dir == "/tmp/uptime-logs"
        finally:
            os.environ.pop("LOG_DIR", None)
