"""Configuration management with Pydantic settings."""

import os
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator
import yaml


TRUTHY = ("true", "1", "yes", "on")


class WorkerConfig(BaseModel):
    """Background worker (scheduler) settings."""
    interval_seconds: int = 60
    # None lets every tick start regardless of cycles still running
    max_overlapping_cycles: Optional[int] = None
    max_concurrent_probes: int = 50

    @field_validator('interval_seconds', 'max_overlapping_cycles', 'max_concurrent_probes')
    @classmethod
    def must_be_positive(cls, v, info):
        if v is not None and v < 1:
            raise ValueError(f'{info.field_name} must be at least 1')
        return v


class StorageConfig(BaseModel):
    """Record store configuration."""
    backend: str = "file"
    data_dir: str = ".data"
    database_url: str = "sqlite+aiosqlite:///./.data/uptime_monitor.db"
    echo: bool = False

    @field_validator('backend')
    @classmethod
    def backend_must_be_supported(cls, v):
        supported = ['file', 'database']
        if v not in supported:
            raise ValueError(f'storage backend must be one of {supported}')
        return v


class LogSinkConfig(BaseModel):
    """Per-check log stream configuration."""
    log_dir: str = ".logs"


class TwilioConfig(BaseModel):
    """Twilio SMS alert configuration."""
    enabled: bool = False
    account_sid: str = ""
    auth_token: str = ""
    from_phone: str = ""
    api_base: str = "https://api.twilio.com"
    timeout: int = 10

    @model_validator(mode='after')
    def credentials_required_if_enabled(self):
        if self.enabled:
            for field_name in ('account_sid', 'auth_token', 'from_phone'):
                if not getattr(self, field_name):
                    raise ValueError(f'{field_name} must be set when Twilio alerts are enabled')
        return self

    @field_validator('timeout')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('timeout must be at least 1 second')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = None
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v

    @field_validator('format')
    @classmethod
    def log_format_must_be_valid(cls, v):
        if v not in ('json', 'text'):
            raise ValueError('log format must be "json" or "text"')
        return v


class PrometheusConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = False
    port: int = 9090

    @field_validator('port')
    @classmethod
    def port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('port must be between 1 and 65535')
        return v


class Config(BaseModel):
    """Main configuration class."""
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_sink: LogSinkConfig = Field(default_factory=LogSinkConfig)
    twilio: TwilioConfig = Field(default_factory=TwilioConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)


def _load_dotenv(path: str = ".env") -> None:
    """Copy KEY=VALUE pairs from a .env file into the process environment."""
    if not os.path.exists(path):
        return

    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))


def load_config() -> Config:
    """
    Load configuration from YAML file and environment variables.

    Returns:
        Config: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist outside development
        ValueError: If config file is invalid YAML or fails validation
    """
    _load_dotenv()

    app_env = os.getenv("APP_ENV", "development").lower()
    config_path = os.getenv("CONFIG_PATH", "config/config.yaml")

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}")
    elif app_env != "development":
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        config = Config(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    storage_backend = os.getenv("STORAGE_BACKEND")
    if storage_backend:
        config.storage.backend = storage_backend

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        config.storage.database_url = database_url

    data_dir = os.getenv("DATA_DIR")
    if data_dir:
        config.storage.data_dir = data_dir

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        config.log_sink.log_dir = log_dir

    twilio_enabled = os.getenv("TWILIO_ENABLED")
    if twilio_enabled is not None:
        config.twilio.enabled = twilio_enabled.lower() in TRUTHY

    for env_name, attr in (
        ("TWILIO_ACCOUNT_SID", "account_sid"),
        ("TWILIO_AUTH_TOKEN", "auth_token"),
        ("TWILIO_FROM_PHONE", "from_phone"),
    ):
        value = os.getenv(env_name)
        if value:
            setattr(config.twilio, attr, value)

    prometheus_enabled = os.getenv("PROMETHEUS_ENABLED")
    if prometheus_enabled is not None:
        config.prometheus.enabled = prometheus_enabled.lower() in TRUTHY

    # Overrides bypass field validators, so re-check the cross-field rules
    if config.storage.backend not in ('file', 'database'):
        raise ValueError(f"Unsupported storage backend: {config.storage.backend}")

    if config.twilio.enabled and not (
        config.twilio.account_sid and config.twilio.auth_token and config.twilio.from_phone
    ):
        raise ValueError("Twilio alerts are enabled but credentials are not fully set")

    return config
