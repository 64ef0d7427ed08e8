"""Configuration loader"""

import os
from pathlib import Path
from typing import Any, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .exceptions import ConfigError

CONFIG_DIR_ENV = "IOTHUB_CONFIG_DIR"


class AppSettings(BaseModel):
    """Application settings"""
    name: str = "IoT Hub"
    version: str = "0.1.0"
    environment: Literal["development", "production"] = "production"
    cors_origins: List[str] = Field(default_factory=list)


class AuthSettings(BaseModel):
    """Session token settings"""
    jwt_secret: str
    token_ttl_hours: int = Field(default=24, gt=0)
    issuer: str = "IoT_Hub_API"
    audience: str = "user"
    cookie_name: str = "auth_token"
    cookie_secure: bool = True

    @field_validator("jwt_secret")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("jwt_secret must not be empty")
        return value


class DatabaseSettings(BaseModel):
    """SQLite store settings"""
    path: str = "data/iothub.db"


class RegistrySettings(BaseModel):
    """Free tier limits"""
    max_devices: int = Field(default=5, ge=0)
    max_schedules: int = Field(default=5, ge=0)
    max_label_length: int = Field(default=50, gt=0)
    strict_quota: bool = False


class SchedulerSettings(BaseModel):
    """Periodic matcher settings"""
    enabled: bool = True
    dispatch_workers: int = Field(default=4, gt=0)


class DispatchSettings(BaseModel):
    """Where due actions are sent"""
    mode: Literal["log", "webhook"] = "log"
    webhook_url: Optional[str] = None
    timeout_seconds: float = Field(default=5.0, gt=0)


class LoggingSettings(BaseModel):
    """Logging settings"""
    level: str = "INFO"
    format: Literal["json", "console"] = "json"
    file_path: Optional[str] = "logs/iothub.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class Config(BaseModel):
    """Main configuration model"""
    app: AppSettings = Field(default_factory=AppSettings)
    auth: AuthSettings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    dispatch: DispatchSettings = Field(default_factory=DispatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class ConfigLoader:
    """Load and parse configuration files"""

    def __init__(self, config_dir: Optional[str] = None):
        load_dotenv()  # Load environment variables
        self.config_dir = Path(config_dir or os.getenv(CONFIG_DIR_ENV, "config"))

    def _substitute_env_vars(self, value: Any, context: str = "") -> Any:
        """Recursively substitute ${VAR} / ${VAR:default} in config values"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                env_value = os.getenv(var_expr.strip())
                if env_value is None:
                    error_msg = f"Environment variable {var_expr} not found"
                    if context:
                        error_msg += f" (context: {context})"
                    raise ConfigError(error_msg)
                return env_value
            return value
        if isinstance(value, dict):
            return {
                k: self._substitute_env_vars(v, context=f"{context}.{k}" if context else k)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [
                self._substitute_env_vars(item, context=f"{context}[{i}]" if context else f"[{i}]")
                for i, item in enumerate(value)
            ]
        return value

    def load_settings(self) -> Config:
        """Load application settings from settings.yaml"""
        settings_path = self.config_dir / "settings.yaml"
        if not settings_path.exists():
            raise ConfigError(f"Settings file not found: {settings_path}")

        with open(settings_path, "r", encoding="utf-8") as f:
            try:
                raw_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {settings_path}: {e}") from e

        if not isinstance(raw_config, dict):
            raise ConfigError(f"Settings file must contain a mapping: {settings_path}")

        config = self._substitute_env_vars(raw_config)
        try:
            return Config(**config)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid settings in {settings_path}: {e}") from e


def load_config(config_dir: Optional[str] = None) -> Config:
    return ConfigLoader(config_dir).load_settings()
