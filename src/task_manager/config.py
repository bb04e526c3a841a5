"""
Application settings.

Resolution order: built-in defaults, then the JSON config file (if it
exists), then environment variables. The result is validated once and
treated as read-only afterwards.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

VALID_ENVIRONMENTS = ("development", "staging", "production")


class ConfigError(Exception):
    pass


class ServerConfig(BaseModel):
    host: str = "localhost"
    port: int = 8080


class AppConfig(BaseModel):
    name: str = "Task Manager API"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"


class FeaturesConfig(BaseModel):
    enable_cors: bool = True
    enable_logging: bool = True
    max_tasks_per_user: int = 100
    rate_limit_per_min: int = 60
    seed_sample_tasks: bool = True


class Settings(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    app: AppConfig = Field(default_factory=AppConfig)
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)

    def validate_settings(self) -> None:
        if not 0 < self.server.port < 65536:
            raise ConfigError(f"invalid server port: {self.server.port}")
        if not self.app.name:
            raise ConfigError("app name is required")
        if not self.app.version:
            raise ConfigError("app version is required")
        if self.app.environment not in VALID_ENVIRONMENTS:
            raise ConfigError(f"invalid environment: {self.app.environment}")
        if self.features.max_tasks_per_user <= 0:
            raise ConfigError("max_tasks_per_user must be positive")
        if self.features.rate_limit_per_min < 0:
            raise ConfigError("rate_limit_per_min must not be negative")

    @property
    def is_development(self) -> bool:
        return self.app.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.app.environment == "production"


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"failed to load config from {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    return raw


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _apply_env(settings: Settings) -> None:
    port = os.getenv("PORT", "").strip().lstrip(":")
    if port.isdigit():
        settings.server.port = int(port)

    host = os.getenv("HOST")
    if host:
        settings.server.host = host

    debug = os.getenv("DEBUG")
    if debug:
        settings.app.debug = debug.strip().lower() in {"1", "true"}

    env = os.getenv("ENVIRONMENT")
    if env:
        settings.app.environment = env

    max_tasks = _env_int("MAX_TASKS_PER_USER")
    if max_tasks is not None:
        settings.features.max_tasks_per_user = max_tasks

    rate_limit = _env_int("RATE_LIMIT_PER_MIN")
    if rate_limit is not None:
        settings.features.rate_limit_per_min = rate_limit


def load_settings(path: Optional[str | Path] = None) -> Settings:
    if path is None:
        path = os.getenv("CONFIG_PATH", "config.json")

    try:
        settings = Settings.model_validate(_read_file(Path(path)))
    except PydanticValidationError as e:
        raise ConfigError(f"invalid config in {path}: {e}") from e

    _apply_env(settings)
    settings.validate_settings()
    return settings
