"""Application configuration contract."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sievedir.errors import ConfigError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")
    sieve_dir: str = Field(alias="SIEVEDIR", default="~/.sieve")
    sieve_max_nesting: int = Field(alias="SIEVE_MAX_NESTING", default=32)

    def sieve_path(self) -> Path:
        return Path(self.sieve_dir).expanduser()


def validate_settings(settings: Settings) -> None:
    _logger = logging.getLogger(__name__)

    problems: list[str] = []
    if settings.log_level.upper() not in _LOG_LEVELS:
        problems.append(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
    if settings.sieve_max_nesting <= 0:
        problems.append("SIEVE_MAX_NESTING must be > 0")
    if not settings.sieve_dir.strip():
        problems.append("SIEVEDIR must not be empty")
    if settings.app_env not in {"dev", "prod"}:
        _logger.warning("Unrecognised APP_ENV=%s; treating as dev", settings.app_env)

    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
