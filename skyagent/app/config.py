"""Runtime configuration and logging setup."""
from __future__ import annotations

import logging
from typing import List, Literal

import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

from .fetch import DEFAULT_TIMEOUT, GEOCODING_URL, METEOMATICS_URL, OPEN_METEO_URL

ProviderName = Literal["open_meteo", "meteomatics"]


class Settings(BaseSettings):
    """Application settings, read from the environment or a `.env` file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    provider: ProviderName = "open_meteo"
    meteomatics_username: str = ""
    meteomatics_password: str = ""

    http_timeout: float = DEFAULT_TIMEOUT
    geocoding_url: str = GEOCODING_URL
    open_meteo_url: str = OPEN_METEO_URL
    meteomatics_url: str = METEOMATICS_URL
    forecast_days: int = 4
    forecast_hours: int = 72

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"


def build_logger(level: str = "INFO"):
    """
    Configure structured JSON logs to stderr.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger()
