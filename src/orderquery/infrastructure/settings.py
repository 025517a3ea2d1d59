"""Configuration using pydantic-settings.

Values come from ``ORDERQUERY_*`` environment variables or a ``.env`` file,
e.g. ``ORDERQUERY_BATCH_SIZE=50``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from orderquery.infrastructure.persistence.criteria import MAX_RESULTS_CEILING

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="ORDERQUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(
        default_factory=lambda: f"sqlite:///{_DATA_DIR / 'orders.db'}",
        description="SQLAlchemy database URL",
    )
    echo_sql: bool = Field(False, description="Echo SQL statements")
    batch_size: int = Field(
        100, ge=1, description="Parent ids per grouped IN lookup in batch fetching"
    )
    max_results: int = Field(
        1000, ge=1, le=MAX_RESULTS_CEILING, description="Cap on orders returned by one query"
    )
    log_level: str = Field("INFO", description="Root log level")
    log_format: LogFormat = Field(LogFormat.CONSOLE, description="console or json")
