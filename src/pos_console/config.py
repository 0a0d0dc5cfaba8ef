"""Application configuration helpers."""

from __future__ import annotations

import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from ``POS_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="POS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "POS Console"
    api_v1_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False

    database_url: str = Field(
        default="sqlite:///./pos_console.db",
        description="SQLAlchemy compatible database URL",
    )
    echo_sql: bool = False

    # Tenant the console writes rows for; every branch, product and sale is stamped with it.
    org_id: int = 1
    default_password: str = "Password123!"
    base_url: str = "http://localhost:8000"

    secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    session_max_age: int = 60 * 60 * 8

    default_page_size: int = 20
    max_page_size: int = 200
    # Explicit origins only; a "*" entry is served without credentials.
    cors_origins: List[str] = Field(default_factory=list)

    # IANA zone that business days follow; the server's local offset when unset.
    timezone: Optional[str] = None

    cart_idle_timeout: int = 60 * 60 * 8
    max_open_carts: int = 500

    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
