from __future__ import annotations

from typing import List

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTEDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
    finnhub_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINNHUB_API_KEY", "QUOTEDESK_FINNHUB_API_KEY"),
    )
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    finnhub_http_timeout_seconds: float = 10.0


class QuoteTimeouts(BaseModel):
    # Independent thresholds; the batch deadline may fire before every
    # per-item guard has had its own chance to time out.
    per_item_timeout_seconds: float = 2.0
    batch_timeout_seconds: float = 3.0


class PollingSettings(BaseModel):
    service_url: str = "http://localhost:3002"
    interval_seconds: float = 10.0
    request_timeout_seconds: float = 3.0
    max_symbols: int = 10


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTEDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "QUOTEDESK_REDIS_URL"),
    )
    profile_cache_ttl_seconds: int = 3600
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )
    log_level: str = "INFO"
    log_format: str = "text"

    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    quotes: QuoteTimeouts = Field(default_factory=QuoteTimeouts)
    polling: PollingSettings = Field(default_factory=PollingSettings)


settings = Settings()
