# src/tickerbot/config/settings.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Tickerbot Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the bot service. Only adapters,
    infrastructure and the composition root read the process environment;
    use cases receive explicit config objects built from this model (see
    ``tickerbot.dependencies.wiring``).

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Explicit field declarations with constrained types and ranges.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor `get_settings()` with LRU cache.
    - Safe, structured logging (no secrets).
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for Tickerbot.

    This is the canonical, explicit, and strict settings object. Adapters and
    Infrastructure may read environment variables; other layers should receive
    derived configuration through dependency injection.
    """

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    dev_mode: bool = Field(
        default=False,
        description="Skip interaction signature verification (local development only).",
        validation_alias="DEV_MODE",
    )
    service_name: str = Field(
        default="tickerbot",
        description="Logical service name for logging.",
        validation_alias="SERVICE_NAME",
    )
    service_version: str | None = Field(
        default=None,
        description="Service version reported at startup and on the health endpoint.",
        validation_alias="SERVICE_VERSION",
    )
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO').",
        validation_alias="LOG_LEVEL",
    )

    # ---------------------------
    # Discord application
    # ---------------------------
    discord_application_id: str | None = Field(
        default=None,
        description="Discord application id used for follow-ups and command registration.",
        validation_alias="DISCORD_APPLICATION_ID",
    )
    discord_public_key: str | None = Field(
        default=None,
        description="Hex-encoded Ed25519 public key used to verify interaction requests.",
        validation_alias="DISCORD_PUBLIC_KEY",
    )
    discord_bot_token: SecretStr | None = Field(
        default=None,
        description="Bot token used by the command registration CLI.",
        validation_alias="DISCORD_BOT_TOKEN",
    )
    discord_api_base_url: str = Field(
        default="https://discord.com/api/v10",
        description="Base URL of the Discord REST API.",
        validation_alias="DISCORD_API_BASE_URL",
    )
    discord_timeout_s: float = Field(
        default=10.0,
        ge=0.1,
        le=60.0,
        description="Per-request timeout in seconds for Discord REST calls.",
        validation_alias="DISCORD_TIMEOUT_S",
    )

    # ---------------------------
    # Key-value backends
    # ---------------------------
    cache_backend: Literal["redis", "memory"] = Field(
        default="redis",
        description="Backend for the cache and rate-limit keyspaces.",
        validation_alias="CACHE_BACKEND",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used for caching and rate limiting.",
        validation_alias="REDIS_URL",
    )
    redis_health_check_interval_s: int = Field(
        default=15,
        ge=1,
        le=3600,
        description="Health check interval for Redis clients in seconds.",
        validation_alias="REDIS_HEALTH_CHECK_INTERVAL_S",
    )
    redis_socket_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket timeout in seconds for Redis commands.",
        validation_alias="REDIS_SOCKET_TIMEOUT_S",
    )
    redis_socket_connect_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket connect timeout in seconds for Redis.",
        validation_alias="REDIS_SOCKET_CONNECT_TIMEOUT_S",
    )

    # ---------------------------
    # Cache TTLs
    # ---------------------------
    cache_ttl_quote_s: int = Field(
        default=300,
        ge=1,
        le=24 * 60 * 60,
        description="TTL for stock and crypto quotes.",
        validation_alias="CACHE_TTL_QUOTE_S",
    )
    cache_ttl_market_status_s: int = Field(
        default=60,
        ge=1,
        le=24 * 60 * 60,
        description="TTL for stock market status.",
        validation_alias="CACHE_TTL_MARKET_STATUS_S",
    )
    cache_ttl_history_s: int = Field(
        default=3600,
        ge=1,
        le=7 * 24 * 60 * 60,
        description="TTL for daily price history.",
        validation_alias="CACHE_TTL_HISTORY_S",
    )
    cache_ttl_summary_s: int = Field(
        default=28_800,
        ge=1,
        le=7 * 24 * 60 * 60,
        description="TTL for AI news summaries.",
        validation_alias="CACHE_TTL_SUMMARY_S",
    )

    # ---------------------------
    # Rate limiting
    # ---------------------------
    rate_limit_policy: Literal["fixed", "sliding"] = Field(
        default="fixed",
        description="Per-user limiter policy: single cooldown or sliding window.",
        validation_alias="RATE_LIMIT_POLICY",
    )
    rate_limit_window_seconds: int = Field(
        default=60,
        ge=1,
        le=24 * 60 * 60,
        description="Rate limiting window size in seconds.",
        validation_alias="RATE_LIMIT_WINDOW_SECONDS",
    )
    rate_limit_max_requests: int = Field(
        default=1,
        ge=1,
        le=1000,
        description="Requests admitted per window (sliding policy only).",
        validation_alias="RATE_LIMIT_MAX_REQUESTS",
    )

    # ---------------------------
    # Orchestration
    # ---------------------------
    history_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Lookback window in days for the price history chart.",
        validation_alias="HISTORY_DAYS",
    )
    chart_points: int = Field(
        default=30,
        ge=2,
        le=365,
        description="Maximum number of points drawn in the trend chart.",
        validation_alias="CHART_POINTS",
    )
    command_timeout_s: float = Field(
        default=35.0,
        ge=1.0,
        le=900.0,
        description="Overall deadline for one command before a timeout reply is sent.",
        validation_alias="COMMAND_TIMEOUT_S",
    )
    cache_write_grace_s: float = Field(
        default=2.0,
        ge=0.0,
        le=30.0,
        description="Grace period for awaited cache writes when no background runner exists.",
        validation_alias="CACHE_WRITE_GRACE_S",
    )
    background_drain_timeout_s: float = Field(
        default=5.0,
        ge=0.0,
        le=120.0,
        description="How long shutdown waits for outstanding background tasks.",
        validation_alias="BACKGROUND_DRAIN_TIMEOUT_S",
    )

    # ---------------------------
    # Upstream: Massive (Polygon-compatible aggregates)
    # ---------------------------
    massive_api_key: SecretStr | None = Field(
        default=None,
        description="Massive.com API key.",
        validation_alias="MASSIVE_API_KEY",
    )
    massive_base_url: str = Field(
        default="https://api.massive.com",
        description="Massive.com base URL.",
        validation_alias="MASSIVE_BASE_URL",
    )
    massive_timeout_s: float = Field(
        default=10.0,
        ge=0.1,
        le=60.0,
        description="Deadline in seconds for quote and history calls.",
        validation_alias="MASSIVE_TIMEOUT_S",
    )

    # ---------------------------
    # Upstream: Finnhub
    # ---------------------------
    finnhub_api_key: SecretStr | None = Field(
        default=None,
        description="Finnhub API key.",
        validation_alias="FINNHUB_API_KEY",
    )
    finnhub_base_url: str = Field(
        default="https://finnhub.io/api/v1",
        description="Finnhub base URL.",
        validation_alias="FINNHUB_BASE_URL",
    )
    finnhub_timeout_s: float = Field(
        default=5.0,
        ge=0.1,
        le=60.0,
        description="Deadline in seconds for Finnhub quote calls.",
        validation_alias="FINNHUB_TIMEOUT_S",
    )

    # ---------------------------
    # Upstream: AI summaries (OpenAI-compatible chat completions)
    # ---------------------------
    summary_provider: Literal["openai", "perplexity"] = Field(
        default="openai",
        description="Chat completions vendor used for news summaries.",
        validation_alias="SUMMARY_PROVIDER",
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key.",
        validation_alias="OPENAI_API_KEY",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI API base URL.",
        validation_alias="OPENAI_BASE_URL",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used for summaries.",
        validation_alias="OPENAI_MODEL",
    )
    perplexity_api_key: SecretStr | None = Field(
        default=None,
        description="Perplexity API key.",
        validation_alias="PERPLEXITY_API_KEY",
    )
    perplexity_base_url: str = Field(
        default="https://api.perplexity.ai",
        description="Perplexity API base URL.",
        validation_alias="PERPLEXITY_BASE_URL",
    )
    perplexity_model: str = Field(
        default="sonar",
        description="Perplexity model used for summaries.",
        validation_alias="PERPLEXITY_MODEL",
    )
    summary_timeout_s: float = Field(
        default=30.0,
        ge=0.1,
        le=120.0,
        description="Deadline in seconds for one summary call.",
        validation_alias="SUMMARY_TIMEOUT_S",
    )

    # ---------------------------
    # Upstream retry policy
    # ---------------------------
    upstream_max_retries: int = Field(
        default=1,
        ge=0,
        le=3,
        description="Automatic retries for transient upstream failures.",
        validation_alias="UPSTREAM_MAX_RETRIES",
    )
    upstream_backoff_base_s: float = Field(
        default=1.0,
        ge=0.0,
        le=10.0,
        description="Base backoff in seconds before a retry.",
        validation_alias="UPSTREAM_BACKOFF_BASE_S",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _validate_security(self) -> Settings:
        """Reject configurations that would accept unsigned interactions in production.

        Returns:
            Settings: The validated settings instance.

        Raises:
            ValueError: If signature verification would be disabled or impossible.
        """
        if self.environment is Environment.PRODUCTION:
            if self.dev_mode:
                raise ValueError("DEV_MODE must not be enabled when ENVIRONMENT=production.")
            if not self.discord_public_key:
                raise ValueError("DISCORD_PUBLIC_KEY is required when ENVIRONMENT=production.")
        return self

    def summary_credentials(self) -> tuple[str, SecretStr | None, str]:
        """Return ``(base_url, api_key, model)`` for the configured summary vendor."""
        if self.summary_provider == "perplexity":
            return self.perplexity_base_url, self.perplexity_api_key, self.perplexity_model
        return self.openai_base_url, self.openai_api_key, self.openai_model


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated application settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "extra": {
                    "environment": settings.environment.value,
                    "dev_mode": settings.dev_mode,
                    "cache_backend": settings.cache_backend,
                    "rate_limit_policy": settings.rate_limit_policy,
                    "summary_provider": settings.summary_provider,
                    "keys": {
                        "massive": settings.massive_api_key is not None,
                        "finnhub": settings.finnhub_api_key is not None,
                        "summary": settings.summary_credentials()[1] is not None,
                    },
                }
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
