"""Application settings using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    app_name: str = "Lineup Agent"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # ==========================================================================
    # Workflow
    # ==========================================================================
    # Ceiling is inclusive: the generator may run while llm_calls <= max_llm_calls
    max_llm_calls: int = Field(default=3, ge=0)
    min_lineup_size: int = Field(default=9, ge=1)
    llm_call_timeout_seconds: float = Field(default=60.0, gt=0)
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=2048, gt=0)

    # ==========================================================================
    # LLM Providers
    # ==========================================================================
    # DeepSeek
    deepseek_api_key: str = Field(default="")
    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model_chat: str = "deepseek-chat"

    # Kimi/Moonshot
    kimi_api_key: str = Field(default="")
    kimi_base_url: str = "https://api.moonshot.cn/v1"
    kimi_model: str = "moonshot-v1-32k"

    # Model Routing
    primary_provider: Literal["deepseek", "kimi"] = "deepseek"
    fallback_provider: Literal["deepseek", "kimi"] | None = "kimi"

    # ==========================================================================
    # API
    # ==========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = Field(default=["http://localhost:3000"])


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
