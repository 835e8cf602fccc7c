"""Central configuration for the Linguala translation service.

This module uses Pydantic Settings for validation and env management.
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class DashScopeSettings(BaseSettings):
    """DashScope (Qwen) LLM configuration."""
    model_config = SettingsConfigDict(env_prefix="DASHSCOPE_", extra="ignore")

    api_key: str | None = Field(default=None, description="Alibaba Cloud API key (sk-...)")
    base_url: str = Field(
        default="https://dashscope-intl.aliyuncs.com/compatible-mode/v1",
        description="OpenAI-compatible endpoint",
    )
    translation_model: str = Field(default="qwen-mt-turbo")
    writing_model: str = Field(default="qwen-flash")
    assistant_model: str = Field(default="qwen-turbo")
    translation_timeout: float = Field(default=8.0, gt=0, le=120)
    writing_timeout: float = Field(default=3.0, gt=0, le=120)
    assistant_timeout: float = Field(default=5.0, gt=0, le=120)
    ping_timeout: float = Field(default=5.0, gt=0, le=120)
    translation_max_tokens: int = Field(default=200, ge=16, le=8192)
    max_retries: int = Field(default=1, ge=0, le=5, description="Retries on transient failures")


class DatabaseSettings(BaseSettings):
    """Database configuration."""
    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./linguala.db",
        description="Async database connection URL",
    )
    echo: bool = Field(default=False)


class AuthSettings(BaseSettings):
    """Authentication configuration."""
    model_config = SettingsConfigDict(env_prefix="AUTH_", extra="ignore")

    secret_key: str = Field(default="change-me-in-production")
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30 * 24 * 60, ge=1)
    min_password_length: int = Field(default=6, ge=1, le=128)
    admin_token: str | None = Field(default=None, description="Token for premium admin endpoints")


class StorageSettings(BaseSettings):
    """Uploaded document storage."""
    model_config = SettingsConfigDict(env_prefix="STORAGE_", extra="ignore")

    upload_dir: str = Field(default="temp/uploads")
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1024)
    retention_seconds: int = Field(default=3600, ge=60, description="Age after which stored files are purged")


class TranslationSettings(BaseSettings):
    """Long-text and glossary handling."""
    model_config = SettingsConfigDict(env_prefix="TRANSLATION_", extra="ignore")

    max_chunk_size: int = Field(default=4000, ge=100, le=20000)
    chunk_delay: float = Field(default=0.5, ge=0.0, le=10.0, description="Pause between chunk requests")
    glossary_fuzzy_threshold: int = Field(default=90, ge=0, le=100, description="Rapidfuzz score threshold")


class ScrapeSettings(BaseSettings):
    """Website scraping configuration."""
    model_config = SettingsConfigDict(env_prefix="SCRAPE_", extra="ignore")

    rate_limit: str = Field(default="10/minute")
    max_content_length: int = Field(default=5000, ge=100)
    min_html_length: int = Field(default=100, ge=0)
    max_redirects: int = Field(default=5, ge=0, le=20)
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
        )
    )


class OCRSettings(BaseSettings):
    """OCR fallback for scanned PDFs."""
    model_config = SettingsConfigDict(env_prefix="OCR_", extra="ignore")

    enabled: bool = Field(default=True)
    tesseract_lang: str = Field(default="eng", description="Tesseract language codes")
    dpi: int = Field(default=300, ge=150, le=600)
    confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = Field(default="INFO")
    format: str = Field(default="json")
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)
    app_name: str = Field(default="Linguala")
    version: str = Field(default="0.1.0")
    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:3001"])

    # Sub-configs
    dashscope: DashScopeSettings = Field(default_factory=DashScopeSettings)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    translation: TranslationSettings = Field(default_factory=TranslationSettings)
    scrape: ScrapeSettings = Field(default_factory=ScrapeSettings)
    ocr: OCRSettings = Field(default_factory=OCRSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
