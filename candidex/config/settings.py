"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Candidex"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # AI provider (OpenAI-compatible chat completions API)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    provider_timeout_ms: int = 9000
    provider_temperature: float = 0.7

    # Admission control for AI endpoints
    rate_limit_max_requests: int = 5
    rate_limit_window_seconds: float = 60.0
    rate_limit_sweep_seconds: float = 300.0

    # Langfuse tracing (optional)
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def provider_timeout_seconds(self) -> float:
        """Provider timeout expressed in seconds."""
        return self.provider_timeout_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
