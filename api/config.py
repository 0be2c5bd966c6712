"""Application configuration using Pydantic Settings."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, RedisDsn, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _read_secret_file(path: str, env_name: str) -> str:
    """Read a secret value from file and return stripped content."""
    try:
        value = Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ValueError(f"{env_name} points to unreadable file: {path}") from exc

    if not value:
        raise ValueError(f"{env_name} points to empty file: {path}")

    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="development", description="Environment: development, stage, prod")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./bridge.db",
        description="SQLAlchemy async database URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )
    database_url_file: str | None = Field(
        default=None,
        description="Optional file path containing full DATABASE_URL (Docker secret pattern)",
    )
    database_pool_size: int = Field(default=10, description="Database connection pool size")
    database_max_overflow: int = Field(default=10, description="Max overflow for connection pool")

    # Redis
    redis_url: RedisDsn = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    redis_max_connections: int = Field(default=50, description="Max Redis connections")

    # Security
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    api_key_prefix: str = Field(default="brg_", description="Prefix for generated API keys")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    rate_limit_per_minute: int = Field(default=60, description="API calls per minute per IP")
    rate_limit_per_hour: int = Field(default=1000, description="API calls per hour per API key")

    # LLM Provider
    llm_provider: str = Field(default="openai", description="LLM provider: openai or ollama")
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_api_key_file: str | None = Field(
        default=None,
        description="Optional file path containing OpenAI API key",
    )
    openai_model: str = Field(default="gpt-4", description="Chat completion model name")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", description="Base URL of an OpenAI-compatible API"
    )
    openai_timeout: int = Field(default=120, description="OpenAI request timeout in seconds")

    # Ollama Configuration
    ollama_base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    ollama_model: str = Field(default="llama3", description="Ollama model name")
    ollama_timeout: int = Field(default=120, description="Ollama request timeout in seconds")

    # Generation limits
    generation_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    scene_max_tokens: int = Field(
        default=1500, description="Token limit for bridge and enhancement generation"
    )
    assistant_max_tokens: int = Field(
        default=1000, description="Token limit for suggestions and chat replies"
    )

    # Uploads
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, description="Maximum upload size")

    # Observability
    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics endpoint")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            value = v.strip()
            if not value:
                return []
            if value.startswith("["):
                parsed = json.loads(value)
                if not isinstance(parsed, list):
                    raise ValueError("CORS_ORIGINS JSON value must be a list")
                return [str(origin).strip() for origin in parsed if str(origin).strip()]
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(v, list):
            return [str(origin).strip() for origin in v if str(origin).strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @model_validator(mode="before")
    @classmethod
    def load_secrets_from_files(cls, data: Any) -> Any:
        """Allow *_FILE settings to populate sensitive values from mounted secrets."""
        if not isinstance(data, dict):
            return data

        settings = dict(data)
        file_mapping = {
            "database_url_file": "database_url",
            "openai_api_key_file": "openai_api_key",
        }

        for file_field, target_field in file_mapping.items():
            file_path = settings.get(file_field)
            if file_path:
                settings[target_field] = _read_secret_file(file_path, file_field.upper())

        return settings

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env in {"prod", "production"}

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @model_validator(mode="after")
    def validate_production_security(self) -> "Settings":
        """Enforce secure settings when running in production."""
        if not self.is_production:
            return self

        if self.debug:
            raise ValueError("DEBUG must be false in production")

        if self.llm_provider.lower() == "openai" and not self.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required in production")

        if "*" in self.cors_origins:
            raise ValueError("Wildcard CORS origin is not allowed in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
