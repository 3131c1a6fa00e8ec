"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use a .env file for local development.

Environment Variables:
    PHOENIX_COLLECTOR_ENDPOINT: Phoenix collector base URL
    PHOENIX_API_KEY: API key for Phoenix Cloud (optional for local Phoenix)
    PHOENIX_PROJECT_NAME: Project traces are grouped under in the Phoenix UI
    OPENAI_API_KEY: Key for the chat completion endpoint
    MEMORY_BACKEND: "local" (mem0 Memory) or "platform" (mem0 MemoryClient)
    MEM0_API_KEY: Key for the hosted mem0 platform
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Tracing Configuration
    # ==========================================================================
    phoenix_collector_endpoint: str = Field(
        default="http://localhost:6006",
        description="Arize Phoenix collector endpoint (without /v1/traces)",
    )
    phoenix_api_key: Optional[SecretStr] = Field(
        default=None,
        description="Phoenix API key, required for Phoenix Cloud",
    )
    phoenix_project_name: str = Field(
        default="mem0-phoenix-integration",
        min_length=1,
        description="Phoenix project that receives the traces",
    )
    enable_tracing: bool = Field(
        default=True,
        description="Enable OpenTelemetry tracing to Phoenix",
    )
    tracing_batch: bool = Field(
        default=True,
        description="Export spans in batches instead of one by one",
    )
    auto_instrument: bool = Field(
        default=False,
        description="Let phoenix.otel instrument every installed OpenInference package",
    )
    instrument_openai: bool = Field(
        default=True,
        description="Instrument the OpenAI SDK used internally by mem0",
    )

    # ==========================================================================
    # LLM Configuration
    # ==========================================================================
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key for the OpenAI-compatible chat endpoint",
    )
    llm_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Chat completion model name",
    )
    llm_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for chat completions",
    )
    llm_max_tokens: int = Field(
        default=1024,
        ge=1,
        le=16384,
        description="Maximum tokens for the assistant response",
    )
    llm_timeout: int = Field(
        default=60,
        ge=1,
        description="Request timeout in seconds",
    )
    llm_max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts before a transient endpoint error is raised",
    )
    llm_retry_delay: float = Field(
        default=2.0,
        ge=0.0,
        description="Initial retry delay in seconds (doubles every attempt)",
    )

    # ==========================================================================
    # Memory Configuration
    # ==========================================================================
    memory_backend: Literal["local", "platform"] = Field(
        default="local",
        description="Use the open-source mem0 Memory or the hosted MemoryClient",
    )
    mem0_api_key: Optional[SecretStr] = Field(
        default=None,
        description="mem0 platform API key (platform backend only)",
    )
    memory_config_path: Optional[Path] = Field(
        default=None,
        description="JSON file passed to Memory.from_config (local backend only)",
    )
    memory_search_limit: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Number of memories retrieved per chat turn",
    )

    # ==========================================================================
    # API Configuration
    # ==========================================================================
    api_host: str = Field(
        default="0.0.0.0",
        description="Host to bind API server",
    )
    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for API server",
    )

    # ==========================================================================
    # Observability Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("phoenix_collector_endpoint", "llm_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("memory_config_path")
    @classmethod
    def resolve_path(cls, v: Optional[Path]) -> Optional[Path]:
        """Resolve paths to absolute paths."""
        return v.resolve() if v is not None else None

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def phoenix_api_key_value(self) -> Optional[str]:
        """Get the actual Phoenix API key value (use sparingly)."""
        if self.phoenix_api_key:
            return self.phoenix_api_key.get_secret_value()
        return None

    @property
    def openai_api_key_value(self) -> Optional[str]:
        """Get the actual OpenAI API key value (use sparingly)."""
        if self.openai_api_key:
            return self.openai_api_key.get_secret_value()
        return None

    @property
    def mem0_api_key_value(self) -> Optional[str]:
        """Get the actual mem0 API key value (use sparingly)."""
        if self.mem0_api_key:
            return self.mem0_api_key.get_secret_value()
        return None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    Call `get_settings.cache_clear()` to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Convenience alias
settings = get_settings()
