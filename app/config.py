# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS, needed for execute_sql)"
    )

    EXECUTE_SQL_FUNCTION: str = Field(
        default="execute_sql",
        description="Name of the Postgres function used to run raw SQL via RPC"
    )

    SCHEMA_TABLES: str = Field(
        default="dummytable",
        description="Tables to introspect for the assistant (comma-separated). "
                    "The first one is the table shown in the results view."
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for completions and chat"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used for both inline completion and chat"
    )

    # -------------------------------------------------------------------------
    # Inline Completion Settings
    # -------------------------------------------------------------------------

    COMPLETION_TEMPERATURE: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Low temperature keeps inline suggestions consistent"
    )

    COMPLETION_MAX_TOKENS: int = Field(
        default=100,
        ge=1,
        le=2000,
        description="Token budget for a single inline suggestion"
    )

    COMPLETION_DEBOUNCE_MS: int = Field(
        default=800,
        ge=0,
        le=10000,
        description="Editor inactivity (ms) before a completion request is issued"
    )

    # -------------------------------------------------------------------------
    # Chat Assistant Settings
    # -------------------------------------------------------------------------

    CHAT_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for the conversational assistant"
    )

    CHAT_MAX_TOKENS: int = Field(
        default=1000,
        ge=1,
        le=8000,
        description="Token budget for a single assistant reply"
    )

    CHAT_MAX_MESSAGES: int | None = Field(
        default=None,
        ge=1,
        description="If set, only the last N conversation messages are sent to the LLM"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def schema_tables_list(self) -> list[str]:
        """
        Parse SCHEMA_TABLES into a list of table names, preserving order.

        Example: "dummytable, orders" -> ["dummytable", "orders"]
        """
        return [name.strip() for name in self.SCHEMA_TABLES.split(",") if name.strip()]

    @property
    def primary_table(self) -> str:
        """The table backing the results view and record endpoints."""
        tables = self.schema_tables_list
        return tables[0] if tables else "dummytable"

    @property
    def completion_debounce_seconds(self) -> float:
        """Debounce delay converted to seconds for asyncio.sleep."""
        return self.COMPLETION_DEBOUNCE_MS / 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
