"""
QuoteDesk - Configuration Settings

This module handles all application configuration using Pydantic Settings.
Environment variables are loaded from .env file.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===========================================
    # APPLICATION CONFIGURATION
    # ===========================================
    app_name: str = "QuoteDesk"
    app_env: str = "development"
    debug: bool = False
    api_version: str = "v1"

    # ===========================================
    # QUOTING DEFAULTS
    # ===========================================
    default_tier: str = "Shopify Basic"
    fallback_greeting: str = "there"  # Used when merchant name is blank
    session_max_count: int = 500  # Oldest sessions are evicted past this

    # ===========================================
    # EXCHANGE RATE PROVIDERS (USD base)
    # Tried in this order; first acceptable table wins.
    # ===========================================
    fx_frankfurter_url: str = "https://api.frankfurter.app/latest?from=USD"
    fx_exchangerate_host_url: str = "https://api.exchangerate.host/latest?base=USD"
    fx_open_er_api_url: str = "https://open.er-api.com/v6/latest/USD"
    fx_jsdelivr_url: str = (
        "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@latest/v1/currencies/usd.json"
    )
    fx_symbols_url: str = "https://api.exchangerate.host/symbols"

    # Request timeout per provider call (seconds)
    fx_request_timeout_seconds: float = 10.0

    # Load the selectable currency list in the background at startup
    fx_preload_currencies: bool = True

    # ===========================================
    # CORS SETTINGS
    # ===========================================
    cors_origins: str = "http://localhost:3000,http://localhost:8000,http://127.0.0.1:8000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def fx_provider_urls(self) -> List[str]:
        """Rate provider URLs in fallback order."""
        return [
            self.fx_frankfurter_url,
            self.fx_exchangerate_host_url,
            self.fx_open_er_api_url,
            self.fx_jsdelivr_url,
        ]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every call.
    """
    return Settings()


# Export settings instance
settings = get_settings()
