"""
Configuration management for the SAILROUTE API.
Loads environment variables and provides typed configuration.
"""
from typing import List
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:3001"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    # ========================================================================
    # Routing limits
    # ========================================================================
    # Upper bound on grid cells and slices accepted per request
    max_grid_cells: int = 2500
    max_time_slices: int = 500
    # Pruning used when a request does not choose one
    default_pruning: str = "exact"

    # ========================================================================
    # Pydantic Settings Configuration
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Convenience exports
settings = get_settings()

if settings.is_production and "localhost" in settings.cors_origins.lower():
    raise ValueError(
        "CORS_ORIGINS must not include localhost in production!"
    )
