"""
SAILROUTE Configuration Module.

Centralized configuration management using environment variables.
Supports .env files for local development.

Usage:
    from sailroute.config import settings

    print(settings.max_iterations)
    print(settings.pruning)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
import logging

from dotenv import load_dotenv

# Load .env file if present
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

DEFAULT_POLAR_PATH = str(Path(__file__).parent / "data" / "polars" / "default_keelboat.csv")

PRUNING_MODES = ("exact", "dominance")


def get_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def get_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


@dataclass
class Settings:
    """Routing settings loaded from environment."""

    # Frontier search
    max_iterations: int = field(default_factory=lambda: get_int("SAILROUTE_MAX_ITERATIONS", 1000))
    sentinel_duration_min: float = field(
        default_factory=lambda: get_float("SAILROUTE_SENTINEL_DURATION_MIN", 1000.0)
    )
    pruning: str = field(default_factory=lambda: os.getenv("SAILROUTE_PRUNING", "exact"))

    # Scenario defaults
    time_interval_min: float = field(default_factory=lambda: get_float("SAILROUTE_TIME_INTERVAL_MIN", 10.0))
    allow_repeat_visits: bool = field(default_factory=lambda: get_bool("SAILROUTE_ALLOW_REPEAT_VISITS", False))

    # Vessel performance
    polar_path: str = field(default_factory=lambda: os.getenv("SAILROUTE_POLAR_PATH", DEFAULT_POLAR_PATH))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )

    def __post_init__(self):
        """Validate settings after initialization."""
        self.pruning = self.pruning.strip().lower()
        if self.pruning not in PRUNING_MODES:
            logging.warning(
                f"Unknown pruning mode '{self.pruning}', expected one of {PRUNING_MODES}, using 'exact'"
            )
            self.pruning = "exact"

        if self.max_iterations < 1:
            logging.warning(f"Max iterations {self.max_iterations} must be positive, using 1000")
            self.max_iterations = 1000

        if self.time_interval_min <= 0:
            logging.warning(f"Time interval {self.time_interval_min} min must be positive, using 10.0")
            self.time_interval_min = 10.0

    def configure_logging(self):
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=self.log_format)


# Singleton instance
settings = Settings()


# Convenience function for testing
def get_settings() -> Settings:
    """Get the settings instance (useful for dependency injection)."""
    return settings
