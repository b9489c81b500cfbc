"""
Configuration settings for the WasteTrack collection core.

This module handles application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "WasteTrack Collection Core"
    debug: bool = False
    log_level: str = "INFO"

    # Tracking Configuration
    tick_interval_seconds: float = 10.0
    average_speed_kmh: float = 25.0  # Urban collection truck speed for ETA estimates

    # Aggregation
    progress_decimals: int = 1

    # Location source circuit breaker
    location_failure_threshold: int = 3
    location_reset_timeout_seconds: float = 30.0

    class Config:
        env_file = ".env"
        env_prefix = "WASTETRACK_"
        case_sensitive = False


settings = Settings()
