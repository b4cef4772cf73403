"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./dev.db"

    # App settings
    app_name: str = "Financial Estimators"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Calculation engine
    plan_guard_cap: int = 120
    quantity_tolerance: float = 1e-9

    # Incentive-eligible placement years
    incentive_free_allocation_years: List[int] = [2024, 2025]
    incentive_accelerated_years: List[int] = [2023]

    # Category catalog (JSON replacement document loaded at startup)
    catalog_path: Optional[str] = None

    # Saved scenarios kept for comparison
    scenario_store_limit: int = 20

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
