"""Configuration management using Pydantic Settings"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./commission_schedule.db"

    # Service
    service_name: str = "commission-schedule"
    log_level: str = "INFO"

    # Schedule
    schedule_offsets_days: List[int] = [25, 30, 35]

    # Integrity pass: rows dated outside this year window are treated as corrupt
    min_valid_year: int = 2000
    max_valid_year: int = 2100


settings = Settings()
