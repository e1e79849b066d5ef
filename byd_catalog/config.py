from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data file
    DATA_FILE: str = "data/byd_catalog.txt"
    SAVE_ON_MUTATION: bool = True

    # Knowledge graph
    BRAND_NODE_LABEL: str = "BYD 比亚迪"

    # Id allocation for rows created without an explicit id
    SERIES_ID_START: int = 1
    TECH_ID_START: int = 200
    MODEL_ID_START: int = 9000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
