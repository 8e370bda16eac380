"""Service configuration, read from FACE_API_* environment variables or .env."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FACE_API_", env_file=".env", case_sensitive=False,
    )

    greeting: str = "Hello from face-compare-api"

    # Server
    host: str = "0.0.0.0"
    port: int = 3002
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Recognition
    match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    detection_model: Literal["hog", "cnn"] = "hog"
    load_models_on_startup: bool = True

    # Image fetching
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    max_image_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    # Loopback, private and link-local hosts are refused unless enabled
    allow_private_image_hosts: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
