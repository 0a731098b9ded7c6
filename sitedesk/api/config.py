"""Configuration for FastAPI application."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Optional, Union
import json


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # API Configuration
    api_prefix: str = "/api/v1"
    api_title: str = "sitedesk API"
    api_version: str = "1.0.0"
    allowed_origins: Union[str, List[str]] = ["*"]

    @field_validator('allowed_origins', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            if v.startswith('['):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            return [v]
        return v

    # Storage overrides; unset values keep the STORAGE_* environment config
    partition_backend: Optional[str] = None
    blob_backend: Optional[str] = None
    working_dir: Optional[str] = None
    backup_dir: Optional[str] = None

    # Backend URLs
    redis_url: Optional[str] = None
    redis_password: Optional[str] = None
    s3_bucket: Optional[str] = None


settings = Settings()
