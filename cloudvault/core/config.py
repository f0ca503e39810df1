# cloudvault/core/config.py
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    aws_s3_bucket_name: str = "files"
    # MinIO or any other S3-compatible endpoint
    aws_endpoint_url: Optional[str] = None

    database_url: str = "sqlite:///./cloudvault.db"

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_seconds: int = 3600

    default_share_expires_in: int = 3600
    max_share_expires_in: int = 7 * 24 * 3600

    # bounded timeout for every S3 / database call
    store_timeout_seconds: float = 10.0

    log_level: str = "INFO"

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
