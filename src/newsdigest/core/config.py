from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CACHE_BUCKET = "andres-morales-portfolio"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    digest_env: Literal["dev", "prod", "test"] = "dev"
    log_level: str = "INFO"

    aws_region: str = "us-east-1"
    cache_prefix: str = "news-cache"

    feed_timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)
    max_items_per_feed: int = Field(default=3, ge=1, le=50)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
