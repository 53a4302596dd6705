from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    cache_ttl_seconds: float = Field(1.0, alias="CACHE_TTL_SECONDS", ge=0)
    settlement_epsilon: float = Field(0.01, alias="SETTLEMENT_EPSILON", gt=0)
    share_tolerance: float = Field(0.02, alias="SHARE_TOLERANCE", ge=0)
    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
