"""
Configuration settings for the workflow data engine
"""

import os
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings, read from the environment or a local .env file"""

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")

    # Loop transformation: items per chunk when running sequentially
    LOOP_BATCH_SIZE: int = 100

    # Node input preparation
    DEFAULT_MERGE_STRATEGY: str = "overwrite"
    PRESERVE_EDGE_CONNECTIONS: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("LOOP_BATCH_SIZE")
    @classmethod
    def validate_batch_size(cls, v):
        if v < 1:
            raise ValueError("LOOP_BATCH_SIZE must be at least 1")
        return v

    @field_validator("DEFAULT_MERGE_STRATEGY")
    @classmethod
    def validate_merge_strategy(cls, v):
        v = v.lower()
        if v not in ("overwrite", "combine", "array", "deep"):
            raise ValueError(f"Unknown merge strategy: {v}")
        return v


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
