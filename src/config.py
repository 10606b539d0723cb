# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./elearning.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    LOG_LEVEL: str = "INFO"
    SESSION_EXPIRY_DAYS: int = 7
    SESSION_COOKIE_SECURE: bool = False
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    # Seed resources, actions, permissions and default roles on startup
    SEED_RBAC_ON_STARTUP: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_postgres_url(cls, value: str) -> str:
        # Some hosts still hand out postgres:// URLs
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql://", 1)
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
