from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the Garage API process.

    Database connection settings live separately in src.db.config.Settings so
    Alembic and the seeder can load them without the web stack.
    """

    APP_NAME: str = Field(default="Garage API")
    APP_DESCRIPTION: str = Field(
        default="Track vehicles, fuel and charging entries, and maintenance history."
    )
    APP_VERSION: str = Field(default="0.1.0")
    ENVIRONMENT: Optional[str] = Field(default=None, description="Environment label (dev/test/prod)")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level name")

    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        description="Allowed origins, comma-separated or a JSON array",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default=True, description="alembic upgrade head when the app starts")
    AUTO_SEED: bool = Field(default=False, description="Seed service types and demo data at startup")

    JWT_SECRET_KEY: str = Field(default="change-me-in-production", description="HS256 signing secret")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=15, ge=1)
    SESSION_DURATION_DAYS: int = Field(default=1, ge=1, description="Refresh token lifetime")
    REMEMBER_ME_SESSION_DURATION_DAYS: int = Field(
        default=30, ge=1, description="Refresh token lifetime when the user asks to be remembered"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("CORS_ORIGINS", "CORS_ALLOW_METHODS", "CORS_ALLOW_HEADERS", mode="before")
    @classmethod
    def _split_csv(cls, v):
        """Accept "a, b" as well as JSON arrays; empty means "*"."""
        if isinstance(v, str) and v.strip().startswith("["):
            v = json.loads(v)
        elif isinstance(v, str):
            v = [p.strip() for p in v.split(",")]
        return [p for p in (v or []) if p] or ["*"]

    def session_duration_days(self, remember_me: bool) -> int:
        return self.REMEMBER_ME_SESSION_DURATION_DAYS if remember_me else self.SESSION_DURATION_DAYS


# PUBLIC_INTERFACE
@lru_cache
def get_app_settings() -> AppSettings:
    """Application settings, read from the environment once per process."""
    return AppSettings()
