from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    """
    Database connection settings for the garage database.

    A full POSTGRES_URL wins; otherwise the URL is assembled from the
    POSTGRES_USER/PASSWORD/DB/HOST/PORT parts. Any SQLAlchemy URL is accepted,
    so tests and local runs can point at ``sqlite+aiosqlite://``.
    """

    POSTGRES_URL: Optional[str] = Field(default=None, description="Full database URL (any SQLAlchemy dialect)")
    POSTGRES_USER: Optional[str] = Field(default=None, description="DB username")
    POSTGRES_PASSWORD: Optional[str] = Field(default=None, description="DB password")
    POSTGRES_DB: Optional[str] = Field(default=None, description="Database name")
    POSTGRES_HOST: str = Field(default="localhost", description="Database host")
    POSTGRES_PORT: int = Field(default=5432, description="Database port")

    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement")
    DB_POOL_SIZE: int = Field(default=5, ge=1, description="Persistent connections per process (PostgreSQL)")
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0, description="Extra connections allowed under load (PostgreSQL)")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def database_url(self) -> str:
        if self.POSTGRES_URL:
            return self.POSTGRES_URL
        if not (self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB):
            raise ValueError(
                "Database is not configured: set POSTGRES_URL, or POSTGRES_USER, "
                "POSTGRES_PASSWORD and POSTGRES_DB."
            )
        return URL.create(
            "postgresql",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        ).render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.database_url).get_backend_name() == "sqlite"

    @property
    def async_database_url(self) -> str:
        """PostgreSQL URLs are switched to asyncpg; other dialects keep their driver."""
        url = self.database_url
        if not url.startswith("postgres"):
            return url
        return re.sub(r"^postgres(ql)?(\+\w+)?://", "postgresql+asyncpg://", url)

    @property
    def sync_database_url(self) -> str:
        """The URL without an async driver, for Alembic offline mode."""
        return re.sub(r"^(postgresql|sqlite)\+\w+://", r"\1://", self.database_url)


# PUBLIC_INTERFACE
@lru_cache
def get_settings() -> Settings:
    """Database settings, read once per process."""
    return Settings()
