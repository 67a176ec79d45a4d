# book_service/config.py
"""
Runtime configuration for the book service.

All values can be overridden through environment variables prefixed with
``BOOK_SERVICE_`` (for example ``BOOK_SERVICE_DATABASE_URL``) or through a
``.env`` file in the working directory.
"""

from __future__ import annotations

import shlex
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOK_SERVICE_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_url: str = Field(
        default="sqlite:///./books.db",
        min_length=1,
        description="SQLAlchemy URL of the book store.",
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:63342"],
        description="Origins allowed to call the API from a browser.",
    )

    price_lookup_enabled: bool = Field(
        default=True,
        description="Ask the local model for a price on list/detail requests.",
    )
    price_command: str = Field(
        default="ollama run tinyllama:latest",
        min_length=1,
        description="Command line of the local text-generation program.",
    )
    price_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Deadline for one price lookup; the process is killed past it.",
    )
    price_max_concurrency: int = Field(
        default=2,
        ge=1,
        le=32,
        description="Maximum number of model processes running at once.",
    )

    host: str = Field(default="127.0.0.1", description="Interface the HTTP server binds to.")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP port.")

    log_level: str = Field(default="INFO", description="Root logging level.")

    def price_argv(self) -> List[str]:
        return shlex.split(self.price_command)


@lru_cache
def get_settings() -> Settings:
    return Settings()
