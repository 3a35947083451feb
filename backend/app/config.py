from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "production", "test")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: str = "development"
    domain: str = "localhost"
    cors_origins: list[str] = []

    data_dir: Path = Path("/app/data")
    db_url: str = "sqlite:////app/data/folio.db"
    sql_echo: bool = False
    log_level: str = "INFO"

    # Remote content references (writings stored on the upload CDN)
    content_allowed_hosts: list[str] = []
    content_fetch_timeout_seconds: float = 10.0
    content_max_bytes: int = 5 * 1024 * 1024

    @model_validator(mode="after")
    def _check_environment(self) -> Settings:
        self.environment = self.environment.strip().lower()
        if self.environment not in ENVIRONMENTS:
            raise ValueError(
                f"ENVIRONMENT must be one of {', '.join(ENVIRONMENTS)}, "
                f"got {self.environment!r}"
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
