"""Application settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vitals_api import __version__


class Settings(BaseSettings):
    """Configuration for the Web Vitals API, read from VITALS_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="VITALS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Web Vitals API"
    version: str = __version__
    host: str = "0.0.0.0"
    port: int = 8000

    data_dir: Path = Path("data") / "vitals"

    default_range_days: int = Field(default=7, ge=1)
    max_range_days: int = Field(default=366, ge=1)

    log_level: str = "INFO"

    # Kept as a plain string so pydantic-settings does not try to parse JSON
    cors_allowed_origins: str = "*"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
