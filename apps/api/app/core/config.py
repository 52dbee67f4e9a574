"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    jwt_secret: str = Field(min_length=1)
    token_ttl_seconds: int = Field(default=3600, ge=1)
    otp_ttl_minutes: int = Field(default=10, ge=1)
    bootstrap_admin_email: str | None = None
    bootstrap_admin_username: str = "admin"
    bootstrap_admin_password: str | None = None

    model_config = SettingsConfigDict(env_prefix="SANSAR_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
