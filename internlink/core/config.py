"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "internlink"
    postgres_password: str = "password"
    postgres_db: str = "internlink"

    # Full SQLAlchemy URL, overrides the postgres_* fields when set
    database_url: Optional[str] = None

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Password hashing
    bcrypt_rounds: int = 12

    # Resume storage
    upload_dir: Path = Path("uploads")
    max_resume_size_mb: int = 5

    # Admin account created on startup when both are set
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    # App
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: List[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or self.postgres_url

    @property
    def resume_dir(self) -> Path:
        return self.upload_dir / "resumes"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """Dependency - the settings the running app was built with."""
    return request.app.state.settings
