# SPDX-License-Identifier: Apache-2.0
"""All configuration via environment variables (12-factor). No hardcoded values."""
from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="sqlite:///./labelhub.db", description="Database URL")
    storage_timeout_seconds: float = Field(default=5.0, gt=0, le=120, description="Per-statement storage timeout")

    # Blob storage
    upload_dir: str = Field(default="./uploads", description="Base directory for dataset files")
    public_files_url: str = Field(default="/files", description="URL prefix under which uploads are served")
    max_upload_size_mb: int = Field(default=50, ge=1, le=2000, description="Max size per uploaded file in MB")
    max_files_per_upload: int = Field(default=50, ge=1, le=500)

    # Security: required in production, set in .env
    secret_key: str = Field(default=DEV_SECRET_KEY, min_length=16)
    jwt_algorithm: str = Field(default="HS256")
    token_expire_minutes: int = Field(default=7 * 24 * 60, ge=1, description="Bearer token lifetime")
    allow_admin_registration: bool = Field(default=False, description="Honour role=admin on /auth/register")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    auth_rate_limit: str = Field(default="20/minute", description="slowapi limit for register/login")

    # CORS
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Logging
    log_level: str = Field(default="INFO")

    # Derived / internal
    @property
    def upload_dir_path(self) -> Path:
        return Path(self.upload_dir)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def production(self) -> bool:
        return self.secret_key != DEV_SECRET_KEY


settings = Settings()
