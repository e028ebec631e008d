"""Application configuration."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Daybook Backend"
    app_env: str = "development"
    api_prefix: str = "/api/v1"

    database_url: str = "sqlite+pysqlite:///./daybook.db"

    # Development fallback principal (for local MVP and tests).
    # Must be disabled in production environments.
    auth_allow_dev_principal: bool = True
    auth_dev_uid: str = "dev-user-uid"
    auth_dev_email: str = "dev.user@local.test"
    auth_dev_display_name: str = "Dev User"

    # Hosted auth service (GoTrue-compatible REST API).
    auth_service_url: str = "http://localhost:9999"
    auth_service_api_key: SecretStr = SecretStr("")
    auth_redirect_url: str = "http://localhost:5173"
    auth_timeout_seconds: float = Field(default=10.0, gt=0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    currency_code: str = Field(default="EUR", min_length=3, max_length=3)
    # TrueType font for the PDF snapshot; the bundled default covers Latin scripts only.
    report_font_path: str | None = None
    theme_cookie_name: str = "theme"

    # Keep .env support for comma-separated values (non-JSON).
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()
