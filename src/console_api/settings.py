"""Console API settings (conventional Pydantic v2)."""

from __future__ import annotations

import json
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings

from console_db.settings import (
    DatabaseSettingsMixin,
    console_settings_config,
    create_settings_accessors,
    normalize_log_format,
    normalize_log_level,
)

# ---- Defaults ---------------------------------------------------------------

DEFAULT_CORS_ORIGINS: list[str] = []
DEFAULT_BOOTSTRAP_ADMIN_EMAIL = "admin@system.com"


# ---- Settings ---------------------------------------------------------------


class Settings(DatabaseSettingsMixin, BaseSettings):
    """FastAPI settings loaded from CONSOLE_* environment variables."""

    model_config = console_settings_config(enable_decoding=False, populate_by_name=True)

    # Core
    app_name: str = "Team Console API"
    app_version: str = "0.1.0"
    log_format: str = "console"
    log_level: str = "INFO"
    api_log_level: str | None = None
    request_log_level: str | None = None
    database_log_level: str | None = None

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = Field(8000, ge=1, le=65535)
    server_cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    # JWT
    secret_key: SecretStr = Field(..., min_length=32)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(60, ge=1)

    # Auth policy
    allow_public_registration: bool = True
    auth_password_min_length: int = Field(6, ge=6, le=128)
    auth_password_require_uppercase: bool = False
    auth_password_require_lowercase: bool = False
    auth_password_require_number: bool = False
    auth_password_require_symbol: bool = False

    # Navigation
    menu_visibility_mode: Literal["replace", "union"] = "replace"

    # Bootstrap
    bootstrap_enabled: bool = False
    bootstrap_admin_email: str = DEFAULT_BOOTSTRAP_ADMIN_EMAIL
    bootstrap_admin_password: SecretStr | None = None
    bootstrap_admin_name: str = "System Administrator"

    # ---- Validators ----

    @field_validator("server_cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        if value is None:
            return value
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return []
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                except json.JSONDecodeError:
                    parsed = None
                if isinstance(parsed, list):
                    return parsed
            return [item.strip() for item in raw.split(",") if item.strip()]
        if isinstance(value, tuple):
            return list(value)
        return value

    @field_validator("menu_visibility_mode", mode="before")
    @classmethod
    def _normalize_menu_visibility_mode(cls, value: object) -> object:
        if value is None:
            return "replace"
        return str(value).strip().lower()

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format, env_var="CONSOLE_LOG_FORMAT")

        normalized_log_level = normalize_log_level(self.log_level, env_var="CONSOLE_LOG_LEVEL")
        if normalized_log_level is None:
            raise ValueError("CONSOLE_LOG_LEVEL must not be empty.")
        self.log_level = normalized_log_level

        self.api_log_level = normalize_log_level(
            self.api_log_level,
            env_var="CONSOLE_API_LOG_LEVEL",
        )
        self.request_log_level = normalize_log_level(
            self.request_log_level,
            env_var="CONSOLE_REQUEST_LOG_LEVEL",
        )
        self.database_log_level = normalize_log_level(
            self.database_log_level,
            env_var="CONSOLE_DATABASE_LOG_LEVEL",
        )

        if self.algorithm != "HS256":
            raise ValueError("CONSOLE_ALGORITHM must be HS256.")
        if len(self.secret_key.get_secret_value().encode("utf-8")) < 32:
            raise ValueError("CONSOLE_SECRET_KEY must be at least 32 bytes (recommend 64+).")
        if self.bootstrap_enabled and self.bootstrap_admin_password is None:
            raise ValueError(
                "CONSOLE_BOOTSTRAP_ADMIN_PASSWORD is required when bootstrap is enabled."
            )
        return self

    # ---- Convenience ----

    @property
    def effective_api_log_level(self) -> str:
        return self.api_log_level or self.log_level

    @property
    def effective_request_log_level(self) -> str:
        return self.request_log_level or self.effective_api_log_level

    @property
    def secret_key_value(self) -> str:
        return self.secret_key.get_secret_value()


get_settings, reload_settings = create_settings_accessors(Settings)


__all__ = [
    "DEFAULT_CORS_ORIGINS",
    "Settings",
    "get_settings",
    "reload_settings",
]
