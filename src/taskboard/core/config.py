"""Runtime settings, read from ``TASKBOARD_*`` variables and an optional ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__

PROJECT_ROOT = Path(__file__).resolve().parents[3]

EnvironmentName = Literal["development", "test", "ci", "production"]
LocaleName = Literal["en", "ja"]
SameSite = Literal["lax", "strict", "none"]

DEFAULT_API_BASE_URL = "http://localhost:8080/api/v1"

_ENVIRONMENT_ALIASES: dict[str, EnvironmentName] = {
    "dev": "development",
    "local": "development",
    "testing": "test",
    "prod": "production",
}

# Applied to every field the caller (or the environment) did not set.
_PROFILE_DEFAULTS: dict[EnvironmentName, dict[str, Any]] = {
    "development": {"log_level": "DEBUG", "reload": True, "session_https_only": False},
    "test": {"log_level": "WARNING", "reload": False, "session_https_only": False},
    "ci": {"log_level": "INFO", "reload": False, "session_https_only": False},
    "production": {"log_level": "INFO", "reload": False, "session_https_only": True},
}


class Settings(BaseSettings):
    """Configuration for the task board web client."""

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Taskboard"
    environment: EnvironmentName = "development"
    version: str = __version__

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Base address of the remote task-management API.",
    )
    api_timeout_seconds: float | None = Field(
        default=None,
        description="Per-request timeout for remote calls; unset means no timeout.",
    )
    locale: LocaleName = "en"

    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    reload: bool = False

    session_secret_key: str = "change-me-session"
    session_cookie_name: str = "taskboard_session"
    session_max_age: int | None = 60 * 60 * 24 * 14
    session_https_only: bool = True
    session_same_site: SameSite = "lax"

    @field_validator("environment", mode="before")
    @classmethod
    def _resolve_environment(cls, value: object) -> str:
        name = str(value or "").strip().lower()
        name = _ENVIRONMENT_ALIASES.get(name, name)
        return name if name in _PROFILE_DEFAULTS else "development"

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> str:
        url = str(value or "").strip().rstrip("/")
        return url or DEFAULT_API_BASE_URL

    @field_validator("api_timeout_seconds", mode="before")
    @classmethod
    def _timeout_or_none(cls, value: object) -> float | None:
        if isinstance(value, str):
            value = value.strip().lower()
            if value in {"", "none", "off"}:
                return None
        try:
            seconds = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        return seconds if seconds > 0 else None

    @field_validator("locale", mode="before")
    @classmethod
    def _language_only(cls, value: object) -> str:
        # "ja-JP" and "ja_JP.UTF-8" both select "ja".
        language = str(value or "").strip().lower().replace("_", "-").split("-")[0]
        return language if language in {"en", "ja"} else "en"

    @field_validator("log_level", "session_same_site", mode="before")
    @classmethod
    def _normalise_case(cls, value: object, info: ValidationInfo) -> object:
        if not isinstance(value, str):
            return value
        if info.field_name == "log_level":
            return value.strip().upper()
        same_site = value.strip().lower()
        return same_site if same_site in {"lax", "strict", "none"} else "lax"

    @model_validator(mode="after")
    def _apply_profile(self) -> "Settings":
        for name, value in _PROFILE_DEFAULTS[self.environment].items():
            if name not in self.model_fields_set:
                setattr(self, name, value)
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["PROJECT_ROOT", "Settings", "get_settings"]
