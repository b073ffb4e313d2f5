"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/139.0.0.0 Safari/537.36"
)


def _strip_trailing_slash(value: Any) -> Any:
    if isinstance(value, str):
        return value.rstrip("/")
    return value


class AppConfig(BaseModel):
    """Validated addon settings.

    Each field accepts its flat name (``cinemaos_timeout_seconds``) or its
    sectioned path (``cinemaos.timeout_seconds``).
    """

    # General
    app_name: str = Field(default="cinestream", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Stream provider (YAML section: cinemaos.*)
    cinemaos_base_url: str = Field(
        default="https://cinemaos.tech",
        validation_alias=AliasChoices(
            "cinemaos_base_url",
            AliasPath("cinemaos", "base_url"),
        ),
        description="CinemaOS origin; also sent as Referer.",
    )
    cinemaos_timeout_seconds: float = Field(
        default=60.0,
        validation_alias=AliasChoices(
            "cinemaos_timeout_seconds",
            AliasPath("cinemaos", "timeout_seconds"),
        ),
        description="Timeout for the provider request (seconds).",
    )
    cinemaos_user_agent: str = Field(
        default=_BROWSER_USER_AGENT,
        validation_alias=AliasChoices(
            "cinemaos_user_agent",
            AliasPath("cinemaos", "user_agent"),
        ),
        description="User-Agent for provider requests and stream headers.",
    )

    # Metadata service (YAML section: cinemeta.*)
    cinemeta_base_url: str = Field(
        default="https://v3-cinemeta.strem.io",
        validation_alias=AliasChoices(
            "cinemeta_base_url",
            AliasPath("cinemeta", "base_url"),
        ),
        description="Cinemeta metadata service origin.",
    )
    cinemeta_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "cinemeta_timeout_seconds",
            AliasPath("cinemeta", "timeout_seconds"),
        ),
        description="Timeout for metadata lookups (seconds).",
    )
    cinemeta_user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        validation_alias=AliasChoices(
            "cinemeta_user_agent",
            AliasPath("cinemeta", "user_agent"),
        ),
        description="User-Agent for metadata requests.",
    )

    @field_validator("cinemaos_base_url", "cinemeta_base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, v: Any) -> Any:
        return _strip_trailing_slash(v)

    @field_validator("cinemaos_timeout_seconds", "cinemeta_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """CINESTREAM_* variables, for example ``CINESTREAM_CINEMAOS_BASE_URL``.

    Unset variables stay None and are left out of the merge.
    """

    model_config = SettingsConfigDict(
        env_prefix="CINESTREAM_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cinemaos_base_url: Optional[str] = None
    cinemaos_timeout_seconds: Optional[float] = None
    cinemaos_user_agent: Optional[str] = None

    cinemeta_base_url: Optional[str] = None
    cinemeta_timeout_seconds: Optional[float] = None
    cinemeta_user_agent: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Values that were set, keyed by flat field name."""
        return self.model_dump(exclude_none=True)
