"""Application settings loaded from defaults, environment and CLI overrides."""

import enum
import typing as t
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATALOG_URL = "https://go.dev/dl/?mode=json&include=all"
DEFAULT_DOWNLOAD_URL_TEMPLATE = "https://go.dev/dl/{filename}"


class Environment(enum.StrEnum):
    """Runtime environment for the application."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(enum.StrEnum):
    """Log levels understood by loguru."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Settings container used to bootstrap the app.

    Values come from field defaults, then ``GOMIRROR_*`` environment
    variables, then explicit keyword arguments (see ``build_settings``).
    """

    model_config = SettingsConfigDict(
        env_prefix="GOMIRROR_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Environment = Environment.DEVELOPMENT
    log_level: LogLevel = LogLevel.INFO

    download_dir: Path = Field(
        default=Path("."),
        description="Root directory holding one subdirectory per release",
    )
    catalog_url: str = Field(
        default=DEFAULT_CATALOG_URL,
        description="URL of the JSON release listing",
    )
    download_url_template: str = Field(
        default=DEFAULT_DOWNLOAD_URL_TEMPLATE,
        description="Artifact URL template with a {filename} placeholder",
    )
    user_agent: str = Field(default="gomirror/0.1.0")

    catalog_timeout: float = Field(default=30.0, gt=0)
    download_timeout: float = Field(default=600.0, gt=0)
    max_body_size: int = Field(
        default=1 << 29,
        gt=0,
        description="Hard cap on a single response body in bytes",
    )
    chunk_size: int = Field(default=1 << 16, gt=0)

    sidecar_suffix: str = Field(default=".sha", min_length=1)
    excluded_versions: tuple[str, ...] = ()
    prerelease_markers: tuple[str, ...] = ("beta", "rc")
    verify_downloads: bool = Field(
        default=False,
        description="Re-hash downloaded files before trusting the sidecar",
    )


def build_settings(**overrides: t.Any) -> Settings:
    """Build Settings, ignoring overrides that are None.

    Lets the CLI pass every option straight through while only the flags
    the user actually set replace defaults.
    """
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
