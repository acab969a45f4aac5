"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - timezone is a valid IANA zone name (checked against zoneinfo at load time);
      unset, it is the host's own zone
    - Route paths start with "/" and have no trailing slash

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: the service runs out-of-the-box
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCALTIME = Path("/etc/localtime")


def host_timezone() -> str:
    """IANA name the host clock is set to, read from the /etc/localtime link.

    Falls back to "UTC" when the link is missing or does not point into a
    zoneinfo database.
    """
    try:
        target = LOCALTIME.resolve(strict=True)
    except (OSError, RuntimeError):
        return "UTC"
    parts = target.parts
    if "zoneinfo" not in parts:
        return "UTC"
    anchor = len(parts) - 1 - parts[::-1].index("zoneinfo")
    name = "/".join(parts[anchor + 1:])
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return "UTC"
    return name


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: Literal["development", "production", "test"] = "development"

    # OpenAPI document
    app_title: str = "My App API"
    app_version: str = "1.0.0"
    app_description: str = "API documentation for My App - type-safe RPC endpoints"

    # Transports
    rpc_path: str = "/api/rpc"
    rest_prefix: str = "/api/rpc"
    openapi_path: str = "/api/openapi"
    docs_path: str = "/api/docs"
    request_timeout_seconds: float | None = Field(30.0, gt=0)

    @field_validator("rpc_path", "rest_prefix", "openapi_path", "docs_path")
    @classmethod
    def normalize_route_path(cls, v: str) -> str:
        v = "/" + v.strip().strip("/")
        return v

    # Docs viewer
    docs_script_url: str = "https://cdn.jsdelivr.net/npm/@scalar/api-reference"
    docs_default_token: str = "default-token"

    # Procedures
    todos_latency_ms: int = Field(100, ge=0)
    timezone: str = Field(default_factory=host_timezone)

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown IANA time zone: {v!r}")
        return v

    # API
    cors_origins: list[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 3000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
