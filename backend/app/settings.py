############################################################
#
# etlive - ET Live Data Server
#
# settings.py: Application configuration and environment settings
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _get_version() -> str:
    """Read version from pyproject.toml (single source of truth)."""
    try:
        from importlib.metadata import version
        return version("etlive")
    except Exception:
        pass
    # Fallback: read pyproject.toml directly (works in dev without pip install)
    try:
        import tomllib
        toml_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except Exception:
        return "0.0.0"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.prod"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ET Live Data Server"
    app_version: str = Field(default_factory=_get_version)
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # Node configuration (TOML file with [[nodes]] tables)
    nodes_config_path: str = "config.toml"

    # Collection
    poll_interval_seconds: float = 1.0
    poll_timeout_seconds: float = 10.0

    # Shutdown
    shutdown_deadline_seconds: float = 5.0
    http_graceful_shutdown_seconds: int = 10

    # Front end build served at / (skipped if the directory is missing)
    static_dir: Optional[str] = "app/build"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    # Observability
    metrics_enabled: bool = True

    # CORS (JSON list or comma-separated string)
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator(
        "poll_interval_seconds",
        "poll_timeout_seconds",
        "shutdown_deadline_seconds",
        "http_graceful_shutdown_seconds",
    )
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        """Intervals and timeouts must be strictly positive."""
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
