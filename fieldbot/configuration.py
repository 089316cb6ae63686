"""Mini README: Centralised configuration models and helpers for Fieldbot.

Structure:
    * FieldbotSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables, point the route
    planner at the farm backend, size the field grid and bound the execution
    waits. The configuration is cached so the cost of validation is incurred
    only once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class FieldbotSettings(BaseSettings):
    """Runtime configuration for the Fieldbot route planner."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the local fallback store for saved paths.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the operator service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the operator service exposes.",
        ge=1,
        le=65535,
    )
    api_base_url: str = Field(
        "http://localhost:5001/api",
        description="Base URL of the farm backend serving saved paths and execution.",
    )
    request_timeout_seconds: float = Field(
        10.0,
        description="Timeout applied to every HTTP call against the farm backend.",
        gt=0,
    )
    field_size: int = Field(
        5,
        description="Number of cells along each side of the square field grid.",
        ge=1,
    )
    local_store_key: str = Field(
        "savedPaths",
        description="Key of the local slot holding the fallback JSON array of paths.",
    )
    submit_timeout_seconds: float = Field(
        15.0,
        description="Upper bound on waiting for the actuation service to acknowledge a route.",
        gt=0,
    )
    execution_timeout_seconds: float = Field(
        600.0,
        description="Upper bound on waiting for the actuation service to report a finished route.",
        gt=0,
    )
    settle_seconds: float = Field(
        0.0,
        description="Pause after a terminal outcome before the coordinator accepts new work.",
        ge=0,
    )
    actuation_channel: str = Field(
        "http",
        description="Registered actuation channel used to execute routes ('http' or 'simulated').",
    )

    class Config:
        env_prefix = "FIELDBOT_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @validator("api_base_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        """Normalise the base URL so endpoint paths join cleanly."""

        return value.rstrip("/")


@lru_cache()
def get_settings() -> FieldbotSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return FieldbotSettings()
