from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Construct one instance at startup and pass it to whatever needs it.
    """

    # Knowledge base
    knowledge_base_path: Optional[str] = Field(
        default=None, validation_alias="UPGRADE_LENS_KB_PATH"
    )

    # Analysis
    project_root: str = Field(default=".", validation_alias="UPGRADE_LENS_PROJECT_ROOT")
    exclude_paths: list[str] = Field(
        default=["vendor", "node_modules", "storage", ".git"],
        validation_alias="UPGRADE_LENS_EXCLUDE_PATHS",
    )
    tool_timeout_seconds: int = Field(
        default=60, ge=0, validation_alias="UPGRADE_LENS_TOOL_TIMEOUT"
    )

    # Transport
    heartbeat_interval: int = Field(
        default=30, validation_alias="UPGRADE_LENS_HEARTBEAT_INTERVAL"
    )

    # Cache
    cache_ttl_seconds: int = Field(default=3600, validation_alias="UPGRADE_LENS_CACHE_TTL")
    cache_max_entries: int = Field(
        default=200, ge=1, validation_alias="UPGRADE_LENS_CACHE_MAX_ENTRIES"
    )
    cache_max_value_size: int = Field(
        default=1024 * 1024, ge=1, validation_alias="UPGRADE_LENS_CACHE_MAX_VALUE_SIZE"
    )

    # Server
    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=8765, validation_alias="PORT")
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Copy with the non-None overrides applied (used for CLI options)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=values)
