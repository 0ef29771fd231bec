"""Configuration management for tabdb."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    data_dir: Path = Field(default=Path("databases"), description="Root directory for databases")
    table_suffix: str = Field(
        default=".tab", pattern=r"^\.[A-Za-z0-9]+$", description="Table file extension"
    )
    fsync: bool = Field(default=False, description="fsync table files before renaming them into place")
    insert_mode: Literal["rewrite", "append"] = Field(
        default="rewrite", description="Rewrite the whole table or append one line on INSERT"
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8888, ge=1, le=65535, description="Line-protocol TCP port")
    http_port: int = Field(default=8000, ge=1, le=65535, description="HTTP API port")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")
    max_line_bytes: int = Field(
        default=1048576, ge=1024, description="Longest command line accepted (default 1MB)"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="tabdb", description="Service name for tracing")
    otel_console_export: bool = Field(default=False, description="Print finished spans to stdout")


class Config(BaseSettings):
    """Main configuration for tabdb."""

    model_config = SettingsConfigDict(
        env_prefix="TABDB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the storage root exists."""
        self.storage.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
