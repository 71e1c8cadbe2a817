"""
Settings module for the Competency Catalog service.

Environment-based configuration with sensible defaults.
All settings can be overridden via environment variables prefixed with CATALOG_.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    In production, database credentials should be set via environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: str = Field(
        default="dev",
        description="Environment name (dev, qa, prod)"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Database Configuration
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides the db_* fields when set"
    )
    db_host: str = Field(default="localhost", description="PostgreSQL host")
    db_port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    db_user: str = Field(default="catalog", description="PostgreSQL user")
    db_password: Optional[str] = Field(default=None, description="PostgreSQL password")
    db_name: str = Field(default="catalog", description="PostgreSQL database name")
    db_pool_size: int = Field(default=10, ge=1, description="Connection pool size")
    db_connect_timeout_seconds: int = Field(
        default=5,
        ge=1,
        description="Timeout for establishing a database connection"
    )
    db_statement_timeout_ms: int = Field(
        default=5000,
        ge=100,
        description="Per-statement timeout applied on PostgreSQL connections"
    )

    # Catalog query limits
    default_page_size: int = Field(default=50, ge=1, description="Default page size for listings")
    max_page_size: int = Field(default=5000, ge=1, description="Largest page a caller may request")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    service_name: str = Field(default="competency-catalog", description="Service name for logs and traces")
    datadog_api_key: Optional[str] = Field(
        default=None,
        description="Datadog API key; log shipping is disabled when unset"
    )
    datadog_include_loggers: str = Field(
        default="",
        description="Optional allowlist of logger prefixes shipped to Datadog (comma-separated)"
    )

    # Tracing
    enable_tracing: bool = Field(default=False, description="Enable OpenTelemetry tracing")
    otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP HTTP endpoint (e.g., http://localhost:4318/v1/traces)"
    )

    # Auth
    local_actor_id: str = Field(
        default="local-owner",
        description="Actor used in local development when no identity headers are sent"
    )

    @property
    def datadog_logger_prefixes(self) -> List[str]:
        return [prefix.strip() for prefix in self.datadog_include_loggers.split(",") if prefix.strip()]

    @property
    def sqlalchemy_url(self):
        if self.database_url:
            return self.database_url
        return URL.create(
            drivername="postgresql",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            database=self.db_name,
            port=self.db_port,
        )

    @property
    def is_local(self) -> bool:
        return self.environment == "dev"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
