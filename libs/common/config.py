"""Configuration management for the archive search service.

This module centralizes environment-driven configuration. It builds on
``pydantic_settings.BaseSettings`` so configuration can be provided via
environment variables, ``.env`` files, or defaults.

Highlights
- Strongly-typed settings with sensible defaults
- One place to discover commonly used environment variables
- A small service-specific subclass to keep concerns clear

Usage
- Inject the config in the service entrypoint: ``config = SearchConfig()``

Ranking weights and bonuses are deliberately not settings; they live in
``archive_search.ranking.constants``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration shared by every process in the project.

    Parameters are read from the process environment using the upper-cased
    field name (``archive_log_level`` -> ``ARCHIVE_LOG_LEVEL``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    archive_env: str = Field(default="local")

    # Observability
    archive_tracing_enabled: bool = Field(default=False)
    archive_otel_exporter: str = Field(default="http://localhost:4318/v1/traces")

    # Logging
    archive_log_level: str = Field(default="INFO")
    archive_log_format: str = Field(default="json")


class SearchConfig(BaseConfig):
    """Configuration for the search service.

    Adds the API port, the upstream archive endpoint and the candidate
    over-fetch policy used when re-ranking.
    """

    archive_search_port: int = Field(default=9007)

    # Upstream archive API
    archive_upstream_base_url: str = Field(default="https://archive.org")
    archive_upstream_timeout: float = Field(default=30.0, gt=0)

    # Candidate window
    archive_rerank_fetch_multiplier: int = Field(default=5, ge=1)
    archive_rerank_max_fetch_rows: int = Field(default=100, ge=1)
