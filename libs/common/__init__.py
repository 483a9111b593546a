"""Common utilities shared across the project.

Includes:
- ``config``: pydantic-settings configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers.
- ``tracing``: OpenTelemetry setup and span helpers.

Import pattern:
- from libs.common.config import SearchConfig
- from libs.common.logging import configure_logging
"""
