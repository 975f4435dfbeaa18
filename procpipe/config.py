"""
Centralized Configuration
=========================
Configuration values and constants for procpipe.

This module provides:
- Pipeline constants (sentinel error code, output encoding)
- Logging defaults for command-line use
- Tracing configuration

None of these values influence the environment or working directory of the
child processes; those are inherited from the caller unchanged.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineConfig:
    """Pipeline execution constants."""

    # Code attached to structural errors and spawn-chain failures
    SENTINEL_CODE: int = -1

    # Encoding the final stage's output must decode with
    OUTPUT_ENCODING: str = "utf-8"

    # Token separating stages on the command line
    STAGE_SEPARATOR: str = "|"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration used when the package logger is enabled."""

    LEVEL: str = os.getenv("PROCPIPE_LOG_LEVEL", "DEBUG").upper()


@dataclass(frozen=True)
class TracingConfig:
    """Tracing configuration."""

    SERVICE_NAME: str = "procpipe"
    OTLP_ENDPOINT: str = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/traces")
    ENABLED: bool = os.getenv("PROCPIPE_ENABLE_TRACING", "false").lower() == "true"


# Global singleton instances
PIPELINE = PipelineConfig()
LOGGING = LoggingConfig()
TRACING = TracingConfig()
