"""
Logging Infrastructure

Structured logging with console, rotating file and JSON output.
"""

from .logging_config import (
    CartJsonFormatter,
    LoggingConfig,
    LoggingConfigOptions,
    get_structured_logger,
    setup_logging,
)

__all__ = [
    "CartJsonFormatter",
    "LoggingConfig",
    "LoggingConfigOptions",
    "get_structured_logger",
    "setup_logging",
]
