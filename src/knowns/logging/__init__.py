"""
Knowns Logging Module

Logging for the Knowns CLI: a single daily-rotated log file in the
platform log directory, a stderr handler for warnings, a compact format
for HTTP calls, and sanitization of credentials before anything is written.
"""

from .logger import (
    get_logger,
    setup_logging,
    LogLevel,
    log_api_call,
    log_transaction,
    log_application_event,
)
from .config import LogConfig
from .utils import sanitize_data, get_log_directory

__all__ = [
    "get_logger",
    "setup_logging",
    "log_api_call",
    "log_transaction",
    "log_application_event",
    "LogLevel",
    "LogConfig",
    "sanitize_data",
    "get_log_directory",
]
