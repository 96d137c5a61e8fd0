"""
Main logging module for the Knowns CLI.

This module provides the primary logging interface and logger setup
with daily log rotation.
"""

import json
import logging
import logging.handlers
import sys
from typing import Optional, Dict, Any

from .config import LogConfig, LogLevel, get_log_file_path
from .formatters import KnownsFormatter, APICallFormatter
from .utils import cleanup_old_logs, sanitize_data


# Global logger registry
_loggers: Dict[str, logging.Logger] = {}
_logging_configured = False
_log_config: Optional[LogConfig] = None


def _level_from_settings(config: LogConfig) -> None:
    """Apply the user's `log_level` setting, if any, to the config."""
    try:
        from knowns.utils.config_store import ConfigStore

        settings_file = ConfigStore().settings_file
        if settings_file.exists():
            with open(settings_file, "r", encoding="utf-8") as f:
                user_level = json.load(f).get("log_level")
            if user_level and user_level in [lev.value for lev in LogLevel]:
                config.default_level = LogLevel(user_level)
    except (OSError, ValueError):
        # Unreadable settings never block logging setup
        pass


def setup_logging(config: Optional[LogConfig] = None, force_reconfigure: bool = False) -> None:
    """
    Set up the Knowns logging system.

    Args:
        config: LogConfig instance, uses default if None
        force_reconfigure: Force reconfiguration even if already set up
    """
    global _logging_configured, _log_config

    if _logging_configured and not force_reconfigure:
        return

    if config is None:
        config = LogConfig()
        _level_from_settings(config)

    _log_config = config
    log_file_path = get_log_file_path(config)

    root_logger = logging.getLogger("knowns")
    root_logger.setLevel(getattr(logging, config.default_level.value))
    root_logger.handlers.clear()

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_file_path,
        when="midnight",
        interval=1,
        backupCount=config.log_retention_days,
        encoding="utf-8",
        utc=False,
    )
    file_handler.setLevel(getattr(logging, config.default_level.value))
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setFormatter(
        KnownsFormatter(
            include_timestamps=config.include_timestamps,
            include_thread_info=config.include_thread_info,
            sanitize_sensitive=config.sanitize_sensitive_data,
            sensitive_keys=config.sensitive_keys,
        )
    )
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, config.console_level.value))
    console_handler.setFormatter(
        KnownsFormatter(
            include_timestamps=False,
            sanitize_sensitive=config.sanitize_sensitive_data,
            sensitive_keys=config.sensitive_keys,
        )
    )
    root_logger.addHandler(console_handler)

    # HTTP calls get their own one-line format in the same file
    api_logger = logging.getLogger("knowns.api")
    api_logger.setLevel(logging.DEBUG)
    api_logger.handlers.clear()
    if config.log_api_calls:
        api_handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_file_path,
            when="midnight",
            interval=1,
            backupCount=config.log_retention_days,
            encoding="utf-8",
            utc=False,
        )
        api_handler.setLevel(logging.DEBUG)
        api_handler.suffix = "%Y-%m-%d"
        api_handler.setFormatter(
            APICallFormatter(
                sanitize_sensitive=config.sanitize_sensitive_data,
                sensitive_keys=config.sensitive_keys,
            )
        )
        api_logger.addHandler(api_handler)
    api_logger.propagate = False

    try:
        cleanup_old_logs(log_file_path.parent, config.log_retention_days)
    except OSError:
        pass

    _logging_configured = True

    get_logger("knowns.setup").info(
        f"Logging initialized - File: {log_file_path}, "
        f"Level: {config.default_level.value}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified name.

    Args:
        name: Logger name (e.g., 'knowns.imports.service')

    Returns:
        logging.Logger: Logger instance
    """
    if not _logging_configured:
        setup_logging()

    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]


def log_api_call(
    method: str,
    url: str,
    status_code: Optional[int] = None,
    duration: Optional[float] = None,
    error: Optional[str] = None,
    logger_name: str = "knowns.api",
) -> None:
    """
    Log an HTTP call with structured information.

    Args:
        method: HTTP method
        url: Request URL
        status_code: Response status code
        duration: Request duration in seconds
        error: Error message if request failed
        logger_name: Logger name to use
    """
    logger = get_logger(logger_name)

    extra = {
        "api_method": method,
        "api_url": url,
        "api_status": status_code,
        "api_duration": duration or 0,
    }
    if error:
        extra["api_error"] = error

    if error or (status_code and status_code >= 500):
        logger.error("API call failed", extra=extra)
    elif status_code and 400 <= status_code < 500:
        logger.warning("API call client error", extra=extra)
    else:
        logger.debug("API call completed", extra=extra)


def log_transaction(
    operation: str,
    details: Optional[Dict[str, Any]] = None,
    logger_name: str = "knowns.transaction",
) -> None:
    """
    Log a pipeline step at DEBUG level.

    Args:
        operation: Description of the operation
        details: Additional transaction details (sanitized)
        logger_name: Logger name to use
    """
    logger = get_logger(logger_name)
    extra = {"transaction_operation": operation}

    if details:
        from knowns.constants import SENSITIVE_KEYS
        extra["transaction_details"] = sanitize_data(details, SENSITIVE_KEYS)
        logger.debug(f"Transaction: {operation} {extra['transaction_details']}", extra=extra)
    else:
        logger.debug(f"Transaction: {operation}", extra=extra)


def log_application_event(
    event: str,
    level: str = "info",
    details: Optional[Dict[str, Any]] = None,
    logger_name: str = "knowns.app",
) -> None:
    """
    Log application-level events at appropriate levels.

    Args:
        event: Description of the event
        level: Log level (debug, info, warning, error)
        details: Additional event details
        logger_name: Logger name to use
    """
    logger = get_logger(logger_name)
    extra = {"app_event": event}

    if details:
        extra["app_details"] = details

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(f"Application: {event}", extra=extra)
