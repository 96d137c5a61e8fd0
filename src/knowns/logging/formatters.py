"""
Custom formatters for Knowns logging.

This module provides specialized formatters for HTTP call records
and general application logs.
"""

import logging
from datetime import datetime
from .utils import sanitize_data
from knowns.constants import SENSITIVE_KEYS


class KnownsFormatter(logging.Formatter):
    """
    Default formatter for Knowns log entries.

    Provides structured formatting with optional components and
    automatic sanitization of sensitive data.
    """

    def __init__(
        self,
        include_timestamps: bool = True,
        include_thread_info: bool = False,
        sanitize_sensitive: bool = True,
        sensitive_keys: tuple = None,
    ):
        self.include_timestamps = include_timestamps
        self.include_thread_info = include_thread_info
        self.sanitize_sensitive = sanitize_sensitive
        self.sensitive_keys = sensitive_keys or SENSITIVE_KEYS
        fmt_parts = []
        if include_timestamps:
            fmt_parts.append("%(asctime)s")
        fmt_parts.extend(["%(levelname)s", "[%(name)s]", "%(message)s"])
        if include_thread_info:
            fmt_parts.insert(-1, "[Thread:%(thread)d]")
        fmt_string = " ".join(fmt_parts)
        super().__init__(fmt=fmt_string, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record with optional sanitization.

        Args:
            record: The log record to format
        Returns:
            str: Formatted log message
        """
        if self.sanitize_sensitive:
            if isinstance(record.msg, (dict, list, str)):
                record.msg = sanitize_data(record.msg, self.sensitive_keys)
            if isinstance(record.args, dict):
                # logging unwraps a single mapping argument
                record.args = sanitize_data(record.args, self.sensitive_keys)
            elif isinstance(record.args, (tuple, list)):
                record.args = tuple(
                    sanitize_data(arg, self.sensitive_keys)
                    if isinstance(arg, (dict, list, str))
                    else arg
                    for arg in record.args
                )

        return super().format(record)


class APICallFormatter(logging.Formatter):
    """
    Formatter for HTTP call logging.

    Example:
        2026-02-02 17:27:34 DEBUG [knowns.api] GET https://registry.npmjs.org/x -> 200 (120.0ms)
    """

    def __init__(self, sanitize_sensitive: bool = True, sensitive_keys: tuple = None):
        self.sanitize_sensitive = sanitize_sensitive
        self.sensitive_keys = sensitive_keys or SENSITIVE_KEYS
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        method = getattr(record, "api_method", "UNKNOWN")
        url = getattr(record, "api_url", "")
        status = getattr(record, "api_status", None) or "---"
        duration = round((getattr(record, "api_duration", 0) or 0) * 1000, 2)

        if self.sanitize_sensitive:
            url = sanitize_data(url, self.sensitive_keys)

        lines = [
            f"{timestamp} {record.levelname} [{record.name}] "
            f"{method} {url} -> {status} ({duration}ms)"
        ]

        api_error = getattr(record, "api_error", None)
        if api_error:
            lines.append(f"    Error: {api_error}")

        return "\n".join(lines)
