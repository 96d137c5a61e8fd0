"""
Import error taxonomy.

Every failure that crosses from the import core into the CLI is a
SourceImportError carrying a message and an optional hint; the subclass
says what kind of failure it was.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ImportErrorCode(str, Enum):
    SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    NAME_CONFLICT = "NAME_CONFLICT"
    CONFLICT = "CONFLICT"
    INVALID_SOURCE = "INVALID_SOURCE"
    EMPTY_IMPORT = "EMPTY_IMPORT"
    INVALID_CONFIG = "INVALID_CONFIG"


class SourceImportError(Exception):
    """Base exception for import and sync failures."""

    code: ImportErrorCode = ImportErrorCode.INVALID_SOURCE

    def __init__(self, message: str = "", hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        payload: Dict[str, Any] = {"message": self.message, "code": self.code.value}
        if self.hint:
            payload["hint"] = self.hint
        return payload


class SourceNotFoundError(SourceImportError):
    """The source descriptor (or a registered import name) cannot be resolved."""

    code = ImportErrorCode.SOURCE_NOT_FOUND


class NetworkError(SourceImportError):
    """A git or npm fetch failed. Not retried."""

    code = ImportErrorCode.NETWORK_ERROR


class DuplicateNameError(SourceImportError):
    """An import with this name is already registered."""

    code = ImportErrorCode.NAME_CONFLICT


class ConflictError(SourceImportError):
    """The materialization target exists in an incompatible form."""

    code = ImportErrorCode.CONFLICT


class InvalidSourceError(SourceImportError):
    """The source type cannot be determined or is not supported, or the name is invalid."""

    code = ImportErrorCode.INVALID_SOURCE


class EmptyImportError(SourceImportError):
    """The include/exclude patterns selected nothing from the source."""

    code = ImportErrorCode.EMPTY_IMPORT


class ProjectConfigError(SourceImportError):
    """.knowns/config.json exists but cannot be parsed, so it is never rewritten."""

    code = ImportErrorCode.INVALID_CONFIG
