"""
Import data model.

Dataclasses for import configuration, per-import metadata (the manifest)
and the results reported back to the CLI. Persisted JSON uses camelCase
keys; Python attributes are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from knowns.constants import SKIP_LOCAL_MODIFICATIONS


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ImportType(str, Enum):
    GIT = "git"
    NPM = "npm"
    LOCAL = "local"


class ChangeAction(str, Enum):
    ADD = "add"
    UPDATE = "update"
    SKIP = "skip"


@dataclass
class ImportConfig:
    """A registered import, stored in .knowns/config.json."""

    name: str
    source: str
    type: ImportType
    ref: Optional[str] = None
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    link: bool = False
    created_at: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "source": self.source,
            "type": self.type.value,
        }
        if self.ref:
            data["ref"] = self.ref
        if self.include:
            data["include"] = list(self.include)
        if self.exclude:
            data["exclude"] = list(self.exclude)
        if self.link:
            data["link"] = True
        data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportConfig":
        return cls(
            name=data["name"],
            source=data.get("source", "unknown"),
            type=ImportType(data.get("type", ImportType.LOCAL.value)),
            ref=data.get("ref") or data.get("version"),
            include=list(data.get("include") or []),
            exclude=list(data.get("exclude") or []),
            link=bool(data.get("link", False)),
            created_at=data.get("createdAt") or utc_now(),
        )


@dataclass
class FileRecord:
    """Manifest entry: content hash of a materialized file as of the last sync."""

    path: str
    content_hash: str
    size: int
    updated_at: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "contentHash": self.content_hash,
            "size": self.size,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        return cls(
            path=data["path"],
            content_hash=data["contentHash"],
            size=int(data.get("size", 0)),
            updated_at=data.get("updatedAt", ""),
        )


@dataclass
class ImportMetadata:
    """Per-import manifest, stored beside the materialized content."""

    import_name: str
    source: str
    type: ImportType
    last_sync: str
    imported_at: str
    files: List[FileRecord] = field(default_factory=list)
    ref: Optional[str] = None
    commit: Optional[str] = None
    version: Optional[str] = None

    def records_by_path(self) -> Dict[str, FileRecord]:
        return {record.path: record for record in self.files}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "importName": self.import_name,
            "source": self.source,
            "type": self.type.value,
            "importedAt": self.imported_at,
            "lastSync": self.last_sync,
        }
        for key in ("ref", "commit", "version"):
            value = getattr(self, key)
            if value:
                data[key] = value
        data["files"] = [record.to_dict() for record in self.files]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportMetadata":
        return cls(
            import_name=data.get("importName") or data.get("name", ""),
            source=data.get("source", "unknown"),
            type=ImportType(data.get("type", ImportType.LOCAL.value)),
            last_sync=data.get("lastSync", ""),
            imported_at=data.get("importedAt") or data.get("lastSync", ""),
            files=[
                FileRecord.from_dict(item)
                for item in data.get("files", [])
                if isinstance(item, dict)
            ],
            ref=data.get("ref"),
            commit=data.get("commit"),
            version=data.get("version"),
        )


@dataclass
class FileChange:
    path: str
    action: ChangeAction
    skip_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path, "action": self.action.value}
        if self.skip_reason:
            data["skipReason"] = self.skip_reason
        return data


@dataclass
class ImportResult:
    success: bool
    name: str
    source: str
    type: ImportType
    changes: List[FileChange] = field(default_factory=list)
    error: Optional[str] = None
    hint: Optional[str] = None
    metadata: Optional[ImportMetadata] = None

    def count(self, action: ChangeAction) -> int:
        return sum(1 for change in self.changes if change.action == action)

    @property
    def locally_modified(self) -> List[FileChange]:
        return [c for c in self.changes if c.skip_reason == SKIP_LOCAL_MODIFICATIONS]

    @property
    def has_writes(self) -> bool:
        return any(c.action != ChangeAction.SKIP for c in self.changes)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "name": self.name,
            "source": self.source,
            "type": self.type.value,
            "changes": [change.to_dict() for change in self.changes],
        }
        if self.error:
            data["error"] = self.error
        if self.hint:
            data["hint"] = self.hint
        if self.metadata:
            data["metadata"] = self.metadata.to_dict()
        return data


@dataclass
class ImportOptions:
    name: Optional[str] = None
    type: Optional[ImportType] = None
    ref: Optional[str] = None
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    link: bool = False
    force: bool = False
    dry_run: bool = False


@dataclass
class SyncOptions:
    force: bool = False
    dry_run: bool = False


@dataclass
class ImportEntry:
    """An import as listed to the CLI: its config and, if synced, its metadata."""

    config: ImportConfig
    metadata: Optional[ImportMetadata] = None
