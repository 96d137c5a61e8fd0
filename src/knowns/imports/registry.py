"""
Import registry.

CRUD over import configs (.knowns/config.json) and per-import metadata.
Other keys in config.json belong to the rest of the project and are kept
untouched when the imports list is rewritten.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from knowns.imports.exceptions import (
    DuplicateNameError,
    ProjectConfigError,
    SourceNotFoundError,
)
from knowns.imports.models import ImportConfig, ImportEntry, ImportMetadata
from knowns.logging import get_logger
from knowns.utils.project import (
    get_config_path,
    get_imports_dir,
    get_linked_metadata_path,
    get_metadata_path,
)

logger = get_logger("knowns.imports.registry")


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


class ImportRegistry:
    """Registered imports of one project"""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)
        self.config_path = get_config_path(self.project_root)

    def _read_config(self, strict: bool = False) -> Dict[str, Any]:
        """
        Load config.json.

        Reads degrade to an empty config when the file is unreadable; with
        strict set (before any rewrite) that raises instead, so the other
        project keys are never overwritten.

        Raises:
            ProjectConfigError: strict is set and the file cannot be parsed
        """
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            if strict:
                raise ProjectConfigError(
                    f"Cannot update {self.config_path}: {e}",
                    hint="Fix or remove the invalid JSON in .knowns/config.json and retry",
                ) from e
            logger.warning(f"Could not read {self.config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            if strict:
                raise ProjectConfigError(
                    f"Cannot update {self.config_path}: expected a JSON object",
                    hint="Fix .knowns/config.json and retry",
                )
            return {}
        return data

    def check_writable(self) -> None:
        """Raise ProjectConfigError now rather than after files were written."""
        self._read_config(strict=True)

    def _write_config(self, data: Dict[str, Any]) -> None:
        _write_json(self.config_path, data)

    def list_imports(self) -> List[ImportConfig]:
        configs = []
        for item in self._read_config().get("imports") or []:
            try:
                configs.append(ImportConfig.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed import entry {item!r}: {e}")
        return configs

    def get_import(self, name: str) -> Optional[ImportConfig]:
        for config in self.list_imports():
            if config.name == name:
                return config
        return None

    def require_import(self, name: str) -> ImportConfig:
        config = self.get_import(name)
        if config is None:
            raise SourceNotFoundError(
                f"Import not found: {name}", hint="Run 'knowns import list' to see imports"
            )
        return config

    def exists(self, name: str) -> bool:
        return self.get_import(name) is not None

    def add_import(self, config: ImportConfig, force: bool = False) -> ImportConfig:
        """
        Register an import.

        Raises:
            DuplicateNameError: The name is taken and force is not set
        """
        existing = self.get_import(config.name)
        if existing and not force:
            raise DuplicateNameError(
                f'Import "{config.name}" already exists',
                hint="Use --force to overwrite or --name to specify a different name",
            )
        if existing:
            config.created_at = existing.created_at
        self.save_import(config)
        return config

    def save_import(self, config: ImportConfig) -> None:
        """Insert or replace an import config, keeping the list order"""
        data = self._read_config(strict=True)
        imports = [
            item for item in data.get("imports") or []
            if isinstance(item, dict)
        ]
        for i, item in enumerate(imports):
            if item.get("name") == config.name:
                imports[i] = config.to_dict()
                break
        else:
            imports.append(config.to_dict())

        data["imports"] = imports
        self._write_config(data)
        logger.debug(f"Saved import config {config.name}")

    def remove_import(self, name: str) -> bool:
        data = self._read_config(strict=True)
        imports = data.get("imports") or []
        remaining = [
            item for item in imports
            if not (isinstance(item, dict) and item.get("name") == name)
        ]
        if len(remaining) == len(imports):
            return False

        data["imports"] = remaining
        self._write_config(data)
        logger.debug(f"Removed import config {name}")
        return True

    def metadata_path(self, config: ImportConfig) -> Path:
        if config.link:
            return get_linked_metadata_path(self.project_root, config.name)
        return get_metadata_path(self.project_root, config.name)

    def read_metadata(self, config: ImportConfig) -> Optional[ImportMetadata]:
        return self._load_metadata(self.metadata_path(config))

    def _load_metadata(self, path: Path) -> Optional[ImportMetadata]:
        if not path.is_file():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return ImportMetadata.from_dict(json.load(f))
        except (json.JSONDecodeError, IOError, KeyError, ValueError) as e:
            logger.warning(f"Ignoring unreadable metadata {path}: {e}")
            return None

    def write_metadata(self, config: ImportConfig, metadata: ImportMetadata) -> None:
        _write_json(self.metadata_path(config), metadata.to_dict())

        # A mode switch leaves the other layout's file behind
        stale = (
            get_metadata_path(self.project_root, config.name)
            if config.link
            else get_linked_metadata_path(self.project_root, config.name)
        )
        if stale.is_file() and not stale.parent.is_symlink():
            stale.unlink()

    def delete_metadata(self, name: str) -> None:
        for path in (
            get_linked_metadata_path(self.project_root, name),
            get_metadata_path(self.project_root, name),
        ):
            if path.is_file() and not path.parent.is_symlink():
                path.unlink()

    def get_imports_with_metadata(self) -> List[ImportEntry]:
        """
        Registered imports with their metadata, followed by folders under
        .knowns/imports/ that carry metadata but no config entry.
        """
        entries = [
            ImportEntry(config=config, metadata=self.read_metadata(config))
            for config in self.list_imports()
        ]
        known = {entry.config.name for entry in entries}

        imports_dir = get_imports_dir(self.project_root)
        if imports_dir.is_dir():
            for child in sorted(imports_dir.iterdir()):
                if child.name.startswith(".") or child.name in known or not child.is_dir():
                    continue
                linked = child.is_symlink()
                metadata = self._load_metadata(
                    get_linked_metadata_path(self.project_root, child.name)
                    if linked
                    else get_metadata_path(self.project_root, child.name)
                )
                if metadata is None:
                    continue
                orphan = ImportConfig(
                    name=child.name,
                    source=metadata.source,
                    type=metadata.type,
                    link=linked,
                    created_at=metadata.imported_at,
                )
                entries.append(ImportEntry(config=orphan, metadata=metadata))

        return entries
