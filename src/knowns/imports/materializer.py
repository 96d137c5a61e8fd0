"""
Import materializer.

Writes classified changes into .knowns/imports/<name>/ (copy mode) or
points that folder at a local source (link mode). Copy mode only touches
add/update files; skipped files are left exactly as they are on disk.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from knowns.constants import SKIP_UNCHANGED
from knowns.imports.detector import PlannedChange
from knowns.imports.exceptions import ConflictError
from knowns.imports.models import ChangeAction, FileChange, FileRecord, ImportMetadata, utc_now
from knowns.logging import get_logger
from knowns.utils.project import get_import_dir, get_linked_metadata_path

logger = get_logger("knowns.imports.materializer")


def build_records(
    planned: Sequence[PlannedChange],
    previous: Optional[ImportMetadata],
    destination: Path,
) -> List[FileRecord]:
    """
    Manifest after applying planned changes.

    Written files get a fresh record. Files skipped for local edits keep
    their old record so the edit stays detectable. Files no longer in the
    source keep their record while the copy is still on disk.
    """
    now = utc_now()
    records = {}
    for change in planned:
        candidate = change.candidate
        keep_previous = change.action == ChangeAction.SKIP and change.previous is not None and (
            change.skip_reason != SKIP_UNCHANGED
            or change.previous.content_hash == candidate.content_hash
        )
        if keep_previous:
            records[change.path] = change.previous
        else:
            records[change.path] = FileRecord(
                path=change.path,
                content_hash=candidate.content_hash,
                size=candidate.size,
                updated_at=now,
            )

    if previous:
        for record in previous.files:
            if record.path not in records and (destination / record.path).is_file():
                records[record.path] = record

    return [records[path] for path in sorted(records)]


class ImportMaterializer:
    """Applies change sets under one project's imports folder"""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)

    def destination(self, name: str) -> Path:
        return get_import_dir(self.project_root, name)

    def apply(
        self,
        name: str,
        planned: Sequence[PlannedChange],
        previous: Optional[ImportMetadata] = None,
        force: bool = False,
    ) -> List[FileRecord]:
        """
        Copy add/update files into the import folder.

        Raises:
            ConflictError: The folder is a symlink left by a linked import
        """
        destination = self.destination(name)
        if destination.is_symlink():
            if not force:
                raise ConflictError(
                    f"{destination} is a link to another directory",
                    hint="Use --force to replace it with a copy",
                )
            destination.unlink()

        written = 0
        for change in planned:
            if not change.writes:
                continue
            target = destination / change.path
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.is_symlink():
                target.unlink()
            shutil.copyfile(change.candidate.source_path, target)
            written += 1

        logger.debug(f"Materialized {written} file(s) into {destination}")
        return build_records(planned, previous, destination)

    def link(
        self, name: str, source_root: Path, force: bool = False, dry_run: bool = False
    ) -> Optional[FileChange]:
        """
        Point the import folder at source_root.

        Returns:
            An add change when the link is (or would be) created, None when it
            already points at source_root

        Raises:
            ConflictError: A real directory is in the way and force is not set
        """
        destination = self.destination(name)
        source_root = Path(source_root).resolve()

        if destination.is_symlink():
            if destination.resolve() == source_root:
                return None
        elif destination.exists() and not force:
            raise ConflictError(
                f"{destination} already exists and is not a link",
                hint="Use --force to replace it with a link",
            )

        if dry_run:
            return FileChange(path=".", action=ChangeAction.ADD)

        if destination.is_symlink() or destination.is_file():
            destination.unlink()
        elif destination.exists():
            shutil.rmtree(destination)

        destination.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(source_root, destination, target_is_directory=True)
        logger.info(f"Linked {destination} -> {source_root}")
        return FileChange(path=".", action=ChangeAction.ADD)

    def remove(self, name: str) -> bool:
        """
        Delete materialized content. Links are unlinked, never followed.

        Returns:
            True if anything was removed
        """
        destination = self.destination(name)
        removed = False

        if destination.is_symlink():
            destination.unlink()
            removed = True
        elif destination.is_dir():
            shutil.rmtree(destination)
            removed = True

        linked_metadata = get_linked_metadata_path(self.project_root, name)
        if linked_metadata.is_file():
            linked_metadata.unlink()
            removed = True

        if removed:
            logger.info(f"Removed materialized content for {name}")
        return removed
