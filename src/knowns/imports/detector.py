"""
Change detection.

Classifies each matched source file against the previous manifest and the
copy currently on disk. Local edits always win over incoming updates
unless the caller forces the sync.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from knowns.constants import SKIP_LOCAL_MODIFICATIONS, SKIP_UNCHANGED
from knowns.imports.hashing import hash_file
from knowns.imports.models import ChangeAction, FileChange, FileRecord, ImportMetadata
from knowns.logging import get_logger

logger = get_logger("knowns.imports.detector")


@dataclass
class Candidate:
    """A matched file in the staged source."""

    path: str
    source_path: Path
    content_hash: str
    size: int

    @classmethod
    def from_staged(cls, content_root: Path, path: str) -> "Candidate":
        source_path = content_root / path
        return cls(
            path=path,
            source_path=source_path,
            content_hash=hash_file(source_path),
            size=source_path.stat().st_size,
        )


@dataclass
class PlannedChange:
    """A classified candidate, ready for the materializer."""

    candidate: Candidate
    action: ChangeAction
    skip_reason: Optional[str] = None
    previous: Optional[FileRecord] = None

    @property
    def path(self) -> str:
        return self.candidate.path

    @property
    def writes(self) -> bool:
        return self.action in (ChangeAction.ADD, ChangeAction.UPDATE)

    def to_file_change(self) -> FileChange:
        return FileChange(path=self.path, action=self.action, skip_reason=self.skip_reason)


def collect_candidates(content_root: Path, paths: Sequence[str]) -> List[Candidate]:
    return [Candidate.from_staged(content_root, path) for path in paths]


def classify(
    candidate: Candidate,
    record: Optional[FileRecord],
    disk_hash: Optional[str],
    force: bool = False,
) -> PlannedChange:
    """
    Classify one candidate.

    Args:
        candidate: Fetched file with its hash
        record: Manifest entry from the last successful sync, if any
        disk_hash: Hash of the materialized copy, None if it is missing
        force: Overwrite local modifications
    """
    if record is None or disk_hash is None:
        # Never imported, or the materialized copy was deleted
        return PlannedChange(candidate, ChangeAction.ADD, previous=record)

    if disk_hash != record.content_hash and not force:
        return PlannedChange(
            candidate, ChangeAction.SKIP, SKIP_LOCAL_MODIFICATIONS, previous=record
        )

    if candidate.content_hash == disk_hash:
        return PlannedChange(candidate, ChangeAction.SKIP, SKIP_UNCHANGED, previous=record)

    return PlannedChange(candidate, ChangeAction.UPDATE, previous=record)


def detect_changes(
    candidates: Sequence[Candidate],
    metadata: Optional[ImportMetadata],
    destination: Path,
    force: bool = False,
) -> List[PlannedChange]:
    """
    Classify every candidate against the manifest and the destination folder.

    Returns:
        One PlannedChange per candidate, in candidate order
    """
    records: Dict[str, FileRecord] = metadata.records_by_path() if metadata else {}
    planned = [
        classify(
            candidate,
            records.get(candidate.path),
            hash_file(destination / candidate.path),
            force=force,
        )
        for candidate in candidates
    ]

    summary = {action.value: 0 for action in ChangeAction}
    for change in planned:
        summary[change.action.value] += 1
    logger.debug(f"Detected changes under {destination}: {summary}")
    return planned
