"""
Local directory fetcher.

Local sources are read in place: the staged root is the source directory
itself, so nothing is copied and nothing needs cleaning up.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from knowns.imports.exceptions import SourceNotFoundError
from knowns.imports.fetchers.base import SourceFetcher, StagedSource
from knowns.imports.models import ImportType
from knowns.logging import get_logger

logger = get_logger("knowns.imports.fetchers.local")


def resolve_local_path(source: str, project_root: Optional[Path] = None) -> Path:
    """Expand ~ and resolve relative paths against the project root."""
    path = Path(source).expanduser()
    if not path.is_absolute():
        path = Path(project_root or Path.cwd()) / path
    return path.resolve()


class LocalFetcher(SourceFetcher):
    type = ImportType.LOCAL

    @contextmanager
    def fetch(
        self,
        source: str,
        ref: Optional[str] = None,
        project_root: Optional[Path] = None,
    ) -> Iterator[StagedSource]:
        path = resolve_local_path(source, project_root)
        if not path.exists():
            raise SourceNotFoundError(
                f"Path not found: {path}", hint="Check the path and try again"
            )
        if not path.is_dir():
            raise SourceNotFoundError(
                f"Not a directory: {path}", hint="Local imports must point at a directory"
            )

        logger.debug(f"Using local source {path}")
        yield StagedSource(root=path, ref=ref)
