"""
Base source fetcher.

A fetcher turns a source descriptor into a file tree. Remote sources are
staged in a temporary directory that is removed when the with block
exits, whether it finished or raised.
"""

from __future__ import annotations

import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import ContextManager, Iterator, List, Optional

from knowns.constants import DOCS_DIR, KNOWNS_DIR, STAGING_PREFIX, TEMPLATES_DIR
from knowns.imports.models import ImportType
from knowns.logging import get_logger

logger = get_logger("knowns.imports.fetchers.base")


@dataclass
class StagedSource:
    """A fetched source tree and what is known about the revision fetched."""

    root: Path
    ref: Optional[str] = None
    commit: Optional[str] = None
    version: Optional[str] = None

    @property
    def content_root(self) -> Path:
        """The .knowns/ folder of a Knowns project, otherwise the whole tree."""
        if self.root.name == KNOWNS_DIR:
            return self.root
        knowns_dir = self.root / KNOWNS_DIR
        if knowns_dir.is_dir():
            return knowns_dir
        return self.root

    @property
    def is_knowns_project(self) -> bool:
        return self.content_root.name == KNOWNS_DIR

    def default_include(self) -> List[str]:
        if self.is_knowns_project:
            return [f"{TEMPLATES_DIR}/**", f"{DOCS_DIR}/**"]
        return ["**"]


class SourceFetcher(ABC):
    """Resolves one kind of source descriptor into a file tree."""

    type: ImportType

    @abstractmethod
    def fetch(
        self,
        source: str,
        ref: Optional[str] = None,
        project_root: Optional[Path] = None,
    ) -> ContextManager[StagedSource]:
        """
        Make the source tree available for the duration of a with block.

        Raises:
            SourceNotFoundError: The descriptor cannot be resolved
            NetworkError: The fetch itself failed
        """


class StagedFetcher(SourceFetcher):
    """A fetcher that downloads into a temporary staging directory."""

    @contextmanager
    def fetch(
        self,
        source: str,
        ref: Optional[str] = None,
        project_root: Optional[Path] = None,
    ) -> Iterator[StagedSource]:
        with tempfile.TemporaryDirectory(prefix=STAGING_PREFIX) as tmpdir:
            staging_dir = Path(tmpdir)
            logger.debug(f"Staging {self.type.value} source {source} in {staging_dir}")
            yield self._fetch_into(source, ref, staging_dir)
        logger.debug(f"Released staging directory {staging_dir}")

    @abstractmethod
    def _fetch_into(self, source: str, ref: Optional[str], staging_dir: Path) -> StagedSource:
        """Populate staging_dir with the source tree."""
