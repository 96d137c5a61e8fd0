"""
Source fetchers, one per import type.
"""

from typing import Optional

from knowns.imports.exceptions import InvalidSourceError
from knowns.imports.fetchers.base import SourceFetcher, StagedFetcher, StagedSource
from knowns.imports.fetchers.git import GitFetcher
from knowns.imports.fetchers.local import LocalFetcher
from knowns.imports.fetchers.npm import NpmFetcher
from knowns.imports.models import ImportType
from knowns.utils.config_store import ConfigStore


def get_fetcher(
    import_type: ImportType, config_store: Optional[ConfigStore] = None
) -> SourceFetcher:
    if import_type == ImportType.GIT:
        return GitFetcher(config_store=config_store)
    if import_type == ImportType.NPM:
        return NpmFetcher(config_store=config_store)
    if import_type == ImportType.LOCAL:
        return LocalFetcher()
    raise InvalidSourceError(f"Unsupported import type: {import_type}")


__all__ = [
    "SourceFetcher",
    "StagedFetcher",
    "StagedSource",
    "GitFetcher",
    "NpmFetcher",
    "LocalFetcher",
    "get_fetcher",
]
