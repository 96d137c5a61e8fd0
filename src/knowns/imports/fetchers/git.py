"""
Git source fetcher.

Shallow, single-branch clones through GitPython. The ref is a branch or
tag; without one the remote's default branch is used.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from git import GitCommandError, Repo
from git.exc import GitCommandNotFound

from knowns.imports.exceptions import NetworkError, SourceNotFoundError
from knowns.imports.fetchers.base import StagedFetcher, StagedSource
from knowns.imports.fetchers.credentials import authenticated_url, get_host
from knowns.imports.models import ImportType
from knowns.logging import get_logger
from knowns.logging.utils import sanitize_string
from knowns.utils.config_store import ConfigStore

logger = get_logger("knowns.imports.fetchers.git")

NOT_FOUND_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"repository not found",
        r"repository '[^']*' (?:not found|does not exist)",
        r"does not appear to be a git repository",
        r"remote branch \S+ not found",
        r"could(?:n't| not) find remote (?:ref|branch)",
    )
)

AUTH_PHRASES = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "terminal prompts disabled",
)


class GitFetcher(StagedFetcher):
    type = ImportType.GIT

    def __init__(self, config_store: Optional[ConfigStore] = None):
        self._config_store = config_store

    def _fetch_into(self, source: str, ref: Optional[str], staging_dir: Path) -> StagedSource:
        clone_url = authenticated_url(source, self._config_store)
        options = {"depth": 1, "single_branch": True}
        if ref:
            options["branch"] = ref

        logger.info(f"Cloning {source}" + (f" at {ref}" if ref else ""))
        try:
            repo = Repo.clone_from(
                clone_url,
                str(staging_dir),
                env={"GIT_TERMINAL_PROMPT": "0"},
                **options,
            )
        except GitCommandNotFound as e:
            raise NetworkError(
                "Git is not installed", hint="Install git to import from git repositories"
            ) from e
        except GitCommandError as e:
            raise self._translate_error(e, source, ref) from e

        try:
            try:
                commit = repo.head.commit.hexsha
            except ValueError as e:
                # HEAD points at a branch with no commits
                raise SourceNotFoundError(
                    f"Repository is empty: {source}",
                    hint="Push at least one commit to the repository and try again",
                ) from e
            try:
                resolved_ref = ref or repo.active_branch.name
            except TypeError:
                # Detached HEAD: a tag was cloned
                resolved_ref = ref
        finally:
            repo.close()

        logger.debug(f"Cloned {source} at {commit}")
        return StagedSource(root=staging_dir, ref=resolved_ref, commit=commit)

    def _translate_error(
        self, exc: GitCommandError, source: str, ref: Optional[str]
    ) -> Exception:
        detail = sanitize_string(str(exc.stderr or exc)).strip()
        lowered = detail.lower()
        logger.error(f"git clone failed for {source}: {detail}")

        if any(phrase in lowered for phrase in AUTH_PHRASES):
            host = get_host(source) or "<host>"
            return NetworkError(
                f"Authentication required for {source}",
                hint=f"Run 'knowns import auth {host} --username <user> --token <token>' "
                "or use an SSH URL",
            )

        if any(pattern.search(lowered) for pattern in NOT_FOUND_PATTERNS):
            what = f"Ref '{ref}' in {source}" if ref and "branch" in lowered else source
            return SourceNotFoundError(
                f"Repository not found or not accessible: {what}",
                hint="Check the URL, the ref and your access permissions",
            )

        return NetworkError(f"Git operation failed: {detail}")
