"""
Source type detection and import naming.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlparse

from knowns.constants import DEFAULT_IMPORT_NAME, KNOWNS_DIR, MAX_IMPORT_NAME_LENGTH
from knowns.imports.exceptions import InvalidSourceError
from knowns.imports.fetchers.local import resolve_local_path
from knowns.imports.fetchers.npm import split_package_spec
from knowns.imports.models import ImportType

GIT_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")
LOCAL_PREFIXES = ("./", "../", "/", "~", ".\\", "..\\")
NPM_NAME = re.compile(r"^[a-z][a-z0-9._-]*(@[^/@]+)?$")
IMPORT_NAME = re.compile(r"^[a-z][a-z0-9-]*$")


def _is_git_source(source: str) -> bool:
    if source.startswith("git@") or source.startswith("git://"):
        return True
    if source.endswith(".git") or source.endswith(".git/"):
        return True
    host = urlparse(source).hostname or ""
    return host.lower() in GIT_HOSTS


def _is_npm_source(source: str) -> bool:
    if source.startswith("@"):
        return "/" in source
    return bool(NPM_NAME.match(source))


def detect_import_type(source: str, project_root: Optional[Path] = None) -> ImportType:
    """
    Infer the import type from a source descriptor.

    Git URLs are recognized first, then explicit paths, then names that
    exist on disk, then npm package names.

    Raises:
        InvalidSourceError: The descriptor matches no type
    """
    source = source.strip()
    if source.startswith("knowns://"):
        raise InvalidSourceError(
            f"Registry sources are not supported: {source}",
            hint="Use a git URL, an npm package or a local path",
        )

    if _is_git_source(source):
        return ImportType.GIT

    if source.startswith(LOCAL_PREFIXES) or re.match(r"^[A-Za-z]:[\\/]", source):
        return ImportType.LOCAL

    if source and resolve_local_path(source, project_root).exists():
        return ImportType.LOCAL

    if _is_npm_source(source):
        return ImportType.NPM

    raise InvalidSourceError(
        f"Cannot determine import type for: {source}",
        hint="Specify --type git|npm|local",
    )


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9-]+", "-", value.lower())
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    slug = slug.lstrip("0123456789-")
    return slug[:MAX_IMPORT_NAME_LENGTH].rstrip("-") or DEFAULT_IMPORT_NAME


def generate_import_name(source: str, import_type: ImportType) -> str:
    """Derive a default import name from the source."""
    source = source.strip().rstrip("/\\")

    if import_type == ImportType.GIT:
        # scp-style "git@host:org/repo.git" has no URL path
        path = urlparse(source).path if "://" in source else source.split(":")[-1]
        base = PurePosixPath(path).name
        if base.endswith(".git"):
            base = base[: -len(".git")]
        return _slugify(base)

    if import_type == ImportType.NPM:
        name, _ = split_package_spec(source)
        return _slugify(name.split("/")[-1])

    parts = [p for p in re.split(r"[\\/]", source) if p and p != "."]
    if parts and parts[-1] == KNOWNS_DIR and len(parts) > 1:
        parts = parts[:-1]
    return _slugify(parts[-1] if parts else "")


def validate_import_name(name: str) -> str:
    """
    Raises:
        InvalidSourceError: The name is not kebab-case or too long
    """
    if not name or not IMPORT_NAME.match(name):
        raise InvalidSourceError(
            f"Invalid import name: {name!r}",
            hint="Use lowercase letters, digits and dashes, starting with a letter",
        )
    if len(name) > MAX_IMPORT_NAME_LENGTH:
        raise InvalidSourceError(
            f"Import name is too long: {name}",
            hint=f"Use at most {MAX_IMPORT_NAME_LENGTH} characters",
        )
    return name
