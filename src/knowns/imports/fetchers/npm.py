"""
npm source fetcher.

Resolves a package through the registry's metadata document, downloads the
tarball with httpx and unpacks it with tarfile. The ref (or a version in
the descriptor, "pkg@1.2.3") is an exact version or a dist-tag; semver
ranges are not resolved.
"""

from __future__ import annotations

import tarfile
import time
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from knowns.constants import DEFAULT_NPM_TAG, NPM_REQUEST_TIMEOUT
from knowns.imports.exceptions import NetworkError, SourceNotFoundError
from knowns.imports.fetchers.base import StagedFetcher, StagedSource
from knowns.imports.models import ImportType
from knowns.logging import get_logger, log_api_call
from knowns.utils.config_store import ConfigStore

logger = get_logger("knowns.imports.fetchers.npm")


def split_package_spec(spec: str) -> Tuple[str, Optional[str]]:
    """
    Split "name@version" into its parts.

    Examples:
        "@org/pkg@1.0.0" -> ("@org/pkg", "1.0.0")
        "pkg"            -> ("pkg", None)
    """
    at = spec.rfind("@")
    if at > 0:
        return spec[:at], spec[at + 1:] or None
    return spec, None


def resolve_version(packument: Dict[str, Any], wanted: str) -> Optional[str]:
    """Resolve a dist-tag or exact version against the registry document."""
    versions = packument.get("versions") or {}
    if wanted in versions:
        return wanted
    tagged = (packument.get("dist-tags") or {}).get(wanted)
    if tagged in versions:
        return tagged
    return None


def extract_package(archive: Path, destination: Path) -> int:
    """
    Unpack an npm tarball, dropping its top-level folder ("package/").

    Links, devices and members escaping the destination are skipped.

    Returns:
        Number of files written
    """
    destination.mkdir(parents=True, exist_ok=True)
    written = 0
    with tarfile.open(archive, "r:gz") as tar:
        for member in tar.getmembers():
            parts = PurePosixPath(member.name).parts[1:]
            if not parts or ".." in parts or PurePosixPath(member.name).is_absolute():
                continue
            target = destination.joinpath(*parts)
            if member.isdir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            if not member.isfile():
                logger.debug(f"Skipping non-file tar member {member.name}")
                continue

            extracted = tar.extractfile(member)
            if extracted is None:
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with extracted, open(target, "wb") as out:
                out.write(extracted.read())
            written += 1
    return written


class NpmFetcher(StagedFetcher):
    type = ImportType.NPM

    def __init__(
        self,
        registry: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        config_store: Optional[ConfigStore] = None,
    ):
        self._registry = registry
        self._transport = transport
        self._config_store = config_store

    @property
    def registry(self) -> str:
        if not self._registry:
            self._registry = (self._config_store or ConfigStore()).get_npm_registry()
        return self._registry.rstrip("/")

    def _client(self) -> httpx.Client:
        return httpx.Client(
            transport=self._transport,
            timeout=NPM_REQUEST_TIMEOUT,
            follow_redirects=True,
        )

    def _fetch_into(self, source: str, ref: Optional[str], staging_dir: Path) -> StagedSource:
        name, spec_version = split_package_spec(source)
        wanted = ref or spec_version or DEFAULT_NPM_TAG

        with self._client() as client:
            packument = self._get_packument(client, name)
            version = resolve_version(packument, wanted)
            if version is None:
                raise SourceNotFoundError(
                    f"Version '{wanted}' of {name} not found",
                    hint="Use an exact version or a dist-tag such as 'latest'",
                )

            tarball_url = (
                (packument["versions"][version].get("dist") or {}).get("tarball")
            )
            if not tarball_url:
                raise SourceNotFoundError(f"No tarball published for {name}@{version}")

            archive = staging_dir / "package.tgz"
            self._download(client, tarball_url, archive)

        package_dir = staging_dir / "package"
        try:
            count = extract_package(archive, package_dir)
        except (tarfile.TarError, OSError) as e:
            raise NetworkError(f"Failed to unpack {name}@{version}: {e}") from e
        finally:
            archive.unlink(missing_ok=True)

        logger.info(f"Fetched {name}@{version} ({count} files)")
        return StagedSource(root=package_dir, ref=wanted, version=version)

    def _request(self, client: httpx.Client, url: str) -> httpx.Response:
        started = time.monotonic()
        try:
            response = client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            log_api_call("GET", url, duration=time.monotonic() - started, error=str(e))
            raise NetworkError(
                f"npm registry request failed: {e}",
                hint=f"Check your connection to {self.registry}",
            ) from e
        log_api_call("GET", url, response.status_code, time.monotonic() - started)
        return response

    def _get_packument(self, client: httpx.Client, name: str) -> Dict[str, Any]:
        url = f"{self.registry}/{quote(name, safe='@')}"
        response = self._request(client, url)

        if response.status_code == 404:
            raise SourceNotFoundError(
                f"Package not found: {name}",
                hint="Check the package name and registry",
            )
        if response.is_error:
            raise NetworkError(
                f"npm registry returned {response.status_code} for {name}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid registry response for {name}") from e

    def _download(self, client: httpx.Client, url: str, archive: Path) -> None:
        started = time.monotonic()
        try:
            with client.stream("GET", url) as response:
                log_api_call("GET", url, response.status_code, time.monotonic() - started)
                if response.status_code == 404:
                    raise SourceNotFoundError(f"Package tarball not found: {url}")
                if response.is_error:
                    raise NetworkError(f"Tarball download returned {response.status_code}")
                with open(archive, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            log_api_call("GET", url, duration=time.monotonic() - started, error=str(e))
            raise NetworkError(f"Tarball download failed: {e}") from e
