"""
Git credentials for private HTTPS sources.
"""

from typing import Optional
from urllib.parse import urlparse

from knowns.logging import get_logger
from knowns.utils.config_store import ConfigStore

logger = get_logger("knowns.imports.fetchers.credentials")


def get_host(repo_url: str) -> Optional[str]:
    """Host of an https/http URL, None for ssh or scp-style sources"""
    parsed = urlparse(repo_url)
    if parsed.scheme in ("http", "https") and parsed.hostname:
        return parsed.hostname.lower()
    return None


def build_secure_url(repo_url: str, username: str, token: str) -> str:
    """Build secure HTTPS URL with credentials"""
    if repo_url.startswith("https://") and "@" not in repo_url.split("/")[2]:
        return repo_url.replace("https://", f"https://{username}:{token}@", 1)
    return repo_url


def authenticated_url(repo_url: str, config_store: Optional[ConfigStore] = None) -> str:
    """Inject stored credentials for the URL's host, if any were configured."""
    host = get_host(repo_url)
    if not host:
        return repo_url

    credentials = (config_store or ConfigStore()).get_git_credentials(host)
    if not credentials:
        return repo_url

    logger.debug(f"Using stored git credentials for {host}")
    return build_secure_url(repo_url, credentials["username"], credentials["token"])
