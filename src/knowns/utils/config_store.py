import os
import json
import platform
from pathlib import Path
from typing import Any, Dict, Optional

import keyring
from keyring.errors import PasswordDeleteError

from knowns.constants import DEFAULT_NPM_REGISTRY

GIT_SERVICE_PREFIX = "knowns:git"


class ConfigStore:
    """User-level settings and secrets, shared by every project."""

    def __init__(self):
        self.base_dir = self._get_config_dir()
        self.settings_file = self.base_dir / "settings.json"
        self.hosts_file = self.base_dir / "git_hosts.json"
        self._ensure_config_dir()

    def _get_config_dir(self) -> Path:
        """Get platform-specific config directory"""
        system = platform.system()
        if system == "Windows":
            base_dir = os.environ.get("APPDATA", "")
            return Path(base_dir) / "knowns"
        elif system == "Darwin":  # macOS
            return Path.home() / "Library" / "Application Support" / "knowns"
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
            if xdg_config:
                return Path(xdg_config) / "knowns"
            return Path.home() / ".knowns"

    def _ensure_config_dir(self):
        """Ensure config directory exists"""
        os.makedirs(self.base_dir, exist_ok=True)

    def get_settings(self) -> Dict[str, Any]:
        """Get all user settings"""
        if not self.settings_file.exists():
            return {}
        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}

    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.get_settings().get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        """Persist a single user setting"""
        settings = self.get_settings()
        settings[key] = value
        with open(self.settings_file, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)

    def get_npm_registry(self) -> str:
        return self.get_setting("npm_registry") or DEFAULT_NPM_REGISTRY

    def _get_hosts(self) -> Dict[str, str]:
        if not self.hosts_file.exists():
            return {}
        try:
            with open(self.hosts_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}

    def _save_hosts(self, hosts: Dict[str, str]) -> None:
        with open(self.hosts_file, "w", encoding="utf-8") as f:
            json.dump(hosts, f, indent=2)

    def store_git_credentials(self, host: str, username: str, token: str) -> None:
        """
        Stores a git token securely in the system keyring, scoped to a host.
        The username is kept in git_hosts.json; it is not secret.
        """
        keyring.set_password(f"{GIT_SERVICE_PREFIX}:{host}", username, token)
        hosts = self._get_hosts()
        hosts[host] = username
        self._save_hosts(hosts)

    def get_git_credentials(self, host: str) -> Optional[Dict[str, str]]:
        """Return {"username", "token"} for a host, or None when not configured"""
        username = self._get_hosts().get(host)
        if not username:
            return None

        token = keyring.get_password(f"{GIT_SERVICE_PREFIX}:{host}", username)
        if not token:
            return None

        return {"username": username, "token": token}

    def clear_git_credentials(self, host: str) -> bool:
        """Forget the credentials for a host. Returns False if none were stored."""
        hosts = self._get_hosts()
        username = hosts.pop(host, None)
        if username is None:
            return False

        try:
            keyring.delete_password(f"{GIT_SERVICE_PREFIX}:{host}", username)
        except PasswordDeleteError:
            pass
        self._save_hosts(hosts)
        return True
