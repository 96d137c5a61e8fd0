"""
Live UI notification.

Tells a running Knowns web server that imported content changed so open
dashboards can refresh. A missing server is the normal case for CLI use,
so failures are logged and otherwise ignored.
"""

import json
import time
from pathlib import Path
from typing import Optional

import httpx

from knowns.constants import DEFAULT_SERVER_PORT, NOTIFY_TIMEOUT, SERVER_PORT_FILE
from knowns.logging import get_logger, log_api_call
from knowns.utils.project import get_config_path, get_knowns_dir

logger = get_logger("knowns.utils.notify")


def get_server_port(project_root: Path) -> int:
    """
    Resolve the dashboard port: running server's port file, then
    settings.serverPort in config.json, then the default.
    """
    port_file = get_knowns_dir(project_root) / SERVER_PORT_FILE
    if port_file.exists():
        try:
            port = int(port_file.read_text(encoding="utf-8").strip())
            if port > 0:
                return port
        except (OSError, ValueError):
            pass

    config_path = get_config_path(project_root)
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                port = (json.load(f).get("settings") or {}).get("serverPort")
            if isinstance(port, int) and port > 0:
                return port
        except (OSError, ValueError, AttributeError):
            pass

    return DEFAULT_SERVER_PORT


def notify_imports_changed(
    project_root: Path,
    name: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> bool:
    """
    POST an imports:updated event to the local server.

    Returns:
        True if the server acknowledged the notification
    """
    url = f"http://localhost:{get_server_port(project_root)}/api/notify"
    payload = {"type": "imports:updated"}
    if name:
        payload["name"] = name

    started = time.monotonic()
    owns_client = client is None
    client = client or httpx.Client(timeout=NOTIFY_TIMEOUT)
    try:
        response = client.post(url, json=payload)
        log_api_call("POST", url, response.status_code, time.monotonic() - started)
        return response.is_success
    except httpx.HTTPError as e:
        logger.debug(f"UI notification skipped, server not reachable: {e}")
        return False
    finally:
        if owns_client:
            client.close()
