"""Shared pytest configuration and fixtures for the Knowns test suite.

This module provides:
- Isolation of user config and log directories from the real home
- Disposable project roots and source trees
- Test markers
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add src/ to path so test modules can import the knowns package
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

# Modules create their loggers at import time; keep those files out of $HOME
_session_home = Path(tempfile.mkdtemp(prefix="knowns-tests-"))
os.environ["XDG_DATA_HOME"] = str(_session_home / "data")
os.environ["XDG_CONFIG_HOME"] = str(_session_home / "config")


def write_tree(root: Path, files: dict) -> Path:
    """Create files below root from a {relative path: text or bytes} mapping."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Every test gets its own user config dir (settings, git hosts)."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "knowns"


@pytest.fixture
def tree():
    """Helper that writes a {path: content} mapping below a root."""
    return write_tree


@pytest.fixture
def project(tmp_path):
    """A Knowns project root with an empty .knowns/ directory."""
    root = tmp_path / "project"
    (root / ".knowns").mkdir(parents=True)
    return root


@pytest.fixture
def source(tmp_path):
    """A local source directory with a few docs."""
    return write_tree(
        tmp_path / "shared-docs",
        {
            "a.md": "# A\n",
            "guides/setup.md": "Setup steps\n",
            "guides/deep/nested.md": "Nested\n",
            "notes.txt": "plain text\n",
        },
    )


@pytest.fixture
def knowns_source(tmp_path):
    """A local source that is itself a Knowns project."""
    return write_tree(
        tmp_path / "team-kb",
        {
            "README.md": "outside .knowns\n",
            ".knowns/templates/component/template.md": "tpl\n",
            ".knowns/docs/architecture.md": "arch\n",
            ".knowns/tasks/task-1.md": "task\n",
        },
    )


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (slower)"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their location."""
    for item in items:
        if "integration" not in item.nodeid:
            item.add_marker(pytest.mark.unit)
