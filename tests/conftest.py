"""
Shared test fixtures and configuration for Coding Agent Hub tests.
"""

# Note: config.py skips the user's ~/.coding-agent-hub/config.yaml under
# pytest unless HUB_CONFIG_FILE points somewhere explicitly.
import os
import stat
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Variables that would leak operator config into tests
HUB_ENV_VARS = (
    "HUB_CONFIG_FILE",
    "HUB_DEFAULT_TIMEOUT_MS",
    "HUB_IDLE_TIMEOUT_MS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_hub_env(monkeypatch):
    """Start every test from default settings."""
    from coding_agent_hub.config import get_settings

    for key in list(os.environ):
        if key in HUB_ENV_VARS or key.startswith("HUB_"):
            monkeypatch.delenv(key, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_script(tmp_path):
    """Write an executable script and return its path as a string."""

    def _make(body: str, name: str = "fake-cli") -> str:
        path = tmp_path / name
        path.write_text(body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def python_script(make_script):
    """Write an executable Python script run by the current interpreter."""

    def _make(source: str, name: str = "fake-cli") -> str:
        return make_script(f"#!{sys.executable}\n{source}", name)

    return _make
