"""
CLI Plugins Package.

Provides argument-building plugins for the supported CLI families
(Claude, Gemini, Codex) plus a generic fallback.

Uses @cli_plugin decorator for registration.
"""

from coding_agent_hub.cli_plugins.base import ArgStrategy, CLIPlugin
from coding_agent_hub.cli_plugins.registry import (
    CLI_PLUGIN_REGISTRY,
    cli_plugin,
    get_cli_plugin,
    list_cli_plugins,
    verify_registry,
)

# Import plugins to trigger registration via @cli_plugin decorator
from coding_agent_hub.cli_plugins import claude as _claude  # noqa: F401
from coding_agent_hub.cli_plugins import gemini as _gemini  # noqa: F401
from coding_agent_hub.cli_plugins import codex as _codex  # noqa: F401
from coding_agent_hub.cli_plugins import generic as _generic  # noqa: F401

verify_registry()

__all__ = [
    "ArgStrategy",
    "CLIPlugin",
    "CLI_PLUGIN_REGISTRY",
    "cli_plugin",
    "get_cli_plugin",
    "list_cli_plugins",
    "verify_registry",
]
