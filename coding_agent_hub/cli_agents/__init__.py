"""
CLI Agents package.

Provides subprocess orchestration for CLI-based AI agents (Claude, Gemini, Codex).
Argument building is handled by CLI plugins in cli_plugins/*.
"""

from coding_agent_hub.cli_agents.backends import (
    DEFAULT_BACKENDS,
    BackendDescriptor,
    get_default_backend,
    resolve_backends,
)
from coding_agent_hub.cli_agents.environment import EnvironmentBuilder, build_env
from coding_agent_hub.cli_agents.executor import CLIExecutor, CLIResult
from coding_agent_hub.cli_agents.invoker import CLIInvoker, build_args, invoke_cli
from coding_agent_hub.cli_agents.output_extractor import (
    ExtractedMessage,
    StdoutCollector,
    extract_message_content,
)

__all__ = [
    "DEFAULT_BACKENDS",
    "BackendDescriptor",
    "get_default_backend",
    "resolve_backends",
    "EnvironmentBuilder",
    "build_env",
    "CLIExecutor",
    "CLIResult",
    "CLIInvoker",
    "build_args",
    "invoke_cli",
    "ExtractedMessage",
    "StdoutCollector",
    "extract_message_content",
]
