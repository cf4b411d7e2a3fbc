"""
Codex CLI Plugin.

Command format:
    codex exec "<prompt>" --json --model <model> --full-auto [--cd <dir>]
"""

from typing import List, Optional

from coding_agent_hub.cli_plugins.base import ArgStrategy
from coding_agent_hub.cli_plugins.registry import cli_plugin


@cli_plugin(ArgStrategy.CODEX)
class CodexPlugin:
    """CLI plugin for OpenAI Codex CLI."""

    def build_args(
        self,
        prompt: str,
        model: str,
        working_dir: Optional[str] = None,
    ) -> List[str]:
        args = ["exec", prompt, "--json", "--model", model, "--full-auto"]

        if working_dir:
            args.extend(["--cd", working_dir])

        return args
