"""
Claude CLI Plugin.

Command format: claude --print --model <model> --output-format text "<prompt>"
"""

from typing import List, Optional

from coding_agent_hub.cli_plugins.base import ArgStrategy
from coding_agent_hub.cli_plugins.registry import cli_plugin


@cli_plugin(ArgStrategy.CLAUDE)
class ClaudePlugin:
    """CLI plugin for Anthropic Claude Code CLI."""

    def build_args(
        self,
        prompt: str,
        model: str,
        working_dir: Optional[str] = None,
    ) -> List[str]:
        # Claude has no directory flag; the working directory is the cwd
        _ = working_dir
        return ["--print", "--model", model, "--output-format", "text", prompt]
