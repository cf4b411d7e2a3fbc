"""
Gemini CLI Plugin.

Command format:
    gemini -p "<prompt>" --output-format json --yolo -m <model>
        [--include-directories <dir>]

Output is a JSON object whose "response" field carries the answer.
"""

from typing import List, Optional

from coding_agent_hub.cli_plugins.base import ArgStrategy
from coding_agent_hub.cli_plugins.registry import cli_plugin


@cli_plugin(ArgStrategy.GEMINI)
class GeminiPlugin:
    """CLI plugin for Google Gemini CLI."""

    def build_args(
        self,
        prompt: str,
        model: str,
        working_dir: Optional[str] = None,
    ) -> List[str]:
        args = ["-p", prompt, "--output-format", "json", "--yolo", "-m", model]

        if working_dir:
            args.extend(["--include-directories", working_dir])

        return args
