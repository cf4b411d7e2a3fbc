"""Generic CLI Plugin: the prompt is the only argument."""

from typing import List, Optional

from coding_agent_hub.cli_plugins.base import ArgStrategy
from coding_agent_hub.cli_plugins.registry import cli_plugin


@cli_plugin(ArgStrategy.GENERIC)
class GenericPlugin:
    """Fallback plugin for operator-defined CLIs."""

    def build_args(
        self,
        prompt: str,
        model: str,
        working_dir: Optional[str] = None,
    ) -> List[str]:
        _ = model, working_dir
        return [prompt]
