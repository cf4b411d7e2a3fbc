"""
Base CLI Plugin Protocol and Types.

Defines the interface that every argument-building plugin implements,
plus the closed set of strategies a backend descriptor can name.
"""

import logging
from enum import Enum
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


class ArgStrategy(str, Enum):
    """Argument-building strategy for a backend family."""

    CLAUDE = "claude"
    GEMINI = "gemini"
    CODEX = "codex"
    GENERIC = "generic"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ArgStrategy":
        """Map a config string to a strategy; unknown or missing is generic."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.GENERIC
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown arg_builder '{value}', using generic")
            return cls.GENERIC


class CLIPlugin(Protocol):
    """
    Protocol for CLI plugins that build the argument vector for one backend
    family. The prompt always travels as an argument; stdin is never used.
    """

    def build_args(
        self,
        prompt: str,
        model: str,
        working_dir: Optional[str] = None,
    ) -> List[str]:
        """
        Build command arguments for a single invocation.

        Args:
            prompt: The prompt for the agent
            model: Effective model (request override or backend default)
            working_dir: Optional working directory for the invocation

        Returns:
            List of command arguments (not including executable)
        """
        ...
